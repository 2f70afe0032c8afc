from unittest.mock import MagicMock

import pytest

from interaction_log import InteractionLog
from kisan_agents import llm as llm_module
from kisan_agents.llm import KisanMitraLLM
from scheme_corpus import SchemeCorpus


PM_KISAN = {
    "name": "PM-KISAN",
    "summary": "Income support for farmers",
    "eligibility": "Small and marginal farmers",
    "link": "https://pmkisan.gov.in",
}

SAMPLE_SCHEMES = [
    PM_KISAN,
    {
        "scheme": "Pradhan Mantri Fasal Bima Yojana",
        "summary": "Crop insurance against losses from natural calamities, pests and diseases",
        "eligibility": "All farmers growing notified crops in notified areas",
        "link": "https://pmfby.gov.in/",
    },
    {
        "scheme": "Kisan Credit Card",
        "summary": "Short-term credit for buying seeds, fertilizers and farm inputs at low interest",
        "eligibility": "Farmers, tenant farmers and sharecroppers",
        "link": "https://www.myscheme.gov.in/schemes/kcc",
    },
]


@pytest.fixture
def pm_kisan_corpus():
    return SchemeCorpus.from_dicts([PM_KISAN])


@pytest.fixture
def sample_corpus():
    return SchemeCorpus.from_dicts(SAMPLE_SCHEMES)


@pytest.fixture
def recording_log():
    class RecordingLog(InteractionLog):
        def __init__(self):
            self.entries = []

        def write(self, collection, payload, language=None):
            self.entries.append((collection, payload, language))

        def collections(self):
            return [collection for collection, _, _ in self.entries]

    return RecordingLog()


@pytest.fixture
def failing_log():
    class FailingLog(InteractionLog):
        def __init__(self):
            self.calls = 0

        def write(self, collection, payload, language=None):
            self.calls += 1
            raise RuntimeError("sink unavailable")

        def record(self, query, result):
            self.calls += 1
            raise RuntimeError("sink unavailable")

        def record_failure(self, query, error):
            self.calls += 1
            raise RuntimeError("sink unavailable")

    return FailingLog()


@pytest.fixture
def demo_llm(monkeypatch):
    # No API key: every call is answered by the offline fallback
    monkeypatch.setattr(llm_module, "GROQ_API_KEY", None)
    return KisanMitraLLM()


@pytest.fixture
def mock_llm():
    llm = MagicMock(spec=KisanMitraLLM)
    llm.api_available = True
    return llm


@pytest.fixture
def pm_kisan():
    return dict(PM_KISAN)


@pytest.fixture
def sample_schemes():
    return [dict(item) for item in SAMPLE_SCHEMES]
