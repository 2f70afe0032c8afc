from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

import api
from kisan_agents.disease_agent import DiseaseAgentNode
from kisan_agents.price_agent import PriceAgentNode
from kisan_agents.scheme_agent import SchemeAgentNode
from scheme_corpus import SchemeCorpus
from workflow import KisanBotWorkflow


@pytest.fixture
def client(monkeypatch, demo_llm, sample_corpus, recording_log):
    scheme_agent = SchemeAgentNode(sample_corpus, interaction_log=recording_log)
    monkeypatch.setattr(api, "scheme_agent", scheme_agent)
    monkeypatch.setattr(api, "disease_agent", DiseaseAgentNode(demo_llm, recording_log))
    monkeypatch.setattr(api, "price_agent", PriceAgentNode(demo_llm, recording_log))
    monkeypatch.setattr(api, "kisan_bot", KisanBotWorkflow(scheme_agent, llm=demo_llm, interaction_log=recording_log))
    return TestClient(api.app)


def test_health_reports_loaded_schemes(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "schemes_loaded": 3}


def test_find_scheme(client):
    response = client.post("/api/schemes", json={"query": "income support scheme for small farmers"})
    assert response.status_code == 200
    assert response.json() == {
        "scheme": "PM-KISAN",
        "summary": "Income support for farmers",
        "eligibility": "Small and marginal farmers",
        "link": "https://pmkisan.gov.in",
    }


def test_find_scheme_not_found(client):
    response = client.post("/api/schemes", json={"query": "xyz totally unrelated gibberish 12345"})
    assert response.json()["scheme"] == "Not Found"


def test_find_scheme_without_corpus(client, monkeypatch):
    monkeypatch.setattr(api, "scheme_agent", SchemeAgentNode(SchemeCorpus()))
    response = client.post("/api/schemes", json={"query": "income support"})
    assert response.status_code == 200
    assert response.json()["scheme"] == "Error"


def test_diagnose_data_uri(client):
    response = client.post("/api/diagnose", json={"photo_data_uri": "data:image/png;base64,iVBORw0KGgo="})
    assert response.status_code == 200
    assert response.json()["disease"] == "Unknown disease (demo mode)"


def test_diagnose_upload(client):
    response = client.post(
        "/api/diagnose/upload",
        files={"image": ("leaf.png", b"\x89PNG\r\n\x1a\nfake", "image/png")},
    )
    assert response.status_code == 200
    assert response.json()["disease"] == "Unknown disease (demo mode)"


def test_diagnose_upload_rejects_empty_file(client):
    response = client.post("/api/diagnose/upload", files={"image": ("leaf.png", b"", "image/png")})
    assert response.status_code == 400


def test_diagnose_symptoms(client):
    response = client.post("/api/diagnose/symptoms", json={"symptoms": "yellow spots", "crop": "tomato"})
    assert response.status_code == 200
    assert response.json()["disease"] == "Unknown disease (demo mode)"


def test_diagnose_symptoms_model_failure(client, monkeypatch, mock_llm):
    mock_llm.chat.return_value = "I am not sure."
    monkeypatch.setattr(api, "disease_agent", DiseaseAgentNode(mock_llm))
    response = client.post("/api/diagnose/symptoms", json={"symptoms": "yellow spots"})
    assert response.status_code == 502


def test_market_price(client):
    response = client.post("/api/market-price", json={"crop": "paddy", "location": "Mandya"})
    assert response.status_code == 200
    assert "₹23/kg" in response.json()["summary"]


def test_assistant(client):
    response = client.post("/api/assistant", json={"query": "Who won the cricket match?", "language": "tamil"})
    assert response.status_code == 200
    assert "Price Insights" in response.json()["response"]


def test_assistant_rejects_unknown_language(client):
    response = client.post("/api/assistant", json={"query": "hello", "language": "klingon"})
    assert response.status_code == 422


def test_shutdown_flushes_interaction_log(monkeypatch):
    log = MagicMock()
    monkeypatch.setattr(api, "interaction_log", log)

    with TestClient(api.app) as client:
        assert client.get("/").status_code == 200
        log.close.assert_not_called()

    log.close.assert_called_once_with()
