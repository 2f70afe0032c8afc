import pytest

from interaction_log import DISEASE_DIAGNOSIS_LOGS
from kisan_agents.disease_agent import DiagnosisError, DiseaseAgentNode
from kisan_agents.llm import LLMError
from kisan_models import SymptomReport

PHOTO = "data:image/jpeg;base64," + "A" * 500


def test_image_diagnosis_parses_model_json(mock_llm, recording_log):
    mock_llm.chat_with_image.return_value = '```json\n{"disease": "Early blight", "remedy": "Spray neem oil"}\n```'
    agent = DiseaseAgentNode(mock_llm, recording_log)

    diagnosis = agent.diagnose_image(PHOTO)

    assert diagnosis.disease == "Early blight"
    assert diagnosis.remedy == "Spray neem oil"
    collection, payload, _ = recording_log.entries[0]
    assert collection == DISEASE_DIAGNOSIS_LOGS
    assert payload["image_preview"] == PHOTO[:100] + "..."


@pytest.mark.parametrize("photo", ["", "not a data uri", "data:text/plain;base64,SGVsbG8="])
def test_invalid_photo_gives_failed_diagnosis(mock_llm, recording_log, photo):
    diagnosis = DiseaseAgentNode(mock_llm, recording_log).diagnose_image(photo)

    assert diagnosis.disease == "Diagnosis Failed"
    mock_llm.chat_with_image.assert_not_called()
    assert recording_log.entries == []


def test_model_failure_gives_failed_diagnosis(mock_llm, recording_log):
    mock_llm.chat_with_image.side_effect = LLMError("timeout")

    diagnosis = DiseaseAgentNode(mock_llm, recording_log).diagnose_image(PHOTO)

    assert diagnosis.disease == "Diagnosis Failed"
    assert "unable to analyze the image" in diagnosis.remedy
    assert recording_log.entries == []


def test_unparsable_answer_gives_failed_diagnosis(mock_llm):
    mock_llm.chat_with_image.return_value = "It looks like blight to me."
    assert DiseaseAgentNode(mock_llm).diagnose_image(PHOTO).disease == "Diagnosis Failed"


def test_symptom_diagnosis_sends_crop_and_symptoms(mock_llm):
    mock_llm.chat.return_value = '{"disease": "Powdery mildew", "remedy": "Remove infected leaves"}'
    agent = DiseaseAgentNode(mock_llm)

    diagnosis = agent.diagnose_symptoms(SymptomReport(symptoms="white powder on leaves"))

    assert diagnosis.disease == "Powdery mildew"
    prompt = mock_llm.chat.call_args[0][1]
    assert "Crop: Not Specified" in prompt
    assert "Symptoms: white powder on leaves" in prompt


def test_symptom_diagnosis_raises_on_bad_answer(mock_llm):
    mock_llm.chat.return_value = '{"disease": "Powdery mildew"}'
    with pytest.raises(DiagnosisError):
        DiseaseAgentNode(mock_llm).diagnose_symptoms(SymptomReport(symptoms="spots", crop="tomato"))


def test_symptom_diagnosis_raises_on_model_error(mock_llm):
    mock_llm.chat.side_effect = LLMError("Permission denied")
    with pytest.raises(DiagnosisError, match="Permission denied"):
        DiseaseAgentNode(mock_llm).diagnose_symptoms(SymptomReport(symptoms="spots"))


def test_demo_mode_image_diagnosis(demo_llm):
    diagnosis = DiseaseAgentNode(demo_llm).diagnose_image(PHOTO)
    assert diagnosis.disease == "Unknown disease (demo mode)"
