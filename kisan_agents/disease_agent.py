import logging
import re
from typing import Optional

from interaction_log import InteractionLog, DISEASE_DIAGNOSIS_LOGS
from kisan_agents.llm import KisanMitraLLM, LLMError, parse_json_response
from kisan_agents.tools import truncate_text
from kisan_models import DiseaseDiagnosis, SymptomReport
from config import (
    IMAGE_DIAGNOSIS_SYSTEM_PROMPT, SYMPTOM_DIAGNOSIS_SYSTEM_PROMPT,
    DIAGNOSIS_FAILED, DIAGNOSIS_FAILED_REMEDY,
)

logger = logging.getLogger(__name__)

_DATA_URI = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.+)$", re.DOTALL)


class DiagnosisError(Exception):
    """The model could not produce a diagnosis"""


class DiseaseAgentNode:
    """Disease Agent - Diagnoses plant diseases from a photo or a symptom description"""

    def __init__(self, llm: Optional[KisanMitraLLM] = None, interaction_log: Optional[InteractionLog] = None):
        self.llm = llm or KisanMitraLLM()
        self.interaction_log = interaction_log

    def diagnose_image(self, photo_data_uri: str) -> DiseaseDiagnosis:
        """
        Diagnose a crop photo given as 'data:<mimetype>;base64,<encoded_data>'.

        Never raises: any failure returns the 'Diagnosis Failed' result, which
        is not logged.
        """
        logger.info("DiseaseAgent processing image")

        try:
            match = _DATA_URI.match(photo_data_uri or "")
            if not match or not match.group("mime").startswith("image/"):
                raise DiagnosisError("Photo must be an image data URI")

            response = self.llm.chat_with_image(
                IMAGE_DIAGNOSIS_SYSTEM_PROMPT,
                "Use the following image for diagnosis.",
                photo_data_uri,
            )
            diagnosis = self._parse(response)
        except (DiagnosisError, LLMError) as e:
            logger.error(f"Error in image diagnosis: {e}")
            return DiseaseDiagnosis(disease=DIAGNOSIS_FAILED, remedy=DIAGNOSIS_FAILED_REMEDY)

        logger.info(f"DiseaseAgent (image) identified: {diagnosis.disease}")
        self._log({"image_preview": truncate_text(photo_data_uri, 100), "result": diagnosis})
        return diagnosis

    def diagnose_symptoms(self, report: SymptomReport) -> DiseaseDiagnosis:
        """Diagnose from a text description; raises DiagnosisError on failure"""
        logger.info(f"DiseaseAgent processing symptoms: {report.symptoms}")

        context = (
            f"Crop: {report.crop or 'Not Specified'}\n"
            f"Symptoms: {report.symptoms}"
        )
        try:
            response = self.llm.chat(SYMPTOM_DIAGNOSIS_SYSTEM_PROMPT, context)
        except LLMError as e:
            raise DiagnosisError(f"The model did not return a valid diagnosis from the symptoms provided: {e}") from e

        diagnosis = self._parse(response)
        logger.info(f"DiseaseAgent (symptoms) identified: {diagnosis.disease}")
        return diagnosis

    def _parse(self, response: str) -> DiseaseDiagnosis:
        try:
            return DiseaseDiagnosis.model_validate(parse_json_response(response))
        except ValueError as e:
            raise DiagnosisError(f"The model did not return a valid diagnosis: {e}") from e

    def _log(self, payload):
        if self.interaction_log is None:
            return
        try:
            self.interaction_log.write(DISEASE_DIAGNOSIS_LOGS, payload)
        except Exception as e:
            logger.error(f"Error logging disease diagnosis: {e}")
