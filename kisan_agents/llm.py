import json
import logging
import re
from typing import Any, Dict

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from config import (
    GROQ_API_KEY, GROQ_API_BASE, LLM_MODEL, VISION_MODEL,
    IMAGE_DIAGNOSIS_SYSTEM_PROMPT, SYMPTOM_DIAGNOSIS_SYSTEM_PROMPT,
)

logger = logging.getLogger(__name__)

DEMO_MODE_RESPONSE = "Demo mode response - API not configured"

_FENCED_JSON = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


class LLMError(Exception):
    """Raised when the model API call fails"""


def parse_json_response(text: str) -> Dict[str, Any]:
    """Extract a JSON object from a model answer, with or without a ```json fence"""
    if not text:
        raise ValueError("Empty model response")

    fenced = _FENCED_JSON.search(text)
    candidate = fenced.group(1) if fenced else text
    candidate = candidate.strip()
    if not candidate.startswith("{"):
        start, end = candidate.find("{"), candidate.rfind("}")
        if start == -1 or end <= start:
            raise ValueError("No JSON object in model response")
        candidate = candidate[start:end + 1]

    parsed = json.loads(candidate)
    if not isinstance(parsed, dict):
        raise ValueError("Model response is not a JSON object")
    return parsed


class KisanMitraLLM:
    """Base LLM class for all agents"""
    def __init__(self, model_name: str = LLM_MODEL, vision_model_name: str = VISION_MODEL):

        self.llm = None
        self.vision_llm = None
        self.api_available = False

        if GROQ_API_KEY:
            try:
                self.llm = ChatOpenAI(
                    model=model_name,
                    temperature=0.1,
                    api_key=GROQ_API_KEY,
                    base_url=GROQ_API_BASE
                )
                self.vision_llm = ChatOpenAI(
                    model=vision_model_name,
                    temperature=0.1,
                    api_key=GROQ_API_KEY,
                    base_url=GROQ_API_BASE
                )
                self.api_available = True
                logger.info("Groq API configured successfully")
            except Exception as e:
                logger.warning(f"Failed to initialize Groq API: {e}")
                self.api_available = False
        else:
            logger.info("No Groq API key provided, using fallback logic")

    def chat(self, system_prompt: str, user_input: str) -> str:
        """Generic chat method for all agents"""
        if not self.api_available or not self.llm:
            logger.info("Using fallback logic - no API available")
            return self._fallback_response(system_prompt, user_input)

        messages = [
            SystemMessage(content=system_prompt),
            HumanMessage(content=user_input)
        ]
        return self._invoke(self.llm, messages)

    def chat_with_image(self, system_prompt: str, user_input: str, image_data_uri: str) -> str:
        """Chat with an image attached as a data URI"""
        if not self.api_available or not self.vision_llm:
            logger.info("Using fallback logic - no API available")
            return self._fallback_response(system_prompt, user_input)

        messages = [
            SystemMessage(content=system_prompt),
            HumanMessage(content=[
                {"type": "text", "text": user_input},
                {"type": "image_url", "image_url": {"url": image_data_uri}},
            ])
        ]
        return self._invoke(self.vision_llm, messages)

    def _invoke(self, model: ChatOpenAI, messages) -> str:
        try:
            response = model.invoke(messages)
        except Exception as e:
            logger.error(f"LLM Error: {e}")
            raise LLMError(str(e)) from e

        content = response.content
        if isinstance(content, list):
            content = "".join(part.get("text", "") if isinstance(part, dict) else str(part) for part in content)
        return content

    def _fallback_response(self, system_prompt: str, user_input: str) -> str:
        """Fallback response when API is not available"""
        if system_prompt in (IMAGE_DIAGNOSIS_SYSTEM_PROMPT, SYMPTOM_DIAGNOSIS_SYSTEM_PROMPT):
            return json.dumps({
                "disease": "Unknown disease (demo mode)",
                "remedy": "Running in demo mode - configure the Groq API key for an accurate diagnosis. "
                          "Meanwhile, remove affected leaves and consult your local Krishi Vigyan Kendra."
            })

        return DEMO_MODE_RESPONSE
