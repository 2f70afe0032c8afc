import logging
import json
from typing import Dict, Any, List, Optional

from kisan_agents.llm import KisanMitraLLM, parse_json_response
from config import (
    REASONER_SYSTEM_PROMPT, COORDINATOR_SYSTEM_PROMPT, MOCK_PRICE_DATA,
    ASSISTANT_GUIDANCE_RESPONSE, SCHEME_NOT_FOUND, SCHEME_ERROR,
)

logger = logging.getLogger(__name__)

VALID_INTENTS = ("disease", "market", "scheme", "out_of_scope")

# Keyword routing used when the model is unavailable or answers badly
DISEASE_KEYWORDS = ['disease', 'sick', 'infected', 'spots', 'spot', 'mold', 'wilting', 'yellow', 'yellowing',
                    'brown', 'black', 'blight', 'mildew', 'rot', 'pest', 'insect', 'curling', 'curled', 'dying']
PRICE_KEYWORDS = ['price', 'market', 'cost', 'rate', 'mandi', 'sell', 'selling']
SCHEME_KEYWORDS = ['scheme', 'schemes', 'subsidy', 'subsidies', 'government', 'govt', 'eligible', 'eligibility',
                   'loan', 'insurance', 'pension', 'assistance', 'program', 'programme', 'yojana']
LOCATION_MARKERS = [' in ', ' at ', ' near ']


class ReasonerNode:
    """Reasoner Node - Analyzes user input and determines which tools to run"""

    def __init__(self, llm: Optional[KisanMitraLLM] = None):
        self.llm = llm or KisanMitraLLM()

    def process(self, user_input: str) -> Dict[str, Any]:
        """Return intent, crop, location and symptoms for the query"""
        logger.info(f"Reasoner processing: {user_input}")

        response = self.llm.chat(REASONER_SYSTEM_PROMPT, user_input)
        try:
            parsed_response = parse_json_response(response)
        except ValueError:
            logger.warning("Failed to parse JSON, using fallback logic")
            parsed_response = self._fallback_reasoning(user_input)

        intent = parsed_response.get("intent") or []
        if isinstance(intent, str):
            intent = [intent]
        intent = [i for i in intent if i in VALID_INTENTS]
        if "out_of_scope" in intent or not intent:
            intent = ["out_of_scope"]

        result = {
            "intent": intent,
            "crop": parsed_response.get("crop"),
            "location": parsed_response.get("location"),
            "symptoms": parsed_response.get("symptoms"),
        }
        logger.info(f"Reasoner output: {result}")
        return result

    def _fallback_reasoning(self, user_input: str) -> Dict[str, Any]:
        """Keyword-based reasoning when the model answer is unusable"""
        user_lower = user_input.lower()

        has_disease = any(keyword in user_lower for keyword in DISEASE_KEYWORDS)
        has_price = any(keyword in user_lower for keyword in PRICE_KEYWORDS)
        has_scheme = any(keyword in user_lower for keyword in SCHEME_KEYWORDS)

        crop = None
        for crop_name in MOCK_PRICE_DATA.keys():
            if crop_name in user_lower:
                crop = crop_name
                break

        location = None
        for marker in LOCATION_MARKERS:
            position = user_lower.rfind(marker)
            if position != -1:
                words = user_input[position + len(marker):].strip(" ?.!").split()
                if words and words[0][:1].isupper():
                    location = words[0].strip(",")
                    break

        intent = []
        if has_disease:
            intent.append("disease")
        if has_price:
            intent.append("market")
        if has_scheme:
            intent.append("scheme")
        if not intent:
            intent = ["out_of_scope"]

        return {
            "intent": intent,
            "crop": crop,
            "location": location,
            "symptoms": user_input if has_disease else None,
        }


class CoordinatorNode:
    """Coordinator Node - Writes one answer from all tool outputs"""

    def __init__(self, llm: Optional[KisanMitraLLM] = None):
        self.llm = llm or KisanMitraLLM()

    def process(self, user_input: str, agent_outputs: List[Dict[str, Any]], language: str = "english") -> str:
        """Synthesize the final answer in the user's language"""
        logger.info(f"Coordinator processing {len(agent_outputs)} agent outputs")

        if not agent_outputs:
            return ASSISTANT_GUIDANCE_RESPONSE

        if not self.llm.api_available:
            return self._compose(agent_outputs)

        context = f"Respond in {language}.\nOriginal farmer query: {user_input}\n\nTool outputs:\n"
        for output in agent_outputs:
            context += f"- {output.get('agent', 'unknown')}: {json.dumps(output, indent=2, ensure_ascii=False)}\n"

        response = self.llm.chat(COORDINATOR_SYSTEM_PROMPT, context)
        if not response or not response.strip():
            raise ValueError("The model did not return a valid response.")
        logger.info("Coordinator synthesis completed")
        return response.strip()

    def _compose(self, agent_outputs: List[Dict[str, Any]]) -> str:
        """English answer assembled from tool outputs, used in demo mode"""
        parts = []
        for output in agent_outputs:
            agent = output.get("agent")
            if output.get("error"):
                parts.append(f"I could not complete the {agent.replace('_', ' ')} step: {output['error']}")
            elif agent == "disease_agent":
                parts.append(
                    f"Based on the symptoms, it sounds like {output['disease']}. "
                    f"Here is a recommended remedy: {output['remedy']}"
                )
            elif agent == "price_agent":
                parts.append(f"{output['summary']} {output['advice']}")
            elif agent == "scheme_agent":
                if output["scheme"] in (SCHEME_NOT_FOUND, SCHEME_ERROR):
                    parts.append(output["summary"])
                else:
                    parts.append(
                        f"The {output['scheme']} scheme may help you. {output['summary']} "
                        f"Eligibility: {output['eligibility']} More details: {output['link']}"
                    )
        return "\n\n".join(parts)
