"""
KisanBot - LangGraph workflow for the conversational assistant
"""
import logging
from datetime import datetime
from typing import Dict, Any, List, Optional, TypedDict
from langgraph.graph import StateGraph, END

from interaction_log import InteractionLog, AGENT_INTERACTIONS, AGENT_FAILURES
from kisan_agents.disease_agent import DiseaseAgentNode, DiagnosisError
from kisan_agents.llm import KisanMitraLLM
from kisan_agents.price_agent import PriceAgentNode
from kisan_agents.reasoner_coordinator import ReasonerNode, CoordinatorNode
from kisan_agents.scheme_agent import SchemeAgentNode
from kisan_models import MarketPriceRequest, SymptomReport, SupportedLanguage
from config import (
    ASSISTANT_FALLBACK_RESPONSE, ASSISTANT_API_KEY_RESPONSE,
    ASSISTANT_QUOTA_RESPONSE, ASSISTANT_PERMISSION_RESPONSE,
)

logger = logging.getLogger(__name__)

# Tool nodes run in this order when the reasoner asks for more than one
TOOL_NODES = {
    "disease": "disease_agent",
    "market": "price_agent",
    "scheme": "scheme_agent",
}


class WorkflowState(TypedDict):
    """State schema for the LangGraph workflow"""
    user_input: str
    language: str
    reasoner_output: Optional[Dict[str, Any]]
    disease_agent_output: Optional[Dict[str, Any]]
    price_agent_output: Optional[Dict[str, Any]]
    scheme_agent_output: Optional[Dict[str, Any]]
    final_response: Optional[str]
    next_nodes: List[str]
    execution_log: List[Dict[str, Any]]


def fallback_message(error: Exception) -> str:
    """Pick the user-facing message for a failed assistant call"""
    message = str(error).lower()
    if "api key not valid" in message or "invalid api key" in message:
        return ASSISTANT_API_KEY_RESPONSE
    if "quota" in message:
        return ASSISTANT_QUOTA_RESPONSE
    if "permission denied" in message:
        return ASSISTANT_PERMISSION_RESPONSE
    return ASSISTANT_FALLBACK_RESPONSE


class KisanBotWorkflow:
    """Main workflow class: reasoner -> tool agents -> coordinator"""

    def __init__(self, scheme_agent: SchemeAgentNode, llm: Optional[KisanMitraLLM] = None,
                 interaction_log: Optional[InteractionLog] = None,
                 disease_agent: Optional[DiseaseAgentNode] = None,
                 price_agent: Optional[PriceAgentNode] = None):
        llm = llm or KisanMitraLLM()
        self.interaction_log = interaction_log
        self.reasoner = ReasonerNode(llm)
        self.disease_agent = disease_agent or DiseaseAgentNode(llm, interaction_log)
        self.price_agent = price_agent or PriceAgentNode(llm, interaction_log)
        self.scheme_agent = scheme_agent
        self.coordinator = CoordinatorNode(llm)

        # Build the graph
        self.graph = self._build_graph()

    def _build_graph(self):
        """Build the LangGraph workflow"""
        workflow = StateGraph(WorkflowState)

        workflow.add_node("reasoner", self._reasoner_node)
        workflow.add_node("disease_agent", self._disease_agent_node)
        workflow.add_node("price_agent", self._price_agent_node)
        workflow.add_node("scheme_agent", self._scheme_agent_node)
        workflow.add_node("coordinator", self._coordinator_node)

        workflow.set_entry_point("reasoner")

        routes = {name: name for name in TOOL_NODES.values()}
        routes["coordinator"] = "coordinator"
        for node in ["reasoner", *TOOL_NODES.values()]:
            workflow.add_conditional_edges(node, self._route_next, routes)

        workflow.add_edge("coordinator", END)

        return workflow.compile()

    def _route_next(self, state: WorkflowState) -> str:
        """Go to the first tool node still pending, then to the coordinator"""
        next_nodes = state.get("next_nodes", [])
        return next_nodes[0] if next_nodes else "coordinator"

    def _log_step(self, state: WorkflowState, node: str, **entry) -> List[Dict[str, Any]]:
        execution_log = list(state.get("execution_log", []))
        execution_log.append({"node": node, **entry, "timestamp": datetime.now().isoformat()})
        return execution_log

    def _done(self, state: WorkflowState, node: str) -> List[str]:
        return [name for name in state.get("next_nodes", []) if name != node]

    def _reasoner_node(self, state: WorkflowState) -> Dict[str, Any]:
        """Reasoner node execution"""
        logger.info("Executing Reasoner Node")

        result = self.reasoner.process(state["user_input"])
        next_nodes = [TOOL_NODES[intent] for intent in TOOL_NODES if intent in result["intent"]]

        return {
            "reasoner_output": result,
            "next_nodes": next_nodes,
            "execution_log": self._log_step(state, "reasoner", input=state["user_input"], output=result),
        }

    def _disease_agent_node(self, state: WorkflowState) -> Dict[str, Any]:
        """Disease agent node execution"""
        logger.info("Executing Disease Agent Node")

        reasoner_output = state.get("reasoner_output") or {}
        report = SymptomReport(
            symptoms=reasoner_output.get("symptoms") or state["user_input"],
            crop=reasoner_output.get("crop"),
        )
        try:
            output = {"agent": "disease_agent", **self.disease_agent.diagnose_symptoms(report).model_dump()}
        except DiagnosisError as e:
            logger.error(f"Disease agent node error: {e}")
            output = {"agent": "disease_agent", "error": str(e)}

        return {
            "disease_agent_output": output,
            "next_nodes": self._done(state, "disease_agent"),
            "execution_log": self._log_step(state, "disease_agent", input=report.model_dump(), output=output),
        }

    def _price_agent_node(self, state: WorkflowState) -> Dict[str, Any]:
        """Price agent node execution"""
        logger.info("Executing Price Agent Node")

        reasoner_output = state.get("reasoner_output") or {}
        crop = reasoner_output.get("crop")
        if crop:
            request = MarketPriceRequest(crop=crop, location=reasoner_output.get("location") or "India")
            output = {"agent": "price_agent", **self.price_agent.process(request).model_dump()}
        else:
            output = {"agent": "price_agent", "error": "Please tell me which crop you want prices for."}

        return {
            "price_agent_output": output,
            "next_nodes": self._done(state, "price_agent"),
            "execution_log": self._log_step(state, "price_agent", input={"crop": crop}, output=output),
        }

    def _scheme_agent_node(self, state: WorkflowState) -> Dict[str, Any]:
        """Scheme agent node execution"""
        logger.info("Executing Scheme Agent Node")

        output = {"agent": "scheme_agent", **self.scheme_agent.resolve(state["user_input"]).model_dump()}

        return {
            "scheme_agent_output": output,
            "next_nodes": self._done(state, "scheme_agent"),
            "execution_log": self._log_step(state, "scheme_agent", input=state["user_input"], output=output),
        }

    def _coordinator_node(self, state: WorkflowState) -> Dict[str, Any]:
        """Coordinator node execution"""
        logger.info("Executing Coordinator Node")

        agent_outputs = [
            state[key] for key in ("disease_agent_output", "price_agent_output", "scheme_agent_output")
            if state.get(key)
        ]
        response = self.coordinator.process(state["user_input"], agent_outputs, state["language"])

        return {
            "final_response": response,
            "execution_log": self._log_step(state, "coordinator", output=response),
        }

    def run(self, user_input: str, language: str = SupportedLanguage.ENGLISH.value) -> Dict[str, Any]:
        """Run the complete workflow and return the final state; errors propagate"""
        logger.info(f"Starting workflow with input: {user_input}, language: {language}")

        initial_state = WorkflowState(
            user_input=user_input,
            language=language,
            reasoner_output=None,
            disease_agent_output=None,
            price_agent_output=None,
            scheme_agent_output=None,
            final_response=None,
            next_nodes=[],
            execution_log=[]
        )
        return self.graph.invoke(initial_state)

    def ask(self, query: str, language: str = SupportedLanguage.ENGLISH.value) -> str:
        """Answer a farmer's question; never raises"""
        try:
            final_state = self.run(query, language)
            response = final_state.get("final_response")
            if not response:
                raise ValueError("Received an empty or invalid response from the assistant flow.")
        except Exception as e:
            logger.error(f"Error in KisanBot: {e} (input={query!r}, language={language})")
            self._log(AGENT_FAILURES, {"query": query, "error": e}, language)
            return fallback_message(e)

        self._log(AGENT_INTERACTIONS, {"query": query, "response": response}, language)
        return response

    def _log(self, collection: str, payload: Dict[str, Any], language: str):
        if self.interaction_log is None:
            return
        try:
            self.interaction_log.write(collection, payload, language=language)
        except Exception as e:
            logger.error(f"Error logging {collection} entry: {e}")
