import logging
from typing import Optional

from interaction_log import InteractionLog, PRICE_QUERIES
from kisan_agents.llm import KisanMitraLLM, LLMError, parse_json_response
from kisan_agents.tools import market_data_tool
from kisan_models import MarketData, MarketPriceAnalysis, MarketPriceRequest
from config import MARKET_PRICE_SYSTEM_PROMPT

logger = logging.getLogger(__name__)

class PriceAgentNode:
    """Price Agent - Provides market price information and selling advice"""

    def __init__(self, llm: Optional[KisanMitraLLM] = None, interaction_log: Optional[InteractionLog] = None):
        self.llm = llm or KisanMitraLLM()
        self.interaction_log = interaction_log

    def get_market_data(self, request: MarketPriceRequest) -> MarketData:
        result = market_data_tool.invoke({"crop": request.crop, "location": request.location})
        return MarketData.model_validate_json(result)

    def process(self, request: MarketPriceRequest) -> MarketPriceAnalysis:
        """Summarize the market data for a crop and advise whether to sell or wait"""
        logger.info(f"PriceAgent processing crop: {request.crop}, location: {request.location}")

        market_data = self.get_market_data(request)
        context = (
            f"The farmer is interested in {request.crop} prices in {request.location}.\n"
            f"Current market data: {market_data.model_dump_json()}"
        )

        try:
            response = self.llm.chat(MARKET_PRICE_SYSTEM_PROMPT, context)
            analysis = MarketPriceAnalysis.model_validate(parse_json_response(response))
        except (LLMError, ValueError) as e:
            logger.warning(f"Using data-only price summary: {e}")
            analysis = self._summarize(market_data)

        logger.info(f"PriceAgent output: {analysis}")
        self._log(request, analysis)
        return analysis

    def _summarize(self, market_data: MarketData) -> MarketPriceAnalysis:
        """Plain summary built from the market data alone"""
        trend_lower = market_data.trend.lower()
        if "sell" in trend_lower or "increasing" in trend_lower:
            advice = f"Selling your {market_data.crop} now looks favourable."
        elif "wait" in trend_lower or "decreasing" in trend_lower:
            advice = f"Consider waiting before selling your {market_data.crop}."
        else:
            advice = f"Prices for {market_data.crop} are steady; sell if you need cash now, otherwise watch the market."

        summary = (
            f"{market_data.crop.title()} is trading at {market_data.price} in {market_data.location}. "
            f"{market_data.trend}"
        )
        return MarketPriceAnalysis(summary=summary, advice=advice)

    def _log(self, request: MarketPriceRequest, analysis: MarketPriceAnalysis):
        if self.interaction_log is None:
            return
        try:
            self.interaction_log.write(PRICE_QUERIES, {"query": request, "result": analysis})
        except Exception as e:
            logger.error(f"Error logging price query: {e}")
