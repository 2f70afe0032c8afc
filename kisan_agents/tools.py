import json
import logging
from datetime import datetime

from langchain_core.tools import tool
from config import MOCK_PRICE_DATA, DEFAULT_MARKET_QUOTE

logger = logging.getLogger(__name__)

# --- Helper Functions ---

def truncate_text(text: str, max_chars: int = 200) -> str:
    """Helper function to truncate text to max_chars"""
    if not text:
        return ""
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "..."

def _lookup_price(crop_name: str) -> dict:
    """Find mock price data for a crop, direct match first then partial"""
    crop_lower = crop_name.strip().lower()

    if crop_lower in MOCK_PRICE_DATA:
        return MOCK_PRICE_DATA[crop_lower]

    for key in MOCK_PRICE_DATA:
        if crop_lower and (key in crop_lower or crop_lower in key):
            return MOCK_PRICE_DATA[key]

    return None

# --- Tools ---

@tool
def market_data_tool(crop: str, location: str) -> str:
    """Retrieves the current market data for a given crop and location."""
    # TODO: fetch live quotes from AGMARKNET instead of the mock table
    price_info = _lookup_price(crop)
    if price_info is None:
        logger.info(f"No mock price data for {crop}, using default quote")
        price = DEFAULT_MARKET_QUOTE["price"]
        trend = DEFAULT_MARKET_QUOTE["trend"]
    else:
        price = price_info["price"]
        trend = (
            f"Prices are {price_info['trend']} (last week {price_info['last_week_price']}). "
            f"{price_info['reasoning']}. Recommended: {price_info['advice']}."
        )

    return json.dumps({
        "crop": crop,
        "location": location,
        "price": price,
        "trend": trend,
        "date": datetime.now().strftime("%Y-%m-%d")
    }, ensure_ascii=False)
