"""
Configuration file for Kisan Mitra
"""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# LLM Configuration - Groq API (OpenAI compatible)
LLM_MODEL = os.getenv("LLM_MODEL", "openai/gpt-oss-20b")
VISION_MODEL = os.getenv("VISION_MODEL", "meta-llama/llama-4-scout-17b-16e-instruct")
GROQ_API_KEY = os.getenv("GROQ_API_KEY")
GROQ_API_BASE = os.getenv("GROQ_API_BASE", "https://api.groq.com/openai/v1")

# File paths
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
SCHEMES_FILE = os.getenv("SCHEMES_FILE", os.path.join(BASE_DIR, "data", "govt_schemes.json"))
LOGS_FILE = os.getenv("LOGS_FILE", "kisan_mitra_logs.jsonl")

# Firebase (interaction logs)
FIREBASE_CREDENTIALS_PATH = os.getenv("FIREBASE_CREDENTIALS_PATH")
FIREBASE_CREDENTIALS_JSON = os.getenv("FIREBASE_CREDENTIALS_JSON")
LOG_WORKERS = int(os.getenv("LOG_WORKERS", "2"))

# Placeholder session info until auth exists
SESSION_ID = "session_placeholder_id"
SESSION_LANGUAGE = "en"

# Scheme search
# Scores run 0-100, higher is better
SCHEME_MATCH_THRESHOLD = float(os.getenv("SCHEME_MATCH_THRESHOLD", "45"))
SCHEME_TOKEN_CUTOFF = float(os.getenv("SCHEME_TOKEN_CUTOFF", "80"))
SCHEME_SEARCH_LIMIT = int(os.getenv("SCHEME_SEARCH_LIMIT", "5"))

SCHEME_NOT_FOUND = "Not Found"
SCHEME_ERROR = "Error"
SCHEME_FALLBACK_LINK = "https://www.india.gov.in/"
SCHEME_ERROR_SUMMARY = "Sorry, I had a problem searching for schemes right now. Please try again later."
SCHEME_NOT_FOUND_SUMMARY = (
    'I could not find a government scheme matching "{query}" in the available data. '
    "Try describing what you need in different words, for example \"crop insurance\" or \"loan for seeds\"."
)

# Disease diagnosis
DIAGNOSIS_FAILED = "Diagnosis Failed"
DIAGNOSIS_FAILED_REMEDY = (
    "Sorry, I was unable to analyze the image. This could be due to a temporary issue "
    "or if the image is unclear. Please try again with a different photo."
)


# Mock market data (INR per kg) until AGMARKNET is wired in
DEFAULT_MARKET_QUOTE = {
    "price": "₹22/kg",
    "trend": "Prices have dropped 5% from yesterday. Sell now recommended."
}

MOCK_PRICE_DATA = {
    "tomato": {
        "price": "₹24/kg",
        "trend": "increasing",
        "last_week_price": "₹21/kg",
        "advice": "sell",
        "reasoning": "Prices are rising, good time to sell"
    },
    "potato": {
        "price": "₹18/kg",
        "trend": "stable",
        "last_week_price": "₹18/kg",
        "advice": "wait",
        "reasoning": "Prices are stable, consider waiting for better opportunity"
    },
    "onion": {
        "price": "₹30/kg",
        "trend": "decreasing",
        "last_week_price": "₹34/kg",
        "advice": "wait",
        "reasoning": "Prices are declining, wait for recovery"
    },
    "paddy": {
        "price": "₹23/kg",
        "trend": "stable",
        "last_week_price": "₹22.5/kg",
        "advice": "sell",
        "reasoning": "Stable prices with slight increase, good to sell"
    },
    "wheat": {
        "price": "₹25/kg",
        "trend": "increasing",
        "last_week_price": "₹24/kg",
        "advice": "sell",
        "reasoning": "Prices trending up, favorable selling conditions"
    },
    "ragi": {
        "price": "₹38/kg",
        "trend": "stable",
        "last_week_price": "₹38/kg",
        "advice": "wait",
        "reasoning": "Stable prices, monitor for better opportunities"
    }
}

# Agent configuration
REASONER_SYSTEM_PROMPT = """You are the router for KisanBot, an assistant for farmers in India.
Given a farmer's message, decide which tools are needed. The available intents are:
- "disease": the farmer describes the physical appearance of a sick plant (spots on leaves, wilting, discoloration)
- "market": the farmer asks about crop prices or whether to sell
- "scheme": the farmer asks about government programs, subsidies, loans or insurance
If the message is about none of these (history, celebrities, politics, generic facts), the intent is "out_of_scope".

Output a JSON object with this exact format:
{
  "intent": ["disease", "market", "scheme"] or combinations or ["out_of_scope"],
  "crop": "crop_name" or null,
  "location": "place name" or null,
  "symptoms": "symptom description" or null
}

Examples:
- "My tomato leaves have yellow spots and are curling" -> {"intent": ["disease"], "crop": "tomato", "location": null, "symptoms": "yellow spots and curling leaves"}
- "What is the price of onion in Hassan?" -> {"intent": ["market"], "crop": "onion", "location": "Hassan", "symptoms": null}
- "Is there any loan for buying seeds?" -> {"intent": ["scheme"], "crop": null, "location": null, "symptoms": null}
- "Who won the cricket match?" -> {"intent": ["out_of_scope"], "crop": null, "location": null, "symptoms": null}
"""

IMAGE_DIAGNOSIS_SYSTEM_PROMPT = """You are an expert in plant pathology. Analyze the provided image of a crop and identify any potential diseases or pests.
Based on your analysis, suggest local remedies that a farmer can apply to address the issue.

Output as JSON:
{
  "disease": "the detected disease or pest affecting the crop",
  "remedy": "local remedy suggestions to address the identified issue"
}"""

SYMPTOM_DIAGNOSIS_SYSTEM_PROMPT = """You are an expert in plant pathology. Analyze the provided symptoms for the specified crop and identify the most likely disease or pest.
Based on your analysis, provide a concise diagnosis and suggest simple, actionable remedies a farmer in India can apply.

Output as JSON:
{
  "disease": "the most likely disease or pest",
  "remedy": "simple, actionable remedies"
}"""

MARKET_PRICE_SYSTEM_PROMPT = """You are an agricultural expert advising farmers on market prices.
Based on the current market data, provide a summary of the prices and advice on whether to sell or wait.

Output as JSON:
{
  "summary": "summary of market prices",
  "advice": "advice on whether to sell or wait"
}"""

COORDINATOR_SYSTEM_PROMPT = """You are KisanBot, a friendly and expert AI assistant for farmers in India.
You are given the farmer's question and the outputs of the tools that were run for it.
You MUST respond in the language named in the request.

- For a disease diagnosis, present the disease and remedy clearly. For example: 'Based on the symptoms, it sounds like [disease]. Here is a recommended remedy: [remedy]'.
- For market prices, summarize the price and give the sell or wait advice.
- For a government scheme, name the scheme, explain what it offers and who is eligible, and give the link.
  If the scheme is "Not Found" or "Error", say so politely and suggest rephrasing.
- Format tool results into a clear, natural language paragraph. Do not return raw JSON.
- Your responses should be helpful and easy to understand for a farmer.
"""

ASSISTANT_GUIDANCE_RESPONSE = (
    "I can help with market prices, government schemes, and crop disease symptoms. "
    "You can also explore the 'Price Insights' page for market prices, the 'Crop Diagnosis' page "
    "for diseases, and the 'Schemes' page for government programs. Please try rephrasing your question."
)
ASSISTANT_FALLBACK_RESPONSE = "I'm unable to fetch a response right now. Try again shortly or ask something simpler."
ASSISTANT_API_KEY_RESPONSE = "There is an issue with the AI service configuration. Please check your API key."
ASSISTANT_QUOTA_RESPONSE = (
    "The request failed because the API quota has been exceeded. "
    "Please check the billing status and usage limits for your account."
)
ASSISTANT_PERMISSION_RESPONSE = "The AI service permission is denied. Please ensure the API is enabled for your account."

# Logging configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Server
API_HOST = os.getenv("HOST", "0.0.0.0")
API_PORT = int(os.getenv("PORT", "8000"))
