"""
Main API endpoint for Kisan Mitra
"""
import base64
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, UploadFile, File
from fastapi.middleware.cors import CORSMiddleware

from config import SCHEMES_FILE, LOG_LEVEL, LOG_FORMAT, API_HOST, API_PORT
from interaction_log import create_interaction_log
from kisan_agents.disease_agent import DiseaseAgentNode, DiagnosisError
from kisan_agents.llm import KisanMitraLLM
from kisan_agents.price_agent import PriceAgentNode
from kisan_agents.scheme_agent import SchemeAgentNode
from kisan_models import (
    AssistantRequest, AssistantResponse, DiseaseDiagnosis, ImageDiagnosisRequest,
    MarketPriceAnalysis, MarketPriceRequest, SchemeQueryRequest, SchemeQueryResult, SymptomReport,
)
from scheme_corpus import load_corpus
from workflow import KisanBotWorkflow

logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
logger = logging.getLogger(__name__)

# Built once per process; the corpus and index are read-only afterwards
interaction_log = create_interaction_log()
llm = KisanMitraLLM()
scheme_agent = SchemeAgentNode(load_corpus(SCHEMES_FILE), interaction_log=interaction_log)
disease_agent = DiseaseAgentNode(llm, interaction_log)
price_agent = PriceAgentNode(llm, interaction_log)
kisan_bot = KisanBotWorkflow(scheme_agent, llm=llm, interaction_log=interaction_log,
                             disease_agent=disease_agent, price_agent=price_agent)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Flush pending log writes on shutdown
    interaction_log.close()


app = FastAPI(title="Kisan Mitra API", version="1.0.0", lifespan=lifespan)

# Enable CORS for the web frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:9002"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    return {"message": "Kisan Mitra API", "version": "1.0.0"}


@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "schemes_loaded": len(scheme_agent.corpus)}


@app.post("/api/schemes", response_model=SchemeQueryResult)
def find_scheme(request: SchemeQueryRequest):
    """Find the government scheme that best matches the farmer's question"""
    return scheme_agent.resolve(request.query)


@app.post("/api/diagnose", response_model=DiseaseDiagnosis)
def diagnose_image(request: ImageDiagnosisRequest):
    """Diagnose a crop disease from a photo data URI"""
    return disease_agent.diagnose_image(request.photo_data_uri)


@app.post("/api/diagnose/upload", response_model=DiseaseDiagnosis)
async def diagnose_upload(image: UploadFile = File(...)):
    """Diagnose a crop disease from an uploaded photo"""
    content = await image.read()
    if not content:
        raise HTTPException(status_code=400, detail="Image file is empty")

    content_type = image.content_type or "image/jpeg"
    photo_data_uri = f"data:{content_type};base64,{base64.b64encode(content).decode('ascii')}"
    logger.info(f"Diagnosing uploaded image {image.filename} ({content_type}, {len(content)} bytes)")
    return disease_agent.diagnose_image(photo_data_uri)


@app.post("/api/diagnose/symptoms", response_model=DiseaseDiagnosis)
def diagnose_symptoms(report: SymptomReport):
    """Diagnose a crop disease from a text description of symptoms"""
    try:
        return disease_agent.diagnose_symptoms(report)
    except DiagnosisError as e:
        logger.error(f"Error diagnosing symptoms: {e}")
        raise HTTPException(status_code=502, detail=str(e))


@app.post("/api/market-price", response_model=MarketPriceAnalysis)
def market_price(request: MarketPriceRequest):
    """Market price summary with advice on whether to sell or wait"""
    return price_agent.process(request)


@app.post("/api/assistant", response_model=AssistantResponse)
def ask_assistant(request: AssistantRequest):
    """Ask KisanBot a question in any supported language"""
    return AssistantResponse(response=kisan_bot.ask(request.query, request.language.value))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api:app", host=API_HOST, port=API_PORT)
