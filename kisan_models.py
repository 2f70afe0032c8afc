"""
Data models for Kisan Mitra flows
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from enum import Enum

from config import (
    SCHEME_NOT_FOUND, SCHEME_ERROR, SCHEME_FALLBACK_LINK,
    SCHEME_ERROR_SUMMARY, SCHEME_NOT_FOUND_SUMMARY,
)


class SchemeRecord(BaseModel):
    """A government scheme from the static corpus"""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Scheme name, unique within the corpus")
    summary: str = Field(..., min_length=1, description="Plain-language description of scheme benefits")
    eligibility: str = Field(..., min_length=1, description="Plain-language eligibility criteria")
    link: str = Field(..., min_length=1, description="URL for more information or application")

    @field_validator('name', 'summary', 'eligibility', 'link', mode='before')
    @classmethod
    def strip_text(cls, v):
        """Corpus fields are stored trimmed"""
        if isinstance(v, str):
            return v.strip()
        return v


class MatchCandidate(BaseModel):
    """A corpus record judged relevant to a query"""
    model_config = ConfigDict(frozen=True)

    record: SchemeRecord
    score: float = Field(..., description="Similarity from 0 to 100, higher is better")


class SchemeQueryResult(BaseModel):
    """Scheme information returned to callers"""
    scheme: str = Field(..., description="Matched scheme name, 'Not Found' or 'Error'")
    summary: str = Field(..., description="What the scheme offers")
    eligibility: str = Field(..., description="Eligibility criteria")
    link: str = Field(..., description="Link to apply or read more")

    @classmethod
    def from_record(cls, record: SchemeRecord) -> "SchemeQueryResult":
        return cls(
            scheme=record.name,
            summary=record.summary,
            eligibility=record.eligibility,
            link=record.link,
        )

    @classmethod
    def not_found(cls, query: str) -> "SchemeQueryResult":
        return cls(
            scheme=SCHEME_NOT_FOUND,
            summary=SCHEME_NOT_FOUND_SUMMARY.format(query=query),
            eligibility="N/A",
            link=SCHEME_FALLBACK_LINK,
        )

    @classmethod
    def error(cls) -> "SchemeQueryResult":
        return cls(
            scheme=SCHEME_ERROR,
            summary=SCHEME_ERROR_SUMMARY,
            eligibility="N/A",
            link=SCHEME_FALLBACK_LINK,
        )



class SupportedLanguage(str, Enum):
    """Languages the assistant answers in"""
    ENGLISH = "english"
    HINDI = "hindi"
    KANNADA = "kannada"
    TAMIL = "tamil"


class DiseaseDiagnosis(BaseModel):
    """Diagnosis returned by the disease flows"""
    disease: str = Field(..., description="The detected disease or pest affecting the crop")
    remedy: str = Field(..., description="Local remedy suggestions to address the issue")


class ImageDiagnosisRequest(BaseModel):
    """Crop photo as a data URI"""
    photo_data_uri: str = Field(..., description="Format: 'data:<mimetype>;base64,<encoded_data>'")


class SymptomReport(BaseModel):
    """Text description of crop symptoms"""
    symptoms: str = Field(..., description="A text description of the crop symptoms")
    crop: Optional[str] = Field(None, description="The name of the crop affected")


class MarketPriceRequest(BaseModel):
    """Crop and location to get market prices for"""
    crop: str = Field(..., description="The crop, e.g. tomato, paddy")
    location: str = Field(..., description="The location, e.g. Mandya, Bengaluru")


class MarketData(BaseModel):
    """Current market data for a crop"""
    crop: str
    location: str
    price: str = Field(..., description="Current market price in the given location")
    trend: str = Field(..., description="Trend of the market price")


class MarketPriceAnalysis(BaseModel):
    """Price summary with sell/wait advice"""
    summary: str = Field(..., description="Summary of the current market price trend")
    advice: str = Field(..., description="Suggested action for the farmer")


class SchemeQueryRequest(BaseModel):
    query: str


class AssistantRequest(BaseModel):
    query: str
    language: SupportedLanguage = SupportedLanguage.ENGLISH


class AssistantResponse(BaseModel):
    response: str
