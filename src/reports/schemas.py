from typing import Dict, List, Optional
from uuid import UUID
from pydantic import BaseModel, Field

from src.analysis.schemas import ClassificationResult


class PriorArtReference(BaseModel):
    patent_number: str
    title: str
    relevance_score: float = Field(..., description="Cosine relevance as a percentage, 0-100")
    matching_claims: List[str] = []
    publication_date: Optional[str] = None


class AIAnalysis(BaseModel):
    technical_complexity: float
    market_size_estimate: float
    competitive_landscape: List[str] = []
    innovation_score: float
    risk_factors: List[str] = []


class SearchReport(BaseModel):
    similarity_score: float = Field(..., description="Highest prior-art relevance as a percentage, 0-100")
    prior_art_references: List[PriorArtReference] = []
    ai_analysis: AIAnalysis
    recommendations: List[str] = []


class SimilarityAnalysis(BaseModel):
    overall: float = Field(..., description="0-1")
    references: List[PriorArtReference] = []


class AIAnalysisDetail(AIAnalysis):
    technical_classification: List[ClassificationResult] = []
    key_features: Dict[str, List[str]] = {}
    technical_summary: str = ""


class SimilarPatent(BaseModel):
    id: UUID
    title: str
    status: str
    technical_field: Optional[str] = None
    similarity_score: float = Field(..., description="0-1")
