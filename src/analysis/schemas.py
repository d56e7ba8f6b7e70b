from typing import List
from pydantic import BaseModel, Field, field_validator


def clamp_score(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, float(value)))


class ClassificationResult(BaseModel):
    label: str
    score: float = Field(..., description="Confidence in [0, 1]")

    @field_validator("score")
    @classmethod
    def _bound_score(cls, v: float) -> float:
        return clamp_score(v, 0.0, 1.0)


class ClassificationOutput(BaseModel):
    labels: List[ClassificationResult] = Field(description="Technology areas, most likely first")


class EntityMention(BaseModel):
    label: str = Field(..., description="Entity type, e.g. COMPONENT, MATERIAL, PROCESS, QUANTITY")
    text: str = Field(..., description="The span as written in the source text")


class EntityExtraction(BaseModel):
    entities: List[EntityMention] = Field(default_factory=list)


class QualityAnalysis(BaseModel):
    """Structured assessment of a single invention disclosure."""
    technical_complexity: float = Field(..., description="0-100")
    market_potential: float = Field(..., description="0-100")
    innovation_score: float = Field(..., description="0-100")
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    opportunities: List[str] = Field(default_factory=list)
    risks: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)

    @field_validator("technical_complexity", "market_potential", "innovation_score")
    @classmethod
    def _bound_percent(cls, v: float) -> float:
        return clamp_score(v)

    @classmethod
    def neutral(cls) -> "QualityAnalysis":
        return cls(technical_complexity=50.0, market_potential=50.0, innovation_score=50.0)
