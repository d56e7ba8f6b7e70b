from datetime import date, datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field


class PriorArtCreate(BaseModel):
    patent_number: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    abstract: str = Field(..., min_length=1)
    claims: List[str] = []
    publication_date: Optional[date] = None


class PriorArtResponse(PriorArtCreate):
    id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
