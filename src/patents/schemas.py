import re
from datetime import date, datetime, time, timezone
from typing import List, Literal, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.auth.schemas import UserResponse
from src.documents.schemas import DocumentResponse
from src.patents.models import PatentStatus
from src.reports.schemas import SearchReport


DATE_ONLY_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


def normalize_jurisdictions(values: Optional[List[str]]) -> Optional[List[str]]:
    """Upper-case codes, drop blanks and duplicates, keep first-seen order."""
    if values is None:
        return None
    seen = []
    for value in values:
        code = (value or "").strip().upper()
        if code and code not in seen:
            seen.append(code)
    return seen


class PatentBase(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    inventors: List[str] = []
    jurisdictions: List[str] = []
    claims: List[str] = []
    technical_field: Optional[str] = None
    background_art: Optional[str] = None

    @field_validator("jurisdictions")
    @classmethod
    def _normalize_jurisdictions(cls, v):
        return normalize_jurisdictions(v)


class PatentCreate(PatentBase):
    pass


class PatentUpdate(PatentBase):
    """Partial update: only fields present in the payload are replaced."""
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    inventors: Optional[List[str]] = None
    jurisdictions: Optional[List[str]] = None
    claims: Optional[List[str]] = None
    patent_number: Optional[str] = None


class PatentStatusUpdate(BaseModel):
    status: PatentStatus


class PatentResponse(BaseModel):
    id: UUID
    title: str
    description: str
    inventors: List[str] = []
    jurisdictions: List[str] = []
    claims: List[str] = []
    technical_field: Optional[str] = None
    background_art: Optional[str] = None
    status: PatentStatus
    uniqueness_score: Optional[float] = None
    market_potential: Optional[float] = None
    filing_date: Optional[datetime] = None
    grant_date: Optional[datetime] = None
    patent_number: Optional[str] = None
    search_report: Optional[SearchReport] = None
    owner_id: UUID
    owner: Optional[UserResponse] = None
    documents: List[DocumentResponse] = []
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PatentSearch(BaseModel):
    query: Optional[str] = None
    technical_field: Optional[str] = None
    jurisdictions: Optional[List[str]] = None
    status: Optional[List[PatentStatus]] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    sort_by: str = "created_at"
    sort_direction: Literal["asc", "desc"] = "desc"
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)

    @field_validator("jurisdictions")
    @classmethod
    def _normalize_jurisdictions(cls, v):
        return normalize_jurisdictions(v)

    @field_validator("date_from", "date_to", mode="before")
    @classmethod
    def _dates_cover_whole_days(cls, v, info):
        # A bare date covers the whole day: from its start, or up to its end
        if isinstance(v, str) and DATE_ONLY_RE.fullmatch(v.strip()):
            v = date.fromisoformat(v.strip())
        if isinstance(v, date) and not isinstance(v, datetime):
            return datetime.combine(v, time.max if info.field_name == "date_to" else time.min)
        return v

    @field_validator("date_from", "date_to")
    @classmethod
    def _naive_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        # Timestamps are stored as naive UTC
        if v is not None and v.tzinfo is not None:
            return v.astimezone(timezone.utc).replace(tzinfo=None)
        return v


class PatentSearchResult(BaseModel):
    items: List[PatentResponse]
    total_count: int
    page: int
    total_pages: int
