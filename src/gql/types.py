from datetime import datetime
from typing import List, Optional

import strawberry
from strawberry.file_uploads import Upload

from src.auth.schemas import UserResponse
from src.documents.schemas import DocumentResponse
from src.patents.schemas import PatentResponse
from src.reports import schemas as report_schemas


@strawberry.type
class User:
    id: strawberry.ID
    email: str
    first_name: str
    last_name: str
    company: Optional[str]
    role: str
    plan: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_schema(cls, user: UserResponse) -> "User":
        return cls(
            id=strawberry.ID(str(user.id)),
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            company=user.company,
            role=user.role,
            plan=user.plan,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


@strawberry.type
class Document:
    id: strawberry.ID
    name: str
    url: str
    type: str
    filename: str
    size: int
    uploaded_at: datetime

    @classmethod
    def from_schema(cls, doc: DocumentResponse) -> "Document":
        return cls(
            id=strawberry.ID(str(doc.id)),
            name=doc.name,
            url=doc.url,
            type=doc.type,
            filename=doc.filename,
            size=doc.size,
            uploaded_at=doc.uploaded_at,
        )


@strawberry.type
class PriorArtReference:
    patent_number: str
    title: str
    relevance_score: float
    matching_claims: List[str]
    publication_date: Optional[str]


@strawberry.type
class AIAnalysis:
    technical_complexity: float
    market_size_estimate: float
    competitive_landscape: List[str]
    innovation_score: float
    risk_factors: List[str]


@strawberry.type
class Classification:
    label: str
    score: float


@strawberry.type
class KeyFeature:
    label: str
    values: List[str]


@strawberry.type
class AIAnalysisDetail(AIAnalysis):
    technical_classification: List[Classification]
    key_features: List[KeyFeature]
    technical_summary: str

    @classmethod
    def from_schema(cls, detail: report_schemas.AIAnalysisDetail) -> "AIAnalysisDetail":
        return cls(
            technical_complexity=detail.technical_complexity,
            market_size_estimate=detail.market_size_estimate,
            competitive_landscape=detail.competitive_landscape,
            innovation_score=detail.innovation_score,
            risk_factors=detail.risk_factors,
            technical_classification=[
                Classification(label=c.label, score=c.score) for c in detail.technical_classification
            ],
            key_features=[KeyFeature(label=k, values=v) for k, v in detail.key_features.items()],
            technical_summary=detail.technical_summary,
        )


@strawberry.type
class SearchReport:
    similarity_score: float
    prior_art_references: List[PriorArtReference]
    ai_analysis: AIAnalysis
    recommendations: List[str]

    @classmethod
    def from_schema(cls, report: report_schemas.SearchReport) -> "SearchReport":
        return cls(
            similarity_score=report.similarity_score,
            prior_art_references=[PriorArtReference(**ref.model_dump()) for ref in report.prior_art_references],
            ai_analysis=AIAnalysis(**report.ai_analysis.model_dump()),
            recommendations=report.recommendations,
        )


@strawberry.type
class Patent:
    id: strawberry.ID
    title: str
    description: str
    inventors: List[str]
    jurisdictions: List[str]
    claims: List[str]
    technical_field: Optional[str]
    background_art: Optional[str]
    status: str
    owner: Optional[User]
    uniqueness_score: Optional[float]
    market_potential: Optional[float]
    filing_date: Optional[datetime]
    grant_date: Optional[datetime]
    patent_number: Optional[str]
    documents: List[Document]
    search_report: Optional[SearchReport]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_data(cls, data) -> "Patent":
        """Build from a service result (serialized patent dict)."""
        patent = PatentResponse.model_validate(data)
        return cls(
            id=strawberry.ID(str(patent.id)),
            title=patent.title,
            description=patent.description,
            inventors=patent.inventors,
            jurisdictions=patent.jurisdictions,
            claims=patent.claims,
            technical_field=patent.technical_field,
            background_art=patent.background_art,
            status=patent.status.value,
            owner=User.from_schema(patent.owner) if patent.owner else None,
            uniqueness_score=patent.uniqueness_score,
            market_potential=patent.market_potential,
            filing_date=patent.filing_date,
            grant_date=patent.grant_date,
            patent_number=patent.patent_number,
            documents=[Document.from_schema(d) for d in patent.documents],
            search_report=SearchReport.from_schema(patent.search_report) if patent.search_report else None,
            created_at=patent.created_at,
            updated_at=patent.updated_at,
        )


@strawberry.type
class SimilarPatent:
    id: strawberry.ID
    title: str
    status: str
    technical_field: Optional[str]
    similarity_score: float


@strawberry.type
class SearchResult:
    patents: List[Patent]
    total_count: int
    page: int
    total_pages: int


@strawberry.type
class AuthPayload:
    token: str
    token_type: str
    user: User


@strawberry.input
class RegisterInput:
    email: str
    password: str
    first_name: str
    last_name: str
    company: Optional[str] = None
    plan: Optional[str] = None


@strawberry.input
class LoginInput:
    email: str
    password: str


@strawberry.input
class PatentInput:
    title: str
    description: str
    inventors: List[str]
    jurisdictions: List[str]
    technical_field: Optional[str] = None
    background_art: Optional[str] = None
    claims: Optional[List[str]] = None


@strawberry.input
class PatentUpdateInput:
    title: Optional[str] = strawberry.UNSET
    description: Optional[str] = strawberry.UNSET
    inventors: Optional[List[str]] = strawberry.UNSET
    jurisdictions: Optional[List[str]] = strawberry.UNSET
    technical_field: Optional[str] = strawberry.UNSET
    background_art: Optional[str] = strawberry.UNSET
    claims: Optional[List[str]] = strawberry.UNSET
    patent_number: Optional[str] = strawberry.UNSET


@strawberry.input
class DateRangeInput:
    from_: Optional[datetime] = strawberry.field(default=None, name="from")
    to: Optional[datetime] = None


@strawberry.input
class SearchInput:
    query: Optional[str] = None
    technical_field: Optional[str] = None
    date_range: Optional[DateRangeInput] = None
    jurisdictions: Optional[List[str]] = None
    status: Optional[List[str]] = None
    sort_by: Optional[str] = None
    sort_direction: Optional[str] = None
    page: Optional[int] = None
    limit: Optional[int] = None


@strawberry.input
class DocumentUploadInput:
    patent_id: strawberry.ID
    file: Upload
    name: Optional[str] = None
    type: Optional[str] = None
