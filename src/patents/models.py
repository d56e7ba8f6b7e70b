from enum import Enum
from sqlalchemy import Column, String, Text, Float, DateTime, Integer, ForeignKey, JSON, Table, Uuid, Enum as SAEnum
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from src.database import Base
from src.shared.models import AuditMixin


class PatentStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    FILED = "filed"
    GRANTED = "granted"
    REJECTED = "rejected"


# Jurisdictions per patent; position keeps the order they were first given in
patent_jurisdictions = Table(
    "patent_jurisdictions",
    Base.metadata,
    Column("patent_id", Uuid(as_uuid=True), ForeignKey("patents.id", ondelete="CASCADE"), primary_key=True),
    Column("jurisdiction", String(32), primary_key=True),
    Column("position", Integer, nullable=False, default=0),
)

JSONType = JSON().with_variant(JSONB(), "postgresql")


class Patent(Base, AuditMixin):
    __tablename__ = "patents"

    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    inventors = Column(JSONType, nullable=False, default=list)
    claims = Column(JSONType, nullable=False, default=list)
    technical_field = Column(String, nullable=True)
    background_art = Column(Text, nullable=True)

    status = Column(
        SAEnum(PatentStatus, values_callable=lambda e: [m.value for m in e]),
        default=PatentStatus.DRAFT,
        nullable=False,
    )
    uniqueness_score = Column(Float, nullable=True)
    market_potential = Column(Float, nullable=True)
    filing_date = Column(DateTime, nullable=True)
    grant_date = Column(DateTime, nullable=True)
    patent_number = Column(String, nullable=True)

    # Last generated SearchReport, overwritten on regeneration
    search_report = Column(JSONType, nullable=True)

    owner_id = Column(ForeignKey("users.id"), nullable=False, index=True)

    owner = relationship("User", back_populates="patents")
    documents = relationship(
        "Document",
        back_populates="patent",
        cascade="all, delete-orphan",
        order_by="Document.created_at",
    )
