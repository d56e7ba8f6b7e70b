from sqlalchemy import Column, String, Text, Date, JSON
from sqlalchemy.dialects.postgresql import JSONB
from src.database import Base
from src.shared.models import AuditMixin


class PriorArt(Base, AuditMixin):
    """Published patent in the reference corpus used for similarity analysis."""
    __tablename__ = "prior_art"

    patent_number = Column(String, unique=True, index=True, nullable=False)
    title = Column(String, nullable=False)
    abstract = Column(Text, nullable=False)
    claims = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=list)
    publication_date = Column(Date, nullable=True)
