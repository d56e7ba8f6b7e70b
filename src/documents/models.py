from sqlalchemy import Column, String, Integer, ForeignKey
from sqlalchemy.orm import relationship
from src.database import Base
from src.shared.models import AuditMixin


class Document(Base, AuditMixin):
    """Uploaded file (drawings, prior filings, etc.) attached to a patent."""
    __tablename__ = "documents"

    patent_id = Column(ForeignKey("patents.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False, default="application/octet-stream")
    url = Column(String, nullable=False)  # /uploads/<uuid><ext>
    filename = Column(String, nullable=False)  # original client filename
    size = Column(Integer, nullable=False, default=0)

    patent = relationship("Patent", back_populates="documents")

    @property
    def uploaded_at(self):
        return self.created_at
