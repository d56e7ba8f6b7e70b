from sqlalchemy import Column, String, Boolean
from sqlalchemy.orm import relationship
from src.database import Base
from src.shared.models import AuditMixin


class User(Base, AuditMixin):
    __tablename__ = "users"

    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    company = Column(String, nullable=True)
    role = Column(String, default="USER", nullable=False)
    plan = Column(String, default="free", nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # String based relationships to avoid circular imports
    patents = relationship("Patent", back_populates="owner")
    subscriptions = relationship("Subscription", back_populates="user")
