from enum import Enum
from sqlalchemy import Column, DateTime, Boolean, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import relationship
from src.database import Base
from src.shared.models import AuditMixin


class SubscriptionPlan(str, Enum):
    FREE = "free"
    PRO = "pro"


class SubscriptionStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    CANCELLED = "CANCELLED"
    PENDING = "PENDING"
    EXPIRED = "EXPIRED"


class Subscription(Base, AuditMixin):
    __tablename__ = "subscriptions"

    user_id = Column(ForeignKey("users.id"), nullable=False, index=True)
    plan = Column(
        SAEnum(SubscriptionPlan, values_callable=lambda e: [m.value for m in e]),
        default=SubscriptionPlan.FREE,
        nullable=False,
    )
    status = Column(SAEnum(SubscriptionStatus), default=SubscriptionStatus.ACTIVE, nullable=False)
    start_date = Column(DateTime, nullable=False)
    current_period_start = Column(DateTime, nullable=False)
    current_period_end = Column(DateTime, nullable=False)
    cancelled_at = Column(DateTime, nullable=True)
    auto_renew = Column(Boolean, default=True, nullable=False)

    user = relationship("User", back_populates="subscriptions")
