from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict

from src.subscriptions.models import SubscriptionPlan, SubscriptionStatus


class SubscriptionCreate(BaseModel):
    plan: SubscriptionPlan = SubscriptionPlan.FREE


class SubscriptionStatusUpdate(BaseModel):
    status: SubscriptionStatus


class SubscriptionPlanUpdate(BaseModel):
    plan: SubscriptionPlan


class SubscriptionResponse(BaseModel):
    id: UUID
    user_id: UUID
    plan: SubscriptionPlan
    status: SubscriptionStatus
    start_date: datetime
    current_period_start: datetime
    current_period_end: datetime
    cancelled_at: Optional[datetime] = None
    auto_renew: bool

    model_config = ConfigDict(from_attributes=True)
