from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, ConfigDict, Field
from uuid import UUID

from src.subscriptions.models import SubscriptionPlan


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserRegister(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    company: Optional[str] = None
    plan: SubscriptionPlan = SubscriptionPlan.FREE


class UserResponse(BaseModel):
    id: UUID
    email: str
    first_name: str
    last_name: str
    company: Optional[str] = None
    role: str
    plan: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthPayload(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserResponse
