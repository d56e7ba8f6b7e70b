from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.database import get_db
from src.auth.models import User
from src.auth.dependencies import get_current_active_user
from src.subscriptions.schemas import (
    SubscriptionCreate,
    SubscriptionPlanUpdate,
    SubscriptionResponse,
    SubscriptionStatusUpdate,
)
from src.subscriptions.service import SubscriptionService

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


@router.post("", response_model=SubscriptionResponse, status_code=201)
async def create_subscription(
    subscription: SubscriptionCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    service = SubscriptionService(db)
    return await service.create_subscription(current_user, subscription.plan)


@router.get("/active", response_model=SubscriptionResponse)
async def get_active_subscription(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    service = SubscriptionService(db)
    return await service.get_active_subscription(current_user.id)


@router.patch("/{subscription_id}/status", response_model=SubscriptionResponse)
async def update_subscription_status(
    subscription_id: UUID,
    update: SubscriptionStatusUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    service = SubscriptionService(db)
    return await service.update_status(subscription_id, current_user, update.status)


@router.patch("/{subscription_id}/plan", response_model=SubscriptionResponse)
async def update_subscription_plan(
    subscription_id: UUID,
    update: SubscriptionPlanUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    service = SubscriptionService(db)
    return await service.change_plan(subscription_id, current_user, update.plan)
