import logging
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.models import User
from src.exceptions import NotFound, SubscriptionExists
from src.subscriptions.models import Subscription, SubscriptionPlan, SubscriptionStatus

logger = logging.getLogger(__name__)

BILLING_PERIOD = timedelta(days=30)


class SubscriptionService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_active(self, user_id: UUID) -> Subscription | None:
        result = await self.db.execute(
            select(Subscription)
            .where(
                Subscription.user_id == user_id,
                Subscription.status == SubscriptionStatus.ACTIVE,
            )
            .order_by(desc(Subscription.created_at))
            .limit(1)
        )
        return result.scalars().first()

    async def open_subscription(self, user: User, plan: SubscriptionPlan) -> Subscription:
        """Stage a new ACTIVE subscription without committing.

        Registration uses this so the user and the subscription land in one
        transaction.
        """
        if await self._get_active(user.id):
            raise SubscriptionExists()

        now = datetime.utcnow()
        subscription = Subscription(
            user_id=user.id,
            plan=plan,
            status=SubscriptionStatus.ACTIVE,
            start_date=now,
            current_period_start=now,
            current_period_end=now + BILLING_PERIOD,
            auto_renew=True,
        )
        user.plan = plan.value
        self.db.add(subscription)
        return subscription

    async def create_subscription(self, user: User, plan: SubscriptionPlan) -> Subscription:
        subscription = await self.open_subscription(user, plan)
        await self.db.commit()
        await self.db.refresh(subscription)
        logger.info(f"Subscription {subscription.id} opened for user {user.id} on plan {plan.value}")
        return subscription

    async def get_active_subscription(self, user_id: UUID) -> Subscription:
        subscription = await self._get_active(user_id)
        if not subscription:
            raise NotFound("No active subscription found")
        return subscription

    async def _get_owned(self, subscription_id: UUID, user_id: UUID) -> Subscription:
        result = await self.db.execute(
            select(Subscription).where(
                Subscription.id == subscription_id,
                Subscription.user_id == user_id,
            )
        )
        subscription = result.scalar_one_or_none()
        if not subscription:
            raise NotFound("Subscription not found")
        return subscription

    async def update_status(
        self, subscription_id: UUID, user: User, new_status: SubscriptionStatus
    ) -> Subscription:
        subscription = await self._get_owned(subscription_id, user.id)

        if new_status == SubscriptionStatus.ACTIVE and subscription.status != SubscriptionStatus.ACTIVE:
            if await self._get_active(user.id):
                raise SubscriptionExists()

        subscription.status = new_status
        if new_status == SubscriptionStatus.CANCELLED:
            subscription.cancelled_at = datetime.utcnow()
            subscription.auto_renew = False

        await self.db.commit()
        await self.db.refresh(subscription)
        logger.info(f"Subscription {subscription.id} moved to {new_status.value}")
        return subscription

    async def change_plan(
        self, subscription_id: UUID, user: User, new_plan: SubscriptionPlan
    ) -> Subscription:
        subscription = await self._get_owned(subscription_id, user.id)

        now = datetime.utcnow()
        subscription.plan = new_plan
        subscription.current_period_start = now
        subscription.current_period_end = now + BILLING_PERIOD
        if subscription.status == SubscriptionStatus.ACTIVE:
            user.plan = new_plan.value

        await self.db.commit()
        await self.db.refresh(subscription)
        return subscription
