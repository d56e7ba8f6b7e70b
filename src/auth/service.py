import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth import models, schemas, security
from src.exceptions import DuplicateEmail, InvalidCredentials
from src.subscriptions.service import SubscriptionService

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_email(self, email: str) -> Optional[models.User]:
        result = await self.db.execute(select(models.User).where(models.User.email == email))
        return result.scalars().first()

    async def authenticate_user(self, email: str, password: str) -> Optional[models.User]:
        user = await self.get_user_by_email(email)
        if not user:
            return None
        if not security.verify_password(password, user.hashed_password):
            return None
        return user

    def issue_token(self, user: models.User) -> schemas.AuthPayload:
        token = security.create_access_token(data={"sub": str(user.id), "email": user.email})
        return schemas.AuthPayload(
            token=token,
            user=schemas.UserResponse.model_validate(user),
        )

    async def register(self, register_data: schemas.UserRegister) -> schemas.AuthPayload:
        email = register_data.email.lower()
        if await self.get_user_by_email(email):
            raise DuplicateEmail()

        user = models.User(
            email=email,
            hashed_password=security.get_password_hash(register_data.password),
            first_name=register_data.first_name,
            last_name=register_data.last_name,
            company=register_data.company,
            role="USER",
        )
        self.db.add(user)
        try:
            await self.db.flush()  # Get the ID before opening the subscription
            await SubscriptionService(self.db).open_subscription(user, register_data.plan)
            await self.db.commit()
        except IntegrityError:
            # A concurrent registration took the email after the check above
            await self.db.rollback()
            raise DuplicateEmail()
        await self.db.refresh(user)
        logger.info(f"Registered user {user.id} on plan {user.plan}")
        return self.issue_token(user)

    async def login(self, login_data: schemas.UserLogin) -> schemas.AuthPayload:
        user = await self.authenticate_user(login_data.email.lower(), login_data.password)
        if not user or not user.is_active:
            raise InvalidCredentials()
        return self.issue_token(user)
