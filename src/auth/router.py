from typing import Any
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.database import get_db
from src.auth import schemas, models
from src.auth.service import AuthService
from src.auth.dependencies import get_current_active_user

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=schemas.AuthPayload, status_code=201)
async def register(
    register_data: schemas.UserRegister,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Register a new account and log it in immediately.
    """
    auth_service = AuthService(db)
    return await auth_service.register(register_data)


@router.post("/login", response_model=schemas.AuthPayload)
async def login(
    login_data: schemas.UserLogin,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    JSON login endpoint, accepts {"email": "...", "password": "..."}
    """
    auth_service = AuthService(db)
    return await auth_service.login(login_data)


@router.get("/me", response_model=schemas.UserResponse)
async def me(current_user: models.User = Depends(get_current_active_user)):
    return current_user
