from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.dependencies import get_current_active_user
from src.auth.models import User
from src.database import get_db
from src.prior_art.schemas import PriorArtCreate, PriorArtResponse
from src.prior_art.service import PriorArtService

router = APIRouter(prefix="/prior-art", tags=["prior-art"])


@router.get("", response_model=List[PriorArtResponse])
async def list_prior_art(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    service = PriorArtService(db)
    return await service.list_prior_art(skip, limit)


@router.post("", response_model=PriorArtResponse, status_code=201)
async def create_prior_art(
    prior_art: PriorArtCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    service = PriorArtService(db)
    return await service.create_prior_art(prior_art)
