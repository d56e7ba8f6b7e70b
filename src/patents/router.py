from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.dependencies import get_current_active_user
from src.auth.models import User
from src.database import get_db
from src.documents.storage import LocalFileStorage, get_storage
from src.patents.schemas import (
    PatentCreate,
    PatentResponse,
    PatentSearch,
    PatentSearchResult,
    PatentStatusUpdate,
    PatentUpdate,
)
from src.patents.service import PatentService

router = APIRouter(prefix="/patents", tags=["patents"])


@router.post("", response_model=PatentResponse, status_code=201)
async def create_patent(
    patent: PatentCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    service = PatentService(db)
    return await service.create_patent(patent, current_user)


@router.get("", response_model=List[PatentResponse])
async def list_patents(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    service = PatentService(db)
    return await service.list_patents(current_user)


@router.post("/search", response_model=PatentSearchResult)
async def search_patents(
    filters: PatentSearch,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    service = PatentService(db)
    return await service.search_patents(filters, current_user)


@router.get("/{patent_id}", response_model=PatentResponse)
async def get_patent(
    patent_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    service = PatentService(db)
    return await service.get_patent(patent_id, current_user)


@router.put("/{patent_id}", response_model=PatentResponse)
async def update_patent(
    patent_id: UUID,
    patent: PatentUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    service = PatentService(db)
    return await service.update_patent(patent_id, patent, current_user)


@router.delete("/{patent_id}", status_code=204)
async def delete_patent(
    patent_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    storage: LocalFileStorage = Depends(get_storage),
):
    service = PatentService(db, storage)
    await service.delete_patent(patent_id, current_user)


@router.patch("/{patent_id}/status", response_model=PatentResponse)
async def update_patent_status(
    patent_id: UUID,
    update: PatentStatusUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    service = PatentService(db)
    return await service.update_status(patent_id, update.status, current_user)
