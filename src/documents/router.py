from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from src.database import get_db
from src.documents.schemas import DocumentResponse
from src.documents.service import DocumentService
from src.documents.storage import LocalFileStorage, get_storage
from src.patents.dependencies import require_owned_patent
from src.patents.models import Patent

router = APIRouter(prefix="/patents/{patent_id}/documents", tags=["documents"])


@router.post("", response_model=DocumentResponse, status_code=201)
async def upload_document(
    file: UploadFile = File(...),
    name: Optional[str] = Form(None),
    type: Optional[str] = Form(None),
    patent: Patent = Depends(require_owned_patent),
    db: AsyncSession = Depends(get_db),
    storage: LocalFileStorage = Depends(get_storage),
):
    service = DocumentService(db, storage)
    return await service.upload_document(patent.id, file, name=name, doc_type=type)


@router.get("", response_model=List[DocumentResponse])
async def list_documents(
    patent: Patent = Depends(require_owned_patent),
    db: AsyncSession = Depends(get_db),
    storage: LocalFileStorage = Depends(get_storage),
):
    service = DocumentService(db, storage)
    return await service.list_documents(patent.id)


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: UUID,
    patent: Patent = Depends(require_owned_patent),
    db: AsyncSession = Depends(get_db),
    storage: LocalFileStorage = Depends(get_storage),
):
    service = DocumentService(db, storage)
    return await service.get_document(patent.id, document_id)


@router.delete("/{document_id}", status_code=204)
async def delete_document(
    document_id: UUID,
    patent: Patent = Depends(require_owned_patent),
    db: AsyncSession = Depends(get_db),
    storage: LocalFileStorage = Depends(get_storage),
):
    service = DocumentService(db, storage)
    await service.delete_document(patent.id, document_id)
