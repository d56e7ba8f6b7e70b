import logging
import mimetypes
from typing import List, Optional
from uuid import UUID

from fastapi import UploadFile
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.documents.models import Document
from src.documents.storage import LocalFileStorage
from src.exceptions import BadInput, NotFound

logger = logging.getLogger(__name__)


class DocumentService:
    def __init__(self, db: AsyncSession, storage: LocalFileStorage):
        self.db = db
        self.storage = storage

    async def upload_document(
        self,
        patent_id: UUID,
        file: UploadFile,
        name: Optional[str] = None,
        doc_type: Optional[str] = None,
    ) -> Document:
        if not file.filename:
            raise BadInput("No filename provided")

        # One byte over the limit is enough to know it's too big
        content = await file.read(settings.MAX_UPLOAD_BYTES + 1)
        if len(content) == 0:
            raise BadInput("Empty file")
        if len(content) > settings.MAX_UPLOAD_BYTES:
            raise BadInput(f"File exceeds the {settings.MAX_UPLOAD_BYTES} byte limit")

        url = await self.storage.save(content, file.filename)
        doc = Document(
            patent_id=patent_id,
            name=name or file.filename,
            type=doc_type
            or file.content_type
            or mimetypes.guess_type(file.filename)[0]
            or "application/octet-stream",
            url=url,
            filename=file.filename,
            size=len(content),
        )
        self.db.add(doc)
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            await self.storage.delete(url)
            raise
        await self.db.refresh(doc)
        logger.info(f"Document {doc.id} uploaded to patent {patent_id} ({doc.size} bytes)")
        return doc

    async def list_documents(self, patent_id: UUID) -> List[Document]:
        result = await self.db.execute(
            select(Document)
            .where(Document.patent_id == patent_id)
            .order_by(Document.created_at.asc())
        )
        return list(result.scalars().all())

    async def get_document(self, patent_id: UUID, document_id: UUID) -> Document:
        result = await self.db.execute(
            select(Document).where(
                Document.id == document_id,
                Document.patent_id == patent_id,
            )
        )
        doc = result.scalars().first()
        if not doc:
            raise NotFound("Document not found")
        return doc

    async def delete_document(self, patent_id: UUID, document_id: UUID) -> None:
        doc = await self.get_document(patent_id, document_id)
        url = doc.url
        await self.db.delete(doc)
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        await self.storage.discard([url])
        logger.info(f"Document {document_id} deleted from patent {patent_id}")
