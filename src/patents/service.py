import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.auth.models import User
from src.config import settings
from src.documents.storage import LocalFileStorage
from src.exceptions import BadInput, InvalidStatusTransition, NotAuthorized, NotFound
from src.patents.models import Patent, PatentStatus, patent_jurisdictions
from src.patents.schemas import PatentCreate, PatentSearch, PatentUpdate
from src.patents.search import build_search_statements, total_pages

logger = logging.getLogger(__name__)

VALID_TRANSITIONS = {
    PatentStatus.DRAFT: [PatentStatus.PENDING, PatentStatus.FILED],
    PatentStatus.PENDING: [PatentStatus.DRAFT, PatentStatus.FILED, PatentStatus.REJECTED],
    PatentStatus.FILED: [PatentStatus.PENDING, PatentStatus.GRANTED, PatentStatus.REJECTED],
    PatentStatus.REJECTED: [PatentStatus.DRAFT],
    PatentStatus.GRANTED: [],
}

NOT_NULLABLE_FIELDS = ("title", "description", "inventors", "claims")


class PatentService:
    def __init__(self, db: AsyncSession, storage: Optional[LocalFileStorage] = None):
        self.db = db
        self.storage = storage

    async def _get_jurisdictions(self, patent_id: UUID) -> List[str]:
        result = await self.db.execute(
            select(patent_jurisdictions.c.jurisdiction)
            .where(patent_jurisdictions.c.patent_id == patent_id)
            .order_by(patent_jurisdictions.c.position)
        )
        return [row[0] for row in result.fetchall()]

    async def _get_jurisdictions_for(self, patent_ids: List[UUID]) -> Dict[UUID, List[str]]:
        if not patent_ids:
            return {}
        result = await self.db.execute(
            select(patent_jurisdictions.c.patent_id, patent_jurisdictions.c.jurisdiction)
            .where(patent_jurisdictions.c.patent_id.in_(patent_ids))
            .order_by(patent_jurisdictions.c.patent_id, patent_jurisdictions.c.position)
        )
        grouped = defaultdict(list)
        for patent_id, jurisdiction in result.fetchall():
            grouped[patent_id].append(jurisdiction)
        return grouped

    async def _set_jurisdictions(self, patent_id: UUID, jurisdictions: List[str]):
        # Clear existing jurisdictions
        await self.db.execute(
            delete(patent_jurisdictions).where(patent_jurisdictions.c.patent_id == patent_id)
        )
        if jurisdictions:
            await self.db.execute(
                insert(patent_jurisdictions),
                [
                    {"patent_id": patent_id, "jurisdiction": j, "position": i}
                    for i, j in enumerate(jurisdictions)
                ],
            )

    async def _load(self, patent_id: UUID) -> Optional[Patent]:
        result = await self.db.execute(
            select(Patent)
            .options(selectinload(Patent.owner), selectinload(Patent.documents))
            .where(Patent.id == patent_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def _serialize(self, patent: Patent) -> dict:
        jurisdictions = await self._get_jurisdictions(patent.id)
        return {**patent.__dict__, "jurisdictions": jurisdictions}

    async def _serialize_many(self, patents: List[Patent]) -> List[dict]:
        jurisdictions = await self._get_jurisdictions_for([p.id for p in patents])
        return [{**p.__dict__, "jurisdictions": jurisdictions.get(p.id, [])} for p in patents]

    async def get_owned_patent(self, patent_id: UUID, user: User) -> Patent:
        """The single ownership gate for every patent read and mutation."""
        patent = await self._load(patent_id)
        if not patent:
            raise NotFound("Patent not found")
        if patent.owner_id != user.id:
            if settings.HIDE_FOREIGN_RESOURCES:
                raise NotFound("Patent not found")
            raise NotAuthorized("Not authorized to access this patent")
        return patent

    async def create_patent(self, patent_in: PatentCreate, owner: User) -> dict:
        patent = Patent(
            title=patent_in.title,
            description=patent_in.description,
            inventors=list(patent_in.inventors),
            claims=list(patent_in.claims),
            technical_field=patent_in.technical_field,
            background_art=patent_in.background_art,
            status=PatentStatus.DRAFT,
            owner_id=owner.id,
        )
        self.db.add(patent)
        await self.db.flush()  # Get the ID before adding jurisdictions

        await self._set_jurisdictions(patent.id, patent_in.jurisdictions)
        await self.db.commit()
        logger.info(f"Patent {patent.id} created by user {owner.id}")

        return await self._serialize(await self._load(patent.id))

    async def list_patents(self, owner: User) -> List[dict]:
        result = await self.db.execute(
            select(Patent)
            .options(selectinload(Patent.owner), selectinload(Patent.documents))
            .where(Patent.owner_id == owner.id)
            .order_by(Patent.created_at.desc())
        )
        return await self._serialize_many(list(result.scalars().all()))

    async def get_patent(self, patent_id: UUID, user: User) -> dict:
        patent = await self.get_owned_patent(patent_id, user)
        return await self._serialize(patent)

    async def update_patent(self, patent_id: UUID, patent_in: PatentUpdate, user: User) -> dict:
        patent = await self.get_owned_patent(patent_id, user)

        changes = patent_in.model_dump(exclude_unset=True)
        jurisdictions = changes.pop("jurisdictions", None)
        for field, value in changes.items():
            if value is None and field in NOT_NULLABLE_FIELDS:
                raise BadInput(f"{field} cannot be null")
            setattr(patent, field, value)
        if jurisdictions is not None:
            await self._set_jurisdictions(patent.id, jurisdictions)

        await self.db.commit()
        return await self._serialize(await self._load(patent.id))

    async def delete_patent(self, patent_id: UUID, user: User) -> None:
        patent = await self.get_owned_patent(patent_id, user)
        urls = [doc.url for doc in patent.documents]

        await self.db.execute(
            delete(patent_jurisdictions).where(patent_jurisdictions.c.patent_id == patent.id)
        )
        await self.db.delete(patent)  # documents cascade through the relationship
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

        # Files only go once the records are gone for good
        if self.storage is not None:
            await self.storage.discard(urls)
        logger.info(f"Patent {patent_id} deleted with {len(urls)} document(s)")

    async def update_status(self, patent_id: UUID, new_status: PatentStatus, user: User) -> dict:
        patent = await self.get_owned_patent(patent_id, user)
        current_status = patent.status

        if new_status not in VALID_TRANSITIONS.get(current_status, []):
            raise InvalidStatusTransition(
                f"Invalid transition from {current_status.value} to {new_status.value}"
            )

        patent.status = new_status
        now = datetime.utcnow()
        if new_status == PatentStatus.FILED and patent.filing_date is None:
            patent.filing_date = now
        if new_status == PatentStatus.GRANTED and patent.grant_date is None:
            patent.grant_date = now

        await self.db.commit()
        logger.info(f"Patent {patent_id} moved from {current_status.value} to {new_status.value}")
        return await self._serialize(await self._load(patent.id))

    async def search_patents(self, filters: PatentSearch, user: User) -> dict:
        items_stmt, count_stmt = build_search_statements(user.id, filters)
        total_count = (await self.db.execute(count_stmt)).scalar_one()
        result = await self.db.execute(
            items_stmt.options(selectinload(Patent.owner), selectinload(Patent.documents))
        )
        items = await self._serialize_many(list(result.scalars().all()))
        return {
            "items": items,
            "total_count": total_count,
            "page": filters.page,
            "total_pages": total_pages(total_count, filters.limit),
        }
