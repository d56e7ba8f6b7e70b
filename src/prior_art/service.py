import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.exceptions import BadInput
from src.prior_art.models import PriorArt
from src.prior_art.schemas import PriorArtCreate

logger = logging.getLogger(__name__)


class PriorArtService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_prior_art(self, skip: int = 0, limit: int = 100) -> List[PriorArt]:
        result = await self.db.execute(
            select(PriorArt).order_by(PriorArt.patent_number).offset(skip).limit(limit)
        )
        return list(result.scalars().all())

    async def corpus(self, limit: int) -> List[PriorArt]:
        """Records compared against a patent when building a search report."""
        result = await self.db.execute(
            select(PriorArt)
            .order_by(PriorArt.publication_date.desc().nulls_last(), PriorArt.patent_number)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def create_prior_art(self, prior_art_in: PriorArtCreate) -> PriorArt:
        existing = await self.db.execute(
            select(PriorArt).where(PriorArt.patent_number == prior_art_in.patent_number)
        )
        if existing.scalars().first():
            raise BadInput(f"Prior art {prior_art_in.patent_number} already exists")

        record = PriorArt(**prior_art_in.model_dump())
        self.db.add(record)
        await self.db.commit()
        await self.db.refresh(record)
        logger.info(f"Prior art {record.patent_number} added to corpus")
        return record
