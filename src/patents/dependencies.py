from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.dependencies import get_current_active_user
from src.auth.models import User
from src.database import get_db
from src.patents.models import Patent
from src.patents.service import PatentService


async def require_owned_patent(
    patent_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
) -> Patent:
    """Resolve ``patent_id`` from the path, enforcing ownership."""
    return await PatentService(db).get_owned_patent(patent_id, current_user)
