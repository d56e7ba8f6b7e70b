from typing import Optional

from fastapi import Depends
from fastapi.security.utils import get_authorization_scheme_param
from sqlalchemy.ext.asyncio import AsyncSession
from strawberry.fastapi import BaseContext

from src.analysis.base import AnalysisProvider
from src.analysis.factory import get_analysis_provider
from src.auth.dependencies import resolve_user
from src.auth.models import User
from src.database import get_db
from src.documents.storage import LocalFileStorage, get_storage


class GraphQLContext(BaseContext):
    """Per-request resources for resolvers, built from the same dependencies as REST."""

    def __init__(self, db: AsyncSession, provider: AnalysisProvider, storage: LocalFileStorage):
        super().__init__()
        self.db = db
        self.provider = provider
        self.storage = storage
        self._user: Optional[User] = None

    @property
    def token(self) -> Optional[str]:
        if self.request is None:
            return None
        scheme, param = get_authorization_scheme_param(self.request.headers.get("Authorization"))
        if scheme.lower() != "bearer":
            return None
        return param or None

    async def require_user(self) -> User:
        if self._user is None:
            self._user = await resolve_user(self.token, self.db)
        return self._user


async def get_context(
    db: AsyncSession = Depends(get_db),
    provider: AnalysisProvider = Depends(get_analysis_provider),
    storage: LocalFileStorage = Depends(get_storage),
) -> GraphQLContext:
    return GraphQLContext(db, provider, storage)
