import os
import tempfile

# Settings are read at import time, so point them at throwaway resources first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ANALYSIS_PROVIDER", "stub")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="patentdesk-uploads-"))

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from typing import AsyncGenerator

from src.main import app
from src.database import get_db, Base
from src.analysis.factory import _configured_provider, get_analysis_provider
from src.analysis.guard import GuardedAnalysisProvider
from src.analysis.stub import StubAnalysisProvider
from src.config import settings
from src.documents.storage import LocalFileStorage, get_storage
from src.llm import clear_llm_cache

TEST_PASSWORD = "password123"


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database and session for each test."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    TestingSessionLocal = sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with TestingSessionLocal() as session:
        yield session

    await test_engine.dispose()


@pytest.fixture
def storage(tmp_path) -> LocalFileStorage:
    return LocalFileStorage(tmp_path / "uploads", "/uploads")


@pytest.fixture
def provider() -> GuardedAnalysisProvider:
    return GuardedAnalysisProvider(StubAnalysisProvider(), "fail")


@pytest_asyncio.fixture(scope="function")
async def async_client(
    db_session: AsyncSession, storage: LocalFileStorage, provider
) -> AsyncGenerator[AsyncClient, None]:
    """Client for testing API endpoints."""
    # Override the get_db dependency to use our test session
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_analysis_provider] = lambda: provider

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def register(async_client: AsyncClient):
    """Register a user and return (auth headers, user json)."""
    async def _register(email: str = "inventor@example.com", **extra):
        payload = {
            "email": email,
            "password": TEST_PASSWORD,
            "first_name": "Ada",
            "last_name": "Inventor",
            **extra,
        }
        response = await async_client.post("/api/auth/register", json=payload)
        assert response.status_code == 201, response.text
        data = response.json()
        return {"Authorization": f"Bearer {data['token']}"}, data["user"]

    return _register


@pytest.fixture
def create_patent(async_client: AsyncClient):
    async def _create(headers, **fields):
        payload = {
            "title": "Widget",
            "description": "A better widget",
            "inventors": ["Alice"],
            "jurisdictions": ["US"],
            **fields,
        }
        response = await async_client.post("/api/patents", json=payload, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def unconfigured_llm(async_client: AsyncClient, monkeypatch):
    """Real provider dependency with the LLM backend selected and no API key."""
    monkeypatch.setattr(settings, "ANALYSIS_PROVIDER", "llm")
    monkeypatch.setattr(settings, "LLM_PROVIDER_PRIMARY", "openai")
    monkeypatch.setattr(settings, "LLM_PROVIDER_EMBEDDING", "openai")
    monkeypatch.setattr(settings, "OPENAI_API_KEY", None)
    _configured_provider.cache_clear()
    clear_llm_cache()
    app.dependency_overrides.pop(get_analysis_provider, None)
    yield
    _configured_provider.cache_clear()
    clear_llm_cache()
