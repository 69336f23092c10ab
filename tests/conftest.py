"""
Shared fixtures: an in-memory SQLite store per test and an API client wired to it.
"""

from datetime import datetime, timedelta
from typing import Dict, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401  (registers tables on Base.metadata)
from app.db.session import Base, configure_sqlite, get_db
from app.models.insight import Insight
from app.models.theme import Theme
from app.services.theme_service import ThemeService

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


# ============================================
# Database
# ============================================

@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    configure_sqlite(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        await ThemeService.seed_default_themes(session)
        await session.commit()
    return factory


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def themes(db) -> Dict[str, Theme]:
    """Seeded themes keyed by name."""
    return {t.name: t for t in await ThemeService.list_themes(db)}


@pytest.fixture
def make_insight(db, themes):
    """Factory for stored insights with strictly increasing created_at."""
    counter = {"n": 0}

    async def _make(
        content: str,
        theme: str = "Uncategorised",
        suggested_theme: Optional[str] = None,
    ) -> Insight:
        counter["n"] += 1
        insight = Insight(
            content=content,
            theme_id=themes[theme].id,
            suggested_theme_id=themes[suggested_theme].id if suggested_theme else None,
            created_at=BASE_TIME + timedelta(minutes=counter["n"]),
        )
        db.add(insight)
        await db.flush()
        return insight

    return _make


# ============================================
# LLM
# ============================================

@pytest.fixture
def mock_ai():
    """Stand-in for AIService; set mock_ai.complete.return_value per test."""
    ai = MagicMock()
    ai.complete = AsyncMock(return_value="[]")
    return ai


# ============================================
# API client
# ============================================

@pytest_asyncio.fixture
async def client(session_factory, mock_ai, tmp_path):
    """AsyncClient against the app, sharing the test database and mocked LLM."""
    from main import app
    from app.api.routes.analyze import get_extraction_service
    from app.api.routes.ask import get_ask_service
    from app.core.rate_limiter import rate_limiter
    from app.services.ask_service import AskService
    from app.services.extraction_service import ExtractionService

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    def override_extraction_service():
        service = ExtractionService(ai_service=mock_ai)
        service.settings = service.settings.model_copy(update={"context_dir": str(tmp_path)})
        return service

    def override_ask_service():
        service = AskService(ai_service=mock_ai)
        service.settings = service.settings.model_copy(update={"context_dir": str(tmp_path)})
        return service

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_extraction_service] = override_extraction_service
    app.dependency_overrides[get_ask_service] = override_ask_service
    rate_limiter._requests.clear()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    rate_limiter._requests.clear()
