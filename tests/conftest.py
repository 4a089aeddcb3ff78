"""Shared test fixtures and factory functions.

Factories return valid domain objects with sensible defaults. Override
any field via keyword arguments to create specific test scenarios
without repeating boilerplate.
"""

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from src.api.app import create_app
from src.api.dependencies import get_session_factory
from src.core.config import Settings
from src.db.repositories import BlogRepo
from src.db.session import create_session_factory, get_session
from src.models.database import Base, BlogRow
from src.models.domain import ContentRow

# ---------------------------------------------------------------------------
# Sample content
# ---------------------------------------------------------------------------

END_TO_END_INPUT = (
    '[caption]<img src="x.jpg" class="wp-image-5 alignleft">caption text[/caption]'
    "<script>alert(1)</script>&lt;b&gt;bold&lt;/b&gt;"
)

# ---------------------------------------------------------------------------
# Settings / Database / App / Client
# ---------------------------------------------------------------------------


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """A throwaway SQLite file per test."""
    return f"sqlite+aiosqlite:///{tmp_path / 'blog.db'}"


@pytest.fixture
def test_settings(database_url: str) -> Settings:
    """Settings configured for testing: console logs, debug enabled."""
    return Settings(
        debug=True,
        database_url=database_url,
        log_format="console",
        log_level="DEBUG",
    )


@pytest.fixture
async def engine(database_url: str) -> AsyncIterator[AsyncEngine]:
    """Async engine with the schema created."""
    eng = create_async_engine(database_url, echo=False)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """A plain session for arranging and inspecting rows."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def app(test_settings: Settings, session_factory: async_sessionmaker[AsyncSession]) -> FastAPI:
    """FastAPI application wired with test settings and the test database.

    ASGITransport does not run the lifespan, so the session factory it
    would create is supplied through a dependency override.
    """
    application = create_app(test_settings)
    application.dependency_overrides[get_session_factory] = lambda: session_factory
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Async HTTP client bound to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def make_content_row(**overrides: object) -> ContentRow:
    """Build a valid ContentRow with sensible defaults."""
    defaults: dict[str, object] = {
        "id": 1,
        "title": "IELTS Reading Tips",
        "content": "<p>Read every question carefully.</p>",
    }
    defaults.update(overrides)
    return ContentRow(**defaults)  # type: ignore[arg-type]


def make_blog_row(**overrides: object) -> BlogRow:
    """Build an unsaved BlogRow with sensible defaults."""
    defaults: dict[str, object] = {
        "title": "IELTS Reading Tips",
        "content": "<p>Read every question carefully.</p>",
    }
    defaults.update(overrides)
    return BlogRow(**defaults)


async def seed_posts(
    session_factory: async_sessionmaker[AsyncSession],
    *contents: str | None,
) -> list[int]:
    """Insert one post per content value and return their ids."""
    async with get_session(session_factory) as session:
        repo = BlogRepo(session)
        posts = [await repo.create(make_blog_row(title=f"Post {i}", content=c)) for i, c in enumerate(contents, 1)]
        return [post.id for post in posts]
