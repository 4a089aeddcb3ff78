"""FastAPI dependency injection providers.

Every external resource the API layer needs is accessed through a
Depends() callable defined here. Services are resolved from app.state,
which the lifespan populates at startup.
"""

from collections.abc import AsyncIterator
from functools import lru_cache

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.config import Settings
from src.db.content_store import SessionContentStore
from src.db.repositories import BlogRepo
from src.services.cleaning.pipeline import ContentCleaner


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached application settings singleton."""
    from src.core.config import Settings

    return Settings()


def get_settings_from_app(request: Request) -> Settings:
    """Retrieve settings stored on the running app instance.

    Preferred over the cached version inside route handlers since
    it respects the settings the app was actually started with
    (important for tests that override config).
    """
    settings: Settings = request.app.state.settings
    return settings


def get_session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    """Retrieve the session factory the lifespan created."""
    factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    return factory


async def get_db_session(
    factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> AsyncIterator[AsyncSession]:
    """Yield an async DB session scoped to the request lifecycle.

    Commits on success, rolls back on exception, always closes.
    """
    session: AsyncSession = factory()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


def get_blog_repo(
    session: AsyncSession = Depends(get_db_session),
) -> BlogRepo:
    """Provide a BlogRepo bound to the current request session."""
    return BlogRepo(session)


def get_content_store(
    factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> SessionContentStore:
    """Provide a store that opens one session per bulk-run operation."""
    return SessionContentStore(factory)


def get_content_cleaner(
    settings: Settings = Depends(get_settings_from_app),
) -> ContentCleaner:
    """Build a cleaner configured from the app's settings."""
    return ContentCleaner.from_settings(settings)
