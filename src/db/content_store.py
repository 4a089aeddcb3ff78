"""Row store used by the bulk cleaning tools.

Each call opens its own session, so concurrent updates from one batch
never share an AsyncSession. Every update commits on its own: a failed
row rolls back alone and does not undo its neighbours.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from src.core.exceptions import DatabaseError
from src.db.repositories import BlogRepo
from src.db.session import get_session
from src.models.domain import ContentRow

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


class SessionContentStore:
    """ContentStore backed by the blogs table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def fetch_rows(self) -> list[ContentRow]:
        """Load every post that has content."""
        try:
            async with get_session(self._session_factory) as session:
                posts = await BlogRepo(session).list_with_content()
                return [ContentRow(id=p.id, title=p.title, content=p.content) for p in posts]
        except SQLAlchemyError as e:
            raise DatabaseError("Failed to fetch blog posts") from e

    async def update_content(self, row_id: int, content: str) -> bool:
        """Store cleaned content for one post. False if the post is gone."""
        try:
            async with get_session(self._session_factory) as session:
                return await BlogRepo(session).update_content(row_id, content)
        except SQLAlchemyError as e:
            raise DatabaseError(
                f"Failed to update content for post {row_id}",
                details={"row_id": row_id},
            ) from e
