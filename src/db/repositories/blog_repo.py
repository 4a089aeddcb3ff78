"""Repository for blog post CRUD operations.

All database access for the blogs table is encapsulated here.
Services never execute raw SQL; they call repository methods.
"""

from sqlalchemy import CursorResult, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.database import BlogRow
from src.models.domain import ReviewStatus


class BlogRepo:
    """Async repository for blog posts."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, post: BlogRow) -> BlogRow:
        """Insert a single post and return it with generated fields populated."""
        self._session.add(post)
        await self._session.flush()
        return post

    async def get_by_id(self, post_id: int) -> BlogRow | None:
        """Fetch a post by its primary key."""
        stmt = select(BlogRow).where(BlogRow.id == post_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_with_content(self, *, limit: int | None = None) -> list[BlogRow]:
        """List posts that have stored content, in id order."""
        stmt = select(BlogRow).where(BlogRow.content.is_not(None)).order_by(BlogRow.id)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def update_content(self, post_id: int, content: str) -> bool:
        """Publish cleaned content and clear any held submission.

        Returns False if no post has the given id.
        """
        stmt = (
            update(BlogRow)
            .where(BlogRow.id == post_id)
            .values(
                content=content,
                pending_content=None,
                review_status=ReviewStatus.CLEAN.value,
            )
        )
        cursor: CursorResult[tuple[()]] = await self._session.execute(stmt)  # type: ignore[assignment]
        await self._session.flush()
        return cursor.rowcount == 1

    async def hold_for_review(self, post_id: int, submitted: str) -> bool:
        """Park a submission that could not be cleaned. Published content is untouched."""
        stmt = (
            update(BlogRow)
            .where(BlogRow.id == post_id)
            .values(
                pending_content=submitted,
                review_status=ReviewStatus.PENDING_REVIEW.value,
            )
        )
        cursor: CursorResult[tuple[()]] = await self._session.execute(stmt)  # type: ignore[assignment]
        await self._session.flush()
        return cursor.rowcount == 1

    async def count(self, *, review_status: ReviewStatus | None = None) -> int:
        """Count posts, optionally filtered by review status."""
        stmt = select(func.count(BlogRow.id))
        if review_status is not None:
            stmt = stmt.where(BlogRow.review_status == review_status.value)
        result = await self._session.execute(stmt)
        return result.scalar_one()
