"""SQLAlchemy 2.0 ORM models for all database tables.

These map directly to the blog schema. Domain enums are stored as
VARCHAR via their StrEnum string values. All tables use server-side
defaults for timestamps where applicable.
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Shared base for all ORM models."""


# ---------------------------------------------------------------------------
# blogs
# ---------------------------------------------------------------------------


class BlogRow(Base):
    """A migrated blog post.

    ``content`` is what the site publishes. A submission that could not be
    cleaned is parked in ``pending_content`` with review_status
    'pending_review' and never reaches ``content``.
    """

    __tablename__ = "blogs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False, server_default="")
    slug: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    pending_content: Mapped[str | None] = mapped_column(Text, nullable=True)
    review_status: Mapped[str] = mapped_column(String(30), nullable=False, server_default="clean", index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<BlogRow id={self.id} title={self.title!r} status={self.review_status}>"
