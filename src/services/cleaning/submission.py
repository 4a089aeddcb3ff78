"""Cleaning of post content submitted through the API.

Submitted content is published only in cleaned form. If cleaning fails,
or leaves nothing to publish, the submission is held for review and the
previously published content stays live.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from src.core.exceptions import ContentCleaningError, NotFoundError
from src.models.domain import ReviewStatus
from src.models.responses import PostContentResponse

if TYPE_CHECKING:
    from src.db.repositories import BlogRepo
    from src.services.cleaning.pipeline import ContentCleaner

logger: structlog.stdlib.BoundLogger = structlog.get_logger()


async def submit_post_content(
    repo: BlogRepo,
    cleaner: ContentCleaner,
    post_id: int,
    submitted: str,
) -> PostContentResponse:
    """Clean and publish a post's new content, or hold it for review.

    Raises:
        NotFoundError: If the post does not exist.
    """
    post = await repo.get_by_id(post_id)
    if post is None:
        raise NotFoundError(f"Post {post_id} not found", details={"post_id": post_id})

    try:
        result = cleaner.clean_with_stats(submitted)
    except ContentCleaningError as e:
        return await _hold(repo, post_id, submitted, published=post.content, reason=f"cleaning failed at stage '{e.stage}'")

    if not result.text:
        return await _hold(repo, post_id, submitted, published=post.content, reason="no content left after cleaning")

    await repo.update_content(post_id, result.text)
    logger.info("post_content_published", post_id=post_id, fixes=result.stats.total)
    return PostContentResponse(
        post_id=post_id,
        review_status=ReviewStatus.CLEAN,
        content=result.text,
        issues=result.stats.as_dict(),
    )


async def _hold(
    repo: BlogRepo,
    post_id: int,
    submitted: str,
    *,
    published: str | None,
    reason: str,
) -> PostContentResponse:
    await repo.hold_for_review(post_id, submitted)
    logger.warning("post_content_held_for_review", post_id=post_id, reason=reason)
    return PostContentResponse(
        post_id=post_id,
        review_status=ReviewStatus.PENDING_REVIEW,
        content=published,
        reason=reason,
    )
