"""Post endpoints. Content updates go through the cleaner before publishing."""

from fastapi import APIRouter, Depends, Response, status

from src.api.dependencies import get_blog_repo, get_content_cleaner
from src.db.repositories import BlogRepo
from src.models.domain import ReviewStatus
from src.models.requests import PostContentRequest
from src.models.responses import PostContentResponse
from src.services.cleaning.pipeline import ContentCleaner
from src.services.cleaning.submission import submit_post_content

router = APIRouter(prefix="/posts", tags=["posts"])


@router.put(
    "/{post_id}/content",
    response_model=PostContentResponse,
    responses={status.HTTP_202_ACCEPTED: {"model": PostContentResponse, "description": "Held for review"}},
)
async def update_post_content(
    post_id: int,
    request: PostContentRequest,
    response: Response,
    repo: BlogRepo = Depends(get_blog_repo),
    cleaner: ContentCleaner = Depends(get_content_cleaner),
) -> PostContentResponse:
    """Replace a post's content with its cleaned form.

    Returns 202 with review_status 'pending_review' when the submission
    could not be cleaned; the published content is left as it was.
    """
    result = await submit_post_content(repo, cleaner, post_id, request.content)
    if result.review_status == ReviewStatus.PENDING_REVIEW:
        response.status_code = status.HTTP_202_ACCEPTED
    return result
