"""Content endpoints: clean ad-hoc content, run and size bulk cleanups."""

import structlog
from fastapi import APIRouter, Depends

from src.api.dependencies import (
    get_content_cleaner,
    get_content_store,
    get_settings_from_app,
)
from src.core.config import Settings
from src.db.content_store import SessionContentStore
from src.models.domain import ContentAnalysis
from src.models.requests import BulkCleanRequest, CleanContentRequest
from src.models.responses import BulkCleanReport, CleanContentResponse
from src.services.cleaning.analyzer import analyze_rows
from src.services.cleaning.bulk_cleaner import BulkCleaner
from src.services.cleaning.pipeline import ContentCleaner

logger: structlog.stdlib.BoundLogger = structlog.get_logger()

router = APIRouter(prefix="/content", tags=["content"])


@router.post("/clean", response_model=CleanContentResponse)
async def clean_content(
    request: CleanContentRequest,
    cleaner: ContentCleaner = Depends(get_content_cleaner),
) -> CleanContentResponse:
    """Clean a piece of content and return it. Nothing is stored."""
    result = cleaner.clean_with_stats(request.content)
    return CleanContentResponse(
        content=result.text,
        changed=result.text != request.content,
        original_length=len(request.content),
        cleaned_length=len(result.text),
        issues=result.stats.as_dict(),
    )


@router.post("/bulk-clean", response_model=BulkCleanReport)
async def bulk_clean(
    request: BulkCleanRequest,
    settings: Settings = Depends(get_settings_from_app),
    store: SessionContentStore = Depends(get_content_store),
    cleaner: ContentCleaner = Depends(get_content_cleaner),
) -> BulkCleanReport:
    """Clean every stored post in concurrent batches."""
    batch_size = request.batch_size or settings.cleaner_batch_size
    logger.info("bulk_clean_request", batch_size=batch_size, dry_run=request.dry_run)

    bulk = BulkCleaner(store, cleaner=cleaner, batch_size=batch_size)
    return await bulk.run(dry_run=request.dry_run, include_results=request.include_results)


@router.get("/analysis", response_model=ContentAnalysis)
async def content_analysis(
    store: SessionContentStore = Depends(get_content_store),
) -> ContentAnalysis:
    """Report which stored posts still carry issues."""
    rows = await store.fetch_rows()
    return analyze_rows(rows)
