"""Bulk cleaning orchestrator.

Coordinates a full cleanup run: fetch rows → clean → persist changed
content. Whether a row changes is decided by running the cleaner and
comparing, never by the analyzer. Rows are processed in batches; the rows
of one batch run concurrently and each row reports its own outcome, so one
failing row never aborts its batch or the run.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Protocol

import structlog
from prometheus_client import Counter

from src.core.exceptions import ContentCleaningError, DatabaseError
from src.core.logging import bind_run_context
from src.models.domain import ContentRow, RowOutcome, RowResult
from src.models.responses import BulkCleanReport
from src.services.cleaning.base import CleaningStats
from src.services.cleaning.pipeline import ContentCleaner

logger: structlog.stdlib.BoundLogger = structlog.get_logger()

ROWS_PROCESSED = Counter(
    "content_rows_processed_total",
    "Rows handled by bulk cleaning runs",
    ["outcome"],
)

DEFAULT_BATCH_SIZE = 10


class ContentStore(Protocol):
    """Where bulk runs read rows from and write cleaned content to."""

    async def fetch_rows(self) -> list[ContentRow]: ...

    async def update_content(self, row_id: int, content: str) -> bool: ...


@dataclass
class _RunCounters:
    """Mutable counters accumulated during a bulk run."""

    outcomes: dict[RowOutcome, int] = field(default_factory=lambda: dict.fromkeys(RowOutcome, 0))
    stats: CleaningStats = field(default_factory=CleaningStats)
    results: list[RowResult] = field(default_factory=list)

    def add(self, result: RowResult, stats: CleaningStats) -> None:
        self.outcomes[result.outcome] += 1
        self.stats.merge(stats)
        self.results.append(result)
        ROWS_PROCESSED.labels(outcome=result.outcome.value).inc()


class BulkCleaner:
    """Cleans every row of a ContentStore in concurrent batches."""

    def __init__(
        self,
        store: ContentStore,
        *,
        cleaner: ContentCleaner | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        self._store = store
        self._cleaner = cleaner or ContentCleaner()
        self._batch_size = batch_size

    async def run(self, *, dry_run: bool = False, include_results: bool = False) -> BulkCleanReport:
        """Clean all rows and return a summary report.

        With ``dry_run`` nothing is written; rows that would change are
        still reported as cleaned.
        """
        run_id = bind_run_context()
        t0 = time.monotonic()
        counters = _RunCounters()

        rows = await self._store.fetch_rows()
        logger.info("bulk_clean_started", total_rows=len(rows), batch_size=self._batch_size, dry_run=dry_run)

        for start in range(0, len(rows), self._batch_size):
            batch = rows[start : start + self._batch_size]
            outcomes = await asyncio.gather(*(self._process_row(row, dry_run=dry_run) for row in batch))
            for result, stats in outcomes:
                counters.add(result, stats)
            logger.info(
                "batch_processed",
                batch_start=start,
                batch_rows=len(batch),
                processed=len(counters.results),
                total_rows=len(rows),
            )

        elapsed = time.monotonic() - t0
        report = BulkCleanReport(
            run_id=run_id,
            dry_run=dry_run,
            total_rows=len(rows),
            cleaned=counters.outcomes[RowOutcome.CLEANED],
            unchanged=counters.outcomes[RowOutcome.UNCHANGED],
            skipped=counters.outcomes[RowOutcome.SKIPPED],
            failed=counters.outcomes[RowOutcome.FAILED],
            persist_failed=counters.outcomes[RowOutcome.PERSIST_FAILED],
            issues=counters.stats.as_dict(),
            failed_ids=[
                r.row_id
                for r in counters.results
                if r.outcome in (RowOutcome.FAILED, RowOutcome.PERSIST_FAILED)
            ],
            elapsed_seconds=round(elapsed, 2),
            results=counters.results if include_results else None,
        )
        logger.info(
            "bulk_clean_complete",
            total_rows=report.total_rows,
            cleaned=report.cleaned,
            unchanged=report.unchanged,
            skipped=report.skipped,
            failed=report.failed,
            persist_failed=report.persist_failed,
            elapsed_seconds=report.elapsed_seconds,
        )
        return report

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _process_row(self, row: ContentRow, *, dry_run: bool) -> tuple[RowResult, CleaningStats]:
        """Clean and persist one row. Never raises for row-level failures."""
        original = row.content or ""
        if not original.strip():
            return self._result(row, RowOutcome.SKIPPED, original), CleaningStats()

        try:
            cleaned = self._cleaner.clean_with_stats(original)
        except ContentCleaningError as e:
            logger.warning("row_cleaning_failed", row_id=row.id, stage=e.stage, error=e.message)
            return self._result(row, RowOutcome.FAILED, original, error=e.message), CleaningStats()

        if not cleaned.text.strip():
            # Never replace stored content with nothing.
            logger.warning("row_cleaned_to_empty", row_id=row.id, original_length=len(original))
            return (
                self._result(row, RowOutcome.SKIPPED, original, error="cleaned content is empty"),
                cleaned.stats,
            )
        if cleaned.text == original:
            return self._result(row, RowOutcome.UNCHANGED, original, cleaned.text), cleaned.stats
        if dry_run:
            return self._result(row, RowOutcome.CLEANED, original, cleaned.text), cleaned.stats

        try:
            updated = await self._store.update_content(row.id, cleaned.text)
        except DatabaseError as e:
            logger.error("row_persist_failed", row_id=row.id, error=e.message)
            return self._result(row, RowOutcome.PERSIST_FAILED, original, cleaned.text, error=e.message), cleaned.stats
        except Exception as e:
            # Errors the store did not wrap, e.g. a dropped connection.
            error = f"{type(e).__name__}: {e}"
            logger.error("row_persist_failed", row_id=row.id, error=error)
            return self._result(row, RowOutcome.PERSIST_FAILED, original, cleaned.text, error=error), cleaned.stats

        if not updated:
            logger.warning("row_not_updated", row_id=row.id)
            return (
                self._result(row, RowOutcome.PERSIST_FAILED, original, cleaned.text, error="row not found"),
                cleaned.stats,
            )
        logger.debug("row_cleaned", row_id=row.id, original_length=len(original), cleaned_length=len(cleaned.text))
        return self._result(row, RowOutcome.CLEANED, original, cleaned.text), cleaned.stats

    @staticmethod
    def _result(
        row: ContentRow,
        outcome: RowOutcome,
        original: str,
        cleaned: str | None = None,
        *,
        error: str | None = None,
    ) -> RowResult:
        return RowResult(
            row_id=row.id,
            outcome=outcome,
            original_length=len(original),
            cleaned_length=len(original if cleaned is None else cleaned),
            error=error,
        )
