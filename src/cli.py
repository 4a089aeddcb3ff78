"""Command-line tools for the content cleaner.

    python -m src.cli demo                  # clean built-in samples, no database
    python -m src.cli analyze               # count issues in stored posts
    python -m src.cli clean --dry-run       # clean every post, report only
    python -m src.cli clean --batch-size 20
    python -m src.cli verify                # list posts that still carry issues

Reports go to stdout as JSON; logs go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

import structlog

from src.core.config import Settings
from src.core.exceptions import PipelineError
from src.core.logging import setup_logging
from src.db.content_store import SessionContentStore
from src.db.session import create_engine, create_session_factory
from src.models.domain import ContentAnalysis
from src.models.responses import BulkCleanReport
from src.services.cleaning.analyzer import analyze_rows
from src.services.cleaning.bulk_cleaner import BulkCleaner
from src.services.cleaning.demo import run_demo
from src.services.cleaning.pipeline import ContentCleaner

logger: structlog.stdlib.BoundLogger = structlog.get_logger()

_RULE = "=" * 60


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="src.cli", description="Clean migrated WordPress post content.")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("demo", help="Clean built-in sample content and show before/after")
    commands.add_parser("analyze", help="Report issues in stored posts without changing them")
    commands.add_parser("verify", help="Report posts that still carry issues after a run")

    clean = commands.add_parser("clean", help="Clean every stored post")
    clean.add_argument("--batch-size", type=int, default=None, help="Rows cleaned concurrently per batch")
    clean.add_argument("--dry-run", action="store_true", help="Clean and report without writing")
    return parser


def print_demo(cleaner: ContentCleaner) -> None:
    for case in run_demo(cleaner):
        print(_RULE)
        print(case.name)
        print(_RULE)
        print("BEFORE:")
        print(case.before.strip())
        print()
        print("AFTER:")
        print(case.result.text)
        print()
        reduction = 1 - len(case.result.text) / len(case.before) if case.before else 0.0
        print(f"Length: {len(case.before)} -> {len(case.result.text)} ({reduction:.1%} smaller)")
        for category, count in case.result.stats.as_dict().items():
            print(f"  {category}: {count}")
        print()


async def _analyze(store: SessionContentStore) -> ContentAnalysis:
    analysis = analyze_rows(await store.fetch_rows())
    logger.info(
        "analysis_complete",
        total_rows=analysis.total_rows,
        rows_with_issues=analysis.rows_with_issues,
    )
    return analysis


async def _clean(
    store: SessionContentStore,
    cleaner: ContentCleaner,
    *,
    batch_size: int,
    dry_run: bool,
) -> BulkCleanReport:
    return await BulkCleaner(store, cleaner=cleaner, batch_size=batch_size).run(dry_run=dry_run)


async def _run_with_database(args: argparse.Namespace, settings: Settings, cleaner: ContentCleaner) -> int:
    engine = create_engine(settings)
    store = SessionContentStore(create_session_factory(engine))
    try:
        if args.command == "clean":
            report = await _clean(
                store,
                cleaner,
                batch_size=args.batch_size or settings.cleaner_batch_size,
                dry_run=args.dry_run,
            )
            print(report.model_dump_json(indent=2))
            return 1 if report.failed or report.persist_failed else 0

        analysis = await _analyze(store)
        print(analysis.model_dump_json(indent=2))
        if args.command == "verify" and analysis.rows_with_issues:
            logger.warning(
                "verify_found_issues",
                rows_with_issues=analysis.rows_with_issues,
                sample_ids=analysis.sample_ids,
            )
            return 1
        return 0
    finally:
        await engine.dispose()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if getattr(args, "batch_size", None) is not None and args.batch_size < 1:
        print("--batch-size must be at least 1", file=sys.stderr)
        return 2

    settings = Settings()
    setup_logging(settings, stream=sys.stderr)
    cleaner = ContentCleaner.from_settings(settings)

    if args.command == "demo":
        print_demo(cleaner)
        return 0

    try:
        return asyncio.run(_run_with_database(args, settings, cleaner))
    except PipelineError as e:
        logger.error("command_failed", command=args.command, error=e.message, details=e.details)
        return 1


if __name__ == "__main__":
    sys.exit(main())
