"""Content cleaning pipeline.

Runs the stages in a fixed order:

    entities → shortcodes → unsafe_markup → artifacts → structure
             → semantics → wrap

Entity decoding runs once. The remaining stages repeat until a pass
leaves the text unchanged (bounded by ``max_passes``), so the output of
``clean`` is a fixed point: cleaning it again returns it unchanged. If
the bound is hit first, a final unsafe-markup pass still runs so the
result never carries executable markup.

Usage:
    cleaner = ContentCleaner()
    html = cleaner.clean(raw_post_content)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from src.core.exceptions import ContentCleaningError
from src.services.cleaning.artifacts import remove_artifacts
from src.services.cleaning.base import CleaningStats, Stage, StageResult
from src.services.cleaning.entities import decode_entities
from src.services.cleaning.sanitizer import remove_unsafe_markup
from src.services.cleaning.semantics import ensure_wrapped, normalize_semantics
from src.services.cleaning.shortcodes import remove_shortcodes
from src.services.cleaning.structure import repair_structure

if TYPE_CHECKING:
    from src.core.config import Settings

logger: structlog.stdlib.BoundLogger = structlog.get_logger()

DEFAULT_MAX_PASSES = 4


@dataclass(frozen=True)
class PipelineStage:
    name: str
    func: Stage
    repeatable: bool = True


STAGES: tuple[PipelineStage, ...] = (
    PipelineStage("entities", decode_entities, repeatable=False),
    PipelineStage("shortcodes", remove_shortcodes),
    PipelineStage("unsafe_markup", remove_unsafe_markup),
    PipelineStage("artifacts", remove_artifacts),
    PipelineStage("structure", repair_structure),
    PipelineStage("semantics", normalize_semantics),
    PipelineStage("wrap", ensure_wrapped),
)

STAGE_NAMES: tuple[str, ...] = tuple(stage.name for stage in STAGES)


@dataclass(frozen=True)
class CleaningResult:
    """Cleaned text plus the issues fixed while producing it."""

    text: str
    stats: CleaningStats


class ContentCleaner:
    """Configurable cleaning pipeline.

    Each instance keeps running totals in ``stats`` across every call it
    serves. Per-call counts are returned by ``clean_with_stats`` and never
    depend on earlier calls.
    """

    def __init__(
        self,
        *,
        disabled_stages: Iterable[str] = (),
        max_passes: int = DEFAULT_MAX_PASSES,
    ) -> None:
        disabled = set(disabled_stages)
        unknown = disabled - set(STAGE_NAMES)
        if unknown:
            raise ValueError(f"Unknown cleaning stages: {sorted(unknown)}; expected any of {list(STAGE_NAMES)}")
        if max_passes < 1:
            raise ValueError(f"max_passes must be at least 1, got {max_passes}")

        self._stages = tuple(stage for stage in STAGES if stage.name not in disabled)
        self._repeatable = tuple(stage for stage in self._stages if stage.repeatable)
        self._guard = next((s for s in self._stages if s.name == "unsafe_markup"), None)
        self._max_passes = max_passes
        self.stats = CleaningStats()

    @classmethod
    def from_settings(cls, settings: Settings) -> ContentCleaner:
        return cls(
            disabled_stages=settings.cleaner_disabled_stages,
            max_passes=settings.cleaner_max_passes,
        )

    @property
    def stage_names(self) -> tuple[str, ...]:
        return tuple(stage.name for stage in self._stages)

    def clean(self, raw: str | None) -> str:
        """Clean one piece of content. None and non-strings yield ''."""
        return self.clean_with_stats(raw).text

    def clean_with_stats(self, raw: str | None) -> CleaningResult:
        """Clean one piece of content and report what was fixed.

        Raises:
            ContentCleaningError: If a stage fails unexpectedly.
        """
        stats = CleaningStats()
        if not isinstance(raw, str) or not raw:
            return CleaningResult("", stats)

        text = self._run_pass(self._stages, raw, stats)
        converged = False
        for _ in range(self._max_passes - 1):
            next_text = self._run_pass(self._repeatable, text, stats)
            if next_text == text:
                converged = True
                break
            text = next_text

        if not converged and self._guard is not None:
            guarded = self._apply(self._guard, text, stats)
            if guarded != text:
                logger.warning(
                    "cleaning_not_converged",
                    max_passes=self._max_passes,
                    length=len(guarded),
                )
            text = guarded

        self.stats.merge(stats)
        return CleaningResult(text, stats)

    def _run_pass(self, stages: tuple[PipelineStage, ...], text: str, stats: CleaningStats) -> str:
        for stage in stages:
            text = self._apply(stage, text, stats)
        return text

    def _apply(self, stage: PipelineStage, text: str, stats: CleaningStats) -> str:
        try:
            result: StageResult = stage.func(text)
        except Exception as e:
            logger.error("cleaning_stage_failed", stage=stage.name, error=str(e))
            raise ContentCleaningError(
                f"Cleaning stage '{stage.name}' failed: {e}",
                stage=stage.name,
            ) from e
        if result.counts:
            stats.record(result.counts)
            logger.debug("cleaning_stage_applied", stage=stage.name, fixes=dict(result.counts))
        return result.text


def clean_content(raw: str | None) -> str:
    """Clean content with the default pipeline configuration."""
    return ContentCleaner().clean(raw)
