"""Shared result and statistics types for the cleaning stages.

Every stage is a pure function ``str -> StageResult``. The counts travel
with the text instead of living on a shared object, so stages can be
tested in isolation and per-row statistics can be merged after
concurrent batch work.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Protocol


@dataclass(frozen=True)
class StageResult:
    """Output text of one stage plus what the stage changed, by category."""

    text: str
    counts: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def of(cls, text: str, counts: Counter[str] | None = None) -> StageResult:
        """Build a result, dropping zero counts."""
        if not counts:
            return cls(text)
        return cls(text, MappingProxyType({k: v for k, v in counts.items() if v}))


class Stage(Protocol):
    def __call__(self, text: str) -> StageResult: ...


@dataclass
class CleaningStats:
    """Issue counters for one cleaning session (a call, a row, or a batch run)."""

    counts: Counter[str] = field(default_factory=Counter)

    def record(self, counts: Mapping[str, int]) -> None:
        """Add one stage's counts."""
        self.counts.update(counts)

    def merge(self, other: CleaningStats) -> CleaningStats:
        """Fold another session's counts into this one and return self."""
        self.counts.update(other.counts)
        return self

    def __add__(self, other: CleaningStats) -> CleaningStats:
        return CleaningStats(self.counts + other.counts)

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def as_dict(self) -> dict[str, int]:
        return {k: v for k, v in sorted(self.counts.items()) if v}
