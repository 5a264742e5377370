"""Operation set shared by every frecency database backend."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from quicklaunch.frecency.models import Container, MergeResult


class FrecencyBackend(Protocol):
    """Storage backend contract for frecency databases."""

    reference_time: float
    half_life: float

    def __len__(self) -> int:
        """Number of stored records."""

    def secs_elapsed(self, now: float | None = None) -> float:
        """Seconds since ``reference_time``, never negative."""

    def get_ranked_list(self, search: str, limit: int | None = None) -> list[Container]:
        """Matching items, best first. Never mutates scores."""

    def get_by_id(self, item_id: int) -> Container | None:
        """The record for ``item_id`` or None."""

    def update_score(self, item_id: int, weight: float = 1.0) -> bool:
        """Add a launch of ``weight``. Returns False for an unknown id."""

    def merge_new_entries(self, items: Iterable) -> MergeResult:
        """Reconcile a rescan, keeping scores of items still present."""

    def rebaseline(self, now: float | None = None) -> bool:
        """Move the reference time forward without changing effective scores."""

    def save(self, path: Path | None = None) -> None:
        """Persist the current state."""

    def close(self) -> None:
        """Release storage handles."""
