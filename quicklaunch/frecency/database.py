"""In-memory frecency database persisted as a single file."""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Generic

from loguru import logger

from quicklaunch.frecency.identity import item_identity
from quicklaunch.frecency.matcher import Matcher, fuzzy_match
from quicklaunch.frecency.merge import merge_records
from quicklaunch.frecency.models import Container, MergeResult, Record, T
from quicklaunch.frecency.ranking import rank_records
from quicklaunch.frecency.scoring import (
    DEFAULT_HALF_LIFE,
    current_time_secs,
    effective_score,
    update_frecency,
)

if TYPE_CHECKING:
    from quicklaunch.frecency.backends.blob import BlobStore


class FrecencyDatabase(Generic[T]):
    """Items ranked by fuzzy relevance plus a decaying launch score.

    All raw scores are valid as of ``reference_time``; see
    :mod:`quicklaunch.frecency.scoring`. Not thread-safe on its own, wrap it in
    :class:`quicklaunch.frecency.shared.SharedFrecencyDB` to share it.
    """

    def __init__(
        self,
        item_type: type[T],
        *,
        records: dict[int, Record[T]] | None = None,
        reference_time: float | None = None,
        half_life: float = DEFAULT_HALF_LIFE,
        identity: Callable[[T], int] = item_identity,
        matcher: Matcher = fuzzy_match,
        path: Path | None = None,
        store: BlobStore | None = None,
    ) -> None:
        if half_life <= 0 or not math.isfinite(half_life):
            raise ValueError(f"half_life must be a positive finite number, got {half_life!r}")
        self.item_type = item_type
        self.records: dict[int, Record[T]] = dict(records or {})
        self.reference_time = current_time_secs() if reference_time is None else float(reference_time)
        self.half_life = float(half_life)
        self.identity = identity
        self.matcher = matcher
        self.path = path
        self.store = store

    @classmethod
    def new(
        cls,
        item_type: type[T],
        items: Iterable[T],
        *,
        half_life: float = DEFAULT_HALF_LIFE,
        identity: Callable[[T], int] = item_identity,
        matcher: Matcher = fuzzy_match,
        path: Path | None = None,
        store: BlobStore | None = None,
    ) -> "FrecencyDatabase[T]":
        """Create a database from an initial scan with every score at 0."""
        db = cls(
            item_type,
            half_life=half_life,
            identity=identity,
            matcher=matcher,
            path=path,
            store=store,
        )
        db.records, _ = merge_records({}, items, identity=identity)
        return db

    @classmethod
    def load(cls, path: Path, item_type: type[T], **kwargs) -> "FrecencyDatabase[T]":
        """Load a database file written by :meth:`save`."""
        from quicklaunch.frecency.backends.blob import BlobStore

        return BlobStore(**kwargs).load(path, item_type)

    def save(self, path: Path | None = None) -> None:
        """Overwrite the database file atomically."""
        from quicklaunch.frecency.backends.blob import BlobStore

        target = path or self.path
        if target is None:
            raise ValueError("no path to save the frecency database to")
        if self.store is None:
            self.store = BlobStore()
        self.store.save(target, self)
        self.path = Path(target)

    def close(self) -> None:
        """Nothing to release; present so both backends share one surface."""

    def __len__(self) -> int:
        return len(self.records)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self.records

    def secs_elapsed(self, now: float | None = None) -> float:
        """Seconds since the reference time, never negative."""
        now = current_time_secs() if now is None else now
        return max(0.0, now - self.reference_time)

    def effective_score(self, item_id: int, now: float | None = None) -> float | None:
        record = self.records.get(item_id)
        if record is None:
            return None
        return effective_score(record.score, self.secs_elapsed(now), self.half_life)

    def get_ranked_list(
        self,
        search: str,
        limit: int | None = None,
        *,
        now: float | None = None,
    ) -> list[Container[T]]:
        """Items matching ``search``, best first."""
        return rank_records(
            self.records.values(),
            search,
            elapsed=self.secs_elapsed(now),
            half_life=self.half_life,
            limit=limit,
            matcher=self.matcher,
        )

    def get_by_id(self, item_id: int, *, now: float | None = None) -> Container[T] | None:
        record = self.records.get(item_id)
        if record is None:
            return None
        score = effective_score(record.score, self.secs_elapsed(now), self.half_life)
        return Container(id=record.id, item=record.item, score=score)

    def update_score(self, item_id: int, weight: float = 1.0, *, now: float | None = None) -> bool:
        """Add ``weight`` to an item's score as of now.

        Returns False when no record has ``item_id``.
        """
        if not math.isfinite(weight):
            raise ValueError(f"weight must be finite, got {weight!r}")
        record = self.records.get(item_id)
        if record is None:
            logger.debug("update_score: unknown id {}", item_id)
            return False
        record.score = update_frecency(record.score, weight, self.secs_elapsed(now), self.half_life)
        return True

    def merge_new_entries(self, items: Iterable[T]) -> MergeResult:
        """Absorb a rescan; see :func:`quicklaunch.frecency.merge.merge_records`."""
        self.records, result = merge_records(self.records, items, identity=self.identity)
        logger.debug(
            "Merged rescan: kept={} added={} removed={}",
            result.kept,
            result.added,
            result.removed,
        )
        return result

    def rebaseline(self, now: float | None = None) -> bool:
        """Move the reference time to ``now`` without changing effective scores.

        Keeps ``2 ** (elapsed / half_life)`` bounded in long-lived stores.
        Returns False when ``now`` is not after the current reference time.
        """
        now = current_time_secs() if now is None else now
        if now <= self.reference_time:
            return False
        elapsed = now - self.reference_time
        for record in self.records.values():
            record.score = effective_score(record.score, elapsed, self.half_life)
        self.reference_time = now
        return True
