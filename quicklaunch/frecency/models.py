"""Typed models for the frecency database."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable


@runtime_checkable
class DBItem(Protocol):
    """Capabilities an item needs to live in a frecency database.

    Items also need value equality consistent with ``identity_fields`` and
    must be serialisable by pydantic so backends can persist them.
    """

    def sort_string(self) -> str:
        """Text the fuzzy matcher compares the search string against."""

    def identity_fields(self) -> tuple[Any, ...]:
        """Fields that decide whether two scans saw the same logical item."""


T = TypeVar("T", bound=DBItem)


@dataclass(slots=True)
class Record(Generic[T]):
    """One stored item with its raw frecency score."""

    id: int
    item: T
    score: float = 0.0


@dataclass(slots=True)
class Container(Generic[T]):
    """One ranked result handed back to callers."""

    id: int
    item: T
    score: float = 0.0


@dataclass(slots=True)
class MergeResult:
    """Counts from reconciling a rescan into the store."""

    kept: int = 0
    added: int = 0
    removed: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)


@dataclass(slots=True)
class RescanReport:
    """Outcome of one rescan: merge counts plus scanner errors."""

    merge: MergeResult = field(default_factory=MergeResult)
    errors: list[Exception] = field(default_factory=list)
    scanned: int = 0
