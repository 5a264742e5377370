"""Reconcile a fresh scan with the stored records."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from quicklaunch.frecency.identity import item_identity
from quicklaunch.frecency.models import MergeResult, Record, T


def merge_records(
    existing: dict[int, Record[T]],
    scanned: Iterable[T],
    *,
    identity: Callable[[T], int] = item_identity,
) -> tuple[dict[int, Record[T]], MergeResult]:
    """Build the record map that matches ``scanned``.

    Items still present keep their id and raw score (the scanned payload
    replaces the stored one); items that disappeared are dropped; new items
    start at score 0. Repeated items in the scan collapse to the first one.
    """
    merged: dict[int, Record[T]] = {}
    result = MergeResult()
    for item in scanned:
        item_id = identity(item)
        if item_id in merged:
            continue
        previous = existing.get(item_id)
        if previous is not None:
            merged[item_id] = Record(id=item_id, item=item, score=previous.score)
            result.kept += 1
        else:
            merged[item_id] = Record(id=item_id, item=item, score=0.0)
            result.added += 1
    result.removed = sum(1 for item_id in existing if item_id not in merged)
    return merged, result
