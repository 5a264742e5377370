"""Rank stored records against search text."""

from __future__ import annotations

import math
from collections.abc import Iterable

from quicklaunch.frecency.matcher import Matcher, fuzzy_match
from quicklaunch.frecency.models import Container, Record, T
from quicklaunch.frecency.scoring import effective_score


def relevance_for(matcher: Matcher, text: str, search: str) -> float | None:
    """Relevance of ``search`` against ``text``, or None when it does not count as a match."""
    relevance = matcher(text, search)
    if relevance is None:
        return None
    value = float(relevance)
    if not math.isfinite(value):
        return None
    if value < 0 or (search and value == 0):
        return None
    return value


def rank_records(
    records: Iterable[Record[T]],
    search: str,
    *,
    elapsed: float,
    half_life: float,
    limit: int | None = None,
    matcher: Matcher = fuzzy_match,
) -> list[Container[T]]:
    """Return matching records best-first.

    The sort key is the effective frecency score plus the textual relevance.
    Records never change here. The empty search matches everything with
    relevance 0, which leaves pure frecency ordering.
    """
    if limit is not None and limit <= 0:
        return []

    scored: list[tuple[bool, float, int, Container[T]]] = []
    for position, record in enumerate(records):
        relevance = relevance_for(matcher, record.item.sort_string(), search)
        if relevance is None:
            continue
        key = effective_score(record.score, elapsed, half_life) + relevance
        # Undefined keys sort after every comparable one, in insertion order.
        defined = math.isfinite(key)
        scored.append(
            (
                not defined,
                -key if defined else 0.0,
                position,
                Container(id=record.id, item=record.item, score=key if defined else 0.0),
            )
        )

    scored.sort(key=lambda row: row[:3])
    hits = [row[3] for row in scored]
    if limit is not None:
        hits = hits[:limit]
    return hits
