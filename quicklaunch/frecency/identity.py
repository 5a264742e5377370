"""Stable content-derived identifiers for database items."""

from __future__ import annotations

import hashlib
import json
from typing import Any

from quicklaunch.frecency.models import DBItem

# Keeps ids inside SQLite's signed 64-bit INTEGER range.
_ID_MASK = (1 << 63) - 1


def _canonical(value: Any) -> Any:
    if isinstance(value, (tuple, list)):
        return [_canonical(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _canonical(v) for k, v in value.items()}
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def identity_from_fields(fields: tuple[Any, ...]) -> int:
    """Hash identity fields to a non-negative 63-bit integer."""
    payload = json.dumps(
        _canonical(fields),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")
    digest = hashlib.sha256(payload).digest()
    return int.from_bytes(digest[:8], "big") & _ID_MASK


def item_identity(item: DBItem) -> int:
    """Return the stable id for ``item``.

    Depends only on ``item.identity_fields()``, never on scores or any
    counter, so a rescan that finds the same item yields the same id.
    """
    return identity_from_fields(tuple(item.identity_fields()))
