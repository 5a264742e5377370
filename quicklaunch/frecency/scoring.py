"""Exponential-decay frecency scoring.

Raw scores are stored as of one shared reference time. The effective score
at a later moment is the raw score halved once per elapsed half life, so
updates only need to rewrite the record being launched.
"""

from __future__ import annotations

import math
import time

from quicklaunch.frecency.errors import ScoreOverflowError

DEFAULT_HALF_LIFE = 60.0 * 60.0 * 24.0 * 3.0


def current_time_secs() -> float:
    """Wall-clock seconds since the epoch, truncated to milliseconds."""
    return time.time_ns() // 1_000_000 / 1000.0


def decay_factor(elapsed: float, half_life: float) -> float:
    """``2 ** (elapsed / half_life)``, saturating to ``inf`` instead of raising."""
    if half_life <= 0 or not math.isfinite(half_life):
        raise ValueError(f"half_life must be a positive finite number, got {half_life!r}")
    try:
        return math.pow(2.0, max(0.0, elapsed) / half_life)
    except OverflowError:
        return math.inf


def effective_score(raw: float, elapsed: float, half_life: float) -> float:
    """Decay a raw score by ``elapsed`` seconds."""
    factor = decay_factor(elapsed, half_life)
    if math.isinf(factor):
        return 0.0
    return raw / factor


def raw_from_effective(effective: float, elapsed: float, half_life: float) -> float:
    """Re-express a score valid now as a raw score at the reference time."""
    raw = effective * decay_factor(elapsed, half_life)
    if not math.isfinite(raw):
        raise ScoreOverflowError(
            f"score {effective!r} cannot be expressed {elapsed:.0f}s after the reference time; "
            "rebaseline the database"
        )
    return max(0.0, raw)


def update_frecency(raw: float, weight: float, elapsed: float, half_life: float) -> float:
    """Decay ``raw`` to now, add ``weight``, and re-express at the reference time."""
    current = effective_score(raw, elapsed, half_life) + weight
    return raw_from_effective(max(0.0, current), elapsed, half_life)
