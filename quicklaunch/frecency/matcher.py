"""Fuzzy subsequence matcher used to score search text against items.

Contract: ``None`` when the pattern is not a case-insensitive subsequence of
the choice, otherwise a non-negative relevance (0 only for the empty
pattern). Higher is better; consecutive runs, word starts and an early first
match score higher.
"""

from __future__ import annotations

from collections.abc import Callable

Matcher = Callable[[str, str], int | None]

SCORE_MATCH = 16
BONUS_CONSECUTIVE = 8
BONUS_WORD_START = 10
BONUS_FIRST_CHAR = 6
PENALTY_GAP = 1
PENALTY_LEADING = 1
MAX_LEADING_PENALTY = 6

_SEPARATORS = frozenset(" -_./\\:")


def _fold(text: str) -> str:
    # Per-character lowering keeps indices aligned with the original text.
    return "".join(ch.lower()[:1] for ch in text)


def _is_word_start(text: str, idx: int) -> bool:
    if idx == 0:
        return True
    prev, cur = text[idx - 1], text[idx]
    if prev in _SEPARATORS:
        return True
    return prev.islower() and cur.isupper()


def _window(choice: str, pattern: str) -> tuple[int, int] | None:
    """Find a tight [start, end] window containing the pattern as a subsequence."""
    pi = 0
    end = -1
    for ci, ch in enumerate(choice):
        if ch == pattern[pi]:
            pi += 1
            if pi == len(pattern):
                end = ci
                break
    if end < 0:
        return None
    # Walk back from the end to pick the latest possible start.
    pi = len(pattern) - 1
    start = end
    for ci in range(end, -1, -1):
        if choice[ci] == pattern[pi]:
            pi -= 1
            if pi < 0:
                start = ci
                break
    return start, end


def fuzzy_match(choice: str, pattern: str) -> int | None:
    """Score ``pattern`` against ``choice``."""
    if not pattern:
        return 0
    lowered = _fold(choice)
    needle = _fold(pattern)
    window = _window(lowered, needle)
    if window is None:
        return None
    start, end = window

    score = 0
    pi = 0
    prev_idx = -2
    for ci in range(start, end + 1):
        if pi >= len(needle):
            break
        if lowered[ci] != needle[pi]:
            score -= PENALTY_GAP
            continue
        score += SCORE_MATCH
        if ci == prev_idx + 1:
            score += BONUS_CONSECUTIVE
        if _is_word_start(choice, ci):
            score += BONUS_WORD_START
            if pi == 0:
                score += BONUS_FIRST_CHAR
        prev_idx = ci
        pi += 1
    score -= min(start * PENALTY_LEADING, MAX_LEADING_PENALTY)
    return max(score, 1)
