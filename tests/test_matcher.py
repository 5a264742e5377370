from quicklaunch.frecency.matcher import fuzzy_match


def test_empty_pattern_matches_with_zero_relevance() -> None:
    assert fuzzy_match("Firefox", "") == 0
    assert fuzzy_match("", "") == 0


def test_non_subsequence_does_not_match() -> None:
    assert fuzzy_match("Firefox", "xz") is None
    assert fuzzy_match("Firefox", "fox!") is None
    assert fuzzy_match("", "a") is None


def test_matching_is_case_insensitive_and_positive() -> None:
    score = fuzzy_match("Firefox", "FIRE")
    assert score is not None and score > 0
    assert fuzzy_match("firefox", "Ff") is not None


def test_consecutive_run_beats_scattered_match() -> None:
    assert fuzzy_match("abc def", "ab") > fuzzy_match("axxb", "ab")


def test_word_start_beats_mid_word() -> None:
    assert fuzzy_match("foo_bar", "b") > fuzzy_match("foobar", "b")
    assert fuzzy_match("VisualStudio", "st") > fuzzy_match("Visualstudio", "st")


def test_early_first_match_scores_higher() -> None:
    assert fuzzy_match("ab", "a") > fuzzy_match("xxab", "a")


def test_case_folding_keeps_positions_aligned() -> None:
    # "İ".lower() is two code points; matching must not drift.
    assert fuzzy_match("İstanbul", "ist") is not None
    assert fuzzy_match("İstanbul", "bul") is not None
