import math

from quicklaunch.apps.models import App
from quicklaunch.frecency.identity import item_identity
from quicklaunch.frecency.models import Record
from quicklaunch.frecency.ranking import rank_records, relevance_for
from quicklaunch.frecency.scoring import DEFAULT_HALF_LIFE

HL = DEFAULT_HALF_LIFE


def _record(name: str, score: float = 0.0) -> Record[App]:
    app = App(name=name, exec=name.lower(), icon=name.lower())
    return Record(id=item_identity(app), item=app, score=score)


def _names(hits) -> list[str]:
    return [hit.item.name for hit in hits]


def test_frecency_breaks_relevance_ties() -> None:
    records = [_record("Firefox", 5.0), _record("Files"), _record("Filet")]
    hits = rank_records(records, "fi", elapsed=0.0, half_life=HL)
    assert _names(hits) == ["Firefox", "Files", "Filet"]
    assert hits[0].score > hits[1].score


def test_non_matching_items_are_excluded() -> None:
    records = [_record("Firefox"), _record("Terminal"), _record("Files")]
    assert _names(rank_records(records, "fi", elapsed=0.0, half_life=HL)) == ["Firefox", "Files"]


def test_empty_search_orders_by_frecency_alone() -> None:
    records = [_record("A", 1.0), _record("B", 3.0), _record("C", 1.0), _record("D")]
    hits = rank_records(records, "", elapsed=0.0, half_life=HL)
    assert _names(hits) == ["B", "A", "C", "D"]
    assert hits[0].score == 3.0


def test_scores_decay_with_elapsed_time() -> None:
    hits = rank_records([_record("A", 8.0)], "", elapsed=2 * HL, half_life=HL)
    assert math.isclose(hits[0].score, 2.0)


def test_limit_truncates_and_non_positive_limit_is_empty() -> None:
    records = [_record(name) for name in ("Alpha", "Beta", "Gamma")]
    assert len(rank_records(records, "", elapsed=0.0, half_life=HL, limit=2)) == 2
    assert rank_records(records, "", elapsed=0.0, half_life=HL, limit=0) == []
    assert rank_records(records, "", elapsed=0.0, half_life=HL, limit=-3) == []
    assert len(rank_records(records, "", elapsed=0.0, half_life=HL, limit=10)) == 3


def test_undefined_keys_sink_to_the_end_in_insertion_order() -> None:
    records = [_record("N", math.nan), _record("Two", 2.0), _record("Inf", math.inf), _record("One", 1.0)]
    hits = rank_records(records, "", elapsed=0.0, half_life=HL)
    assert _names(hits) == ["Two", "One", "N", "Inf"]


def test_misbehaving_matcher_never_raises() -> None:
    records = [_record("A"), _record("B"), _record("C")]

    def matcher(text: str, search: str) -> float | None:
        return {"A": math.nan, "B": -5, "C": 7}[text]

    assert _names(rank_records(records, "x", elapsed=0.0, half_life=HL, matcher=matcher)) == ["C"]


def test_zero_relevance_only_counts_for_the_empty_search() -> None:
    def matcher(text: str, search: str) -> int:
        return 0

    assert relevance_for(matcher, "Firefox", "") == 0.0
    assert relevance_for(matcher, "Firefox", "fi") is None


def test_ranking_does_not_modify_records() -> None:
    records = [_record("Firefox", 5.0), _record("Files", 1.0)]
    rank_records(records, "fi", elapsed=HL, half_life=HL)
    assert [r.score for r in records] == [5.0, 1.0]
