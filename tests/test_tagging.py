"""Tests for kitchen_wars.tagging — behavioural tags from choice history."""

from kitchen_wars.models import ChoiceRecord, EffectDelta, MeterSet
from kitchen_wars.tagging import GENERATIVE_MAX_TAGS, GENERATIVE_RISK_THRESHOLD, analyze


def _record(day: int = 1, side: str = "right", **effects) -> ChoiceRecord:
    return ChoiceRecord(
        day=day, side=side, effects=EffectDelta(**effects),
        before=MeterSet(), after=MeterSet(),
    )


def _history(n: int, **effects) -> list[ChoiceRecord]:
    return [_record(day=i + 1, **effects) for i in range(n)]


def test_fewer_than_three_choices_gives_no_tags():
    assert analyze(_history(2, profit=10), MeterSet(reputation=90)) == []


def test_consistent_profit_choices():
    tags = analyze(_history(5, profit=6, reputation=-2), MeterSet())
    assert "profit_focused" in tags
    assert "reputation_lover" not in tags


def test_reputation_choices():
    tags = analyze(_history(4, reputation=5, profit=-3), MeterSet())
    assert tags[0] == "reputation_lover"


def test_tie_gives_neither_tendency():
    history = [_record(profit=5), _record(reputation=5), _record(profit=5, reputation=5)]
    tags = analyze(history, MeterSet())
    assert "profit_focused" not in tags
    assert "reputation_lover" not in tags


def test_only_last_window_counts():
    history = _history(10, reputation=5) + _history(5, profit=5)
    assert analyze(history, MeterSet())[0] == "profit_focused"


def test_big_swings_mark_risk_taker():
    tags = analyze(_history(5, profit=10, reputation=-8), MeterSet())
    assert "risk_taker" in tags
    assert "conservative" not in tags


def test_small_swings_mark_conservative():
    tags = analyze(_history(5, profit=2, staff_morale=1), MeterSet())
    assert "conservative" in tags


def test_middle_band_has_no_risk_tag():
    # 2 of 5 risky: 40% sits between the 30% and 60% bounds
    history = _history(3, profit=1) + _history(2, profit=20)
    tags = analyze(history, MeterSet())
    assert "risk_taker" not in tags
    assert "conservative" not in tags


def test_high_meters_add_tags_in_order():
    meters = MeterSet(reputation=71, customer_flow=80, staff_morale=75)
    history = [_record(profit=5), _record(reputation=5), _record(staff_morale=1)]
    tags = analyze(history, meters, max_tags=5)
    assert tags == ["conservative", "social_media_savvy", "staff_friendly", "customer_first"]


def test_truncated_to_three_by_default():
    meters = MeterSet(reputation=71, customer_flow=80, staff_morale=75)
    tags = analyze(_history(5, profit=6), meters)
    assert tags == ["profit_focused", "conservative", "social_media_savvy"]


def test_generative_variant_threshold():
    # magnitude 18: risky at 15, not at 20
    history = _history(5, profit=10, reputation=-8)
    assert "risk_taker" in analyze(history, MeterSet())
    relaxed = analyze(
        history, MeterSet(),
        risk_threshold=GENERATIVE_RISK_THRESHOLD, max_tags=GENERATIVE_MAX_TAGS,
    )
    assert "conservative" in relaxed
