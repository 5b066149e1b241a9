"""Tests for kitchen_wars.catalog — authored events and deterministic selection."""

import pytest

from kitchen_wars.catalog import (
    AUTHORED_EVENTS,
    DEFAULT_EVENT,
    DEFAULT_EVENT_ID,
    get_initial_event,
)


def test_day_one_is_philosophy_card():
    card = get_initial_event(1)
    assert card.id == 1
    assert card.title == "餐厅理念选择"
    assert card.left_effects.reputation == 8
    assert card.left_effects.profit == -5
    assert card.left_effects.staff_morale == 3


def test_day_one_ignores_seed():
    assert get_initial_event(1, 5) == get_initial_event(1, 99)


def test_same_arguments_same_card():
    for day in range(2, 30):
        assert get_initial_event(day, 7) == get_initial_event(day, 7)


def test_id_is_day_plus_thousand():
    assert get_initial_event(2).id == 1002
    assert get_initial_event(12, 3).id == 1012


def test_early_days_only_daily():
    for day in (2, 3):
        for seed in range(10):
            assert get_initial_event(day, seed).category == "daily"


def test_index_formula():
    daily = [e for e in AUTHORED_EVENTS if e.category == "daily"]
    card = get_initial_event(2, 1)
    assert card.title == daily[(2 + 1000) % len(daily)].title


def test_invalid_day_rejected():
    with pytest.raises(ValueError):
        get_initial_event(0)


def test_catalog_size_and_default():
    assert len(AUTHORED_EVENTS) == 12
    assert DEFAULT_EVENT.id == DEFAULT_EVENT_ID
    assert DEFAULT_EVENT.title == "平凡的一天"
