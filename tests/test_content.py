"""Tests for kitchen_wars.content — authored/generated routing, parsing and fallback."""

import asyncio
import json
import random

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from kitchen_wars.catalog import DEFAULT_EVENT, get_initial_event
from kitchen_wars.content import (
    ContentOutcome,
    EventContentProvider,
    GenerativeContentProvider,
    PlayerProfile,
    choice_trend,
    day_phase,
    parse_event_card,
    should_request_crisis,
)
from kitchen_wars.errors import ContentError
from kitchen_wars.llm import HttpLLM, LLMError
from kitchen_wars.models import MeterSet, Session

GENERATED = {
    "title": "网红要来探店",
    "description": "一位百万粉丝博主私信说想来打卡，但希望你能包下他的全部消费。",
    "category": "opportunity",
    "leftChoice": "婉拒，靠菜品说话",
    "rightChoice": "答应，流量就是钱",
    "leftEffects": {"reputation": 4, "customerFlow": -2},
    "rightEffects": {"profit": -5, "customerFlow": 9},
}


def _session(day: int = 5, **meters) -> Session:
    return Session(id=3, player_id="p", current_day=day, meters=MeterSet(**meters))


# ── Hints ────────────────────────────────────────────────


def test_day_phase_bands():
    assert day_phase(1) == "新手期"
    assert day_phase(7) == "新手期"
    assert day_phase(8) == "成长期"
    assert day_phase(30) == "成长期"
    assert day_phase(100) == "稳定期"
    assert day_phase(101) == "传奇期"


def test_choice_trend():
    assert choice_trend([]) == "暂无数据"
    assert choice_trend(["left", "left", "left", "right"]) == "偏向保守/口碑导向"
    assert choice_trend(["right", "right", "left"]) == "偏向激进/利润导向"
    assert choice_trend(["left", "right"]) == "选择较为均衡"


def test_crisis_hint_on_extreme_meter():
    assert should_request_crisis(MeterSet(profit=19), 4, []) is True
    assert should_request_crisis(MeterSet(staff_morale=81), 4, []) is True
    assert should_request_crisis(MeterSet(profit=20, staff_morale=80), 4, []) is False


def test_crisis_hint_every_fifteenth_day():
    assert should_request_crisis(MeterSet(), 30, []) is True


def test_crisis_hint_on_streak():
    assert should_request_crisis(MeterSet(), 4, ["left", "right", "right", "right", "right", "right"]) is True
    assert should_request_crisis(MeterSet(), 4, ["right", "right", "left"]) is False


# ── Parsing ──────────────────────────────────────────────


def test_parse_plain_json():
    card = parse_event_card(json.dumps(GENERATED, ensure_ascii=False), 2005)
    assert card.id == 2005
    assert card.is_generated is True
    assert card.category == "opportunity"
    assert card.right_effects.customer_flow == 9


def test_parse_fenced_json_with_chatter():
    text = "好的，这是事件：\n```json\n" + json.dumps(GENERATED, ensure_ascii=False) + "\n```"
    assert parse_event_card(text, 2005).title == GENERATED["title"]


def test_parse_rejects_non_json():
    with pytest.raises(ContentError):
        parse_event_card("今天天气不错", 2005)


def test_parse_rejects_broken_json():
    with pytest.raises(ContentError):
        parse_event_card('{"title": "x", ', 2005)


def test_parse_rejects_ending_category():
    bad = dict(GENERATED, category="ending")
    with pytest.raises(ContentError):
        parse_event_card(json.dumps(bad), 2005)


def test_parse_rejects_out_of_range_effect():
    bad = dict(GENERATED, leftEffects={"profit": 80})
    with pytest.raises(ContentError):
        parse_event_card(json.dumps(bad), 2005)


# ── Outcome ──────────────────────────────────────────────


def test_outcome_fallback():
    card = get_initial_event(1)
    assert ContentOutcome.success(card).or_fallback(DEFAULT_EVENT) is card
    failed = ContentOutcome.failure(ContentError("x"))
    assert failed.ok is False
    assert failed.or_fallback(DEFAULT_EVENT) is DEFAULT_EVENT


# ── Generative provider ──────────────────────────────────


async def test_generate_success():
    llm = AsyncMock(return_value=json.dumps(GENERATED))
    provider = GenerativeContentProvider(llm, rng=random.Random(0))
    outcome = await provider.generate(_session(day=6))
    assert outcome.ok
    assert outcome.card.id == 2006
    stage, prompt = llm.call_args[0]
    assert stage == "event_card"
    assert "第6天" in prompt


async def test_prompt_carries_state():
    provider = GenerativeContentProvider(None, rng=random.Random(0))
    prompt = provider.build_prompt(PlayerProfile(
        meters=MeterSet(reputation=12), day=9,
        tags=["risk_taker"], sides=["left", "right"],
    ))
    assert "口碑:12" in prompt
    assert "成长期" in prompt
    assert "risk_taker" in prompt
    assert "left right" in prompt
    assert "需要触发危机事件" in prompt


async def test_no_llm_falls_back():
    provider = GenerativeContentProvider(None)
    outcome = await provider.generate(_session())
    assert not outcome.ok
    assert await provider.next_event(_session()) == DEFAULT_EVENT


async def test_llm_error_falls_back():
    llm = AsyncMock(side_effect=LLMError("Cannot connect"))
    provider = GenerativeContentProvider(llm)
    outcome = await provider.generate(_session())
    assert "Cannot connect" in str(outcome.error)
    assert await provider.next_event(_session()) == DEFAULT_EVENT


async def test_timeout_falls_back():
    async def slow(stage, prompt):
        await asyncio.sleep(5)
        return json.dumps(GENERATED)

    provider = GenerativeContentProvider(slow, timeout=0.01)
    outcome = await provider.generate(_session())
    assert not outcome.ok
    assert "timed out" in str(outcome.error)
    assert await provider.next_event(_session()) == DEFAULT_EVENT


async def test_malformed_reply_falls_back():
    provider = GenerativeContentProvider(AsyncMock(return_value="{not json}"))
    assert await provider.next_event(_session()) == DEFAULT_EVENT


async def test_null_completion_text_falls_back():
    resp = MagicMock()
    resp.json.return_value = {"results": [{"text": None}]}
    provider = GenerativeContentProvider(HttpLLM(provider_url="http://localhost:5001"))
    with patch("httpx.AsyncClient.post", AsyncMock(return_value=resp)):
        outcome = await provider.generate(_session())
    assert not outcome.ok
    assert "Unexpected response format" in str(outcome.error)


@pytest.mark.parametrize("error", [
    httpx.InvalidURL("bad url"),
    RuntimeError("backend exploded"),
    TypeError("unsupported operand"),
])
async def test_unexpected_generator_error_falls_back(error):
    provider = GenerativeContentProvider(AsyncMock(side_effect=error))
    outcome = await provider.generate(_session())
    assert isinstance(outcome.error, ContentError)
    assert await provider.next_event(_session()) == DEFAULT_EVENT


async def test_non_text_reply_falls_back():
    provider = GenerativeContentProvider(AsyncMock(return_value=None))
    outcome = await provider.generate(_session())
    assert not outcome.ok
    assert "expected text" in str(outcome.error)


# ── Router ───────────────────────────────────────────────


async def test_authored_days_use_catalog():
    llm = AsyncMock(return_value=json.dumps(GENERATED))
    provider = EventContentProvider(llm)
    card = await provider.next_event(_session(day=3))
    assert card == get_initial_event(3, 3)
    llm.assert_not_called()


async def test_later_days_use_generator():
    llm = AsyncMock(return_value=json.dumps(GENERATED))
    provider = EventContentProvider(llm)
    card = await provider.next_event(_session(day=4))
    assert card.is_generated
    llm.assert_awaited_once()


async def test_authored_days_configurable():
    llm = AsyncMock(return_value=json.dumps(GENERATED))
    provider = EventContentProvider(llm, authored_days=1)
    card = await provider.next_event(_session(day=2))
    assert card.is_generated
