"""Tests for Handlebars prompt rendering: helpers, templates and error handling."""

import pytest

from kitchen_wars.models import MeterSet
from kitchen_wars.prompts import (
    EVALUATION_PROMPT,
    EVENT_CARD_PROMPT,
    PromptError,
    build_event_context,
    render_prompt,
)


def _ctx(**overrides):
    ctx = build_event_context(
        meters=MeterSet(reputation=61, profit=42, customer_flow=50, staff_morale=33),
        day=12,
        phase="成长期",
        tags=[],
        sides=[],
        trend="暂无数据",
        event_type="供应链问题",
        crisis=False,
    )
    ctx.update(overrides)
    return ctx


# ── render_prompt ────────────────────────────────────────────


def test_render_simple_variable():
    assert render_prompt("Hello {{name}}!", {"name": "World"}) == "Hello World!"


def test_render_invalid_template():
    with pytest.raises(PromptError):
        render_prompt("{{> missing_partial}}", {})


def test_last_n():
    tpl = "{{#last items 2}}{{this}} {{/last}}"
    assert render_prompt(tpl, {"items": ["a", "b", "c"]}) == "b c "


def test_last_more_than_length():
    tpl = "{{#last items 10}}{{this}} {{/last}}"
    assert render_prompt(tpl, {"items": ["a"]}) == "a "


# ── Event card prompt ────────────────────────────────────────


def test_event_prompt_meters_and_day():
    prompt = render_prompt(EVENT_CARD_PROMPT, _ctx())
    assert "第12天 (成长期)" in prompt
    assert "口碑:61, 利润:42, 客流:50, 员工:33" in prompt
    assert "建议事件类型: 供应链问题" in prompt


def test_event_prompt_empty_history():
    prompt = render_prompt(EVENT_CARD_PROMPT, _ctx())
    assert "玩家标签: 暂无" in prompt
    assert "最近选择: 暂无" in prompt
    assert "需要触发危机事件" not in prompt


def test_event_prompt_tags_and_sides():
    prompt = render_prompt(EVENT_CARD_PROMPT, _ctx(
        tags=["profit_focused", "risk_taker"],
        sides=["left"] * 3 + ["right"] * 9,
    ))
    assert "profit_focused risk_taker" in prompt
    # only the last ten sides are shown
    assert "最近选择: left right right" in prompt


def test_event_prompt_crisis_flag():
    prompt = render_prompt(EVENT_CARD_PROMPT, _ctx(crisis=True))
    assert "需要触发危机事件" in prompt


def test_free_text_not_html_escaped():
    prompt = render_prompt(EVENT_CARD_PROMPT, _ctx(trend="偏向保守/口碑导向", event_type="A&B"))
    assert "偏向保守/口碑导向" in prompt
    assert "A&B" in prompt


def test_json_example_survives_rendering():
    prompt = render_prompt(EVENT_CARD_PROMPT, _ctx())
    assert '"leftEffects": { "reputation": 5, "profit": -3 }' in prompt


# ── Evaluation prompt ────────────────────────────────────────


def test_evaluation_prompt_with_ending():
    prompt = render_prompt(EVALUATION_PROMPT, {
        "day": 9,
        "meters": MeterSet().model_dump(),
        "style": "利润导向",
        "trend": "选择较为均衡",
        "profit_focused": 5,
        "reputation_focused": 2,
        "balanced": 1,
        "ending": "资金链断裂",
    })
    assert "经营天数: 9天" in prompt
    assert "利润导向选择: 5次" in prompt
    assert "结局: 资金链断裂" in prompt
