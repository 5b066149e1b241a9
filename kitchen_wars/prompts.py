"""Handlebars prompt rendering for event generation and play evaluation."""

from collections.abc import Callable
from typing import Any

import pybars

from kitchen_wars.models import MeterSet, PlayerTag, Side

_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}


class PromptError(Exception):
    """Raised when a Handlebars template fails to compile or render."""


# ── Custom Handlebars helpers ────────────────────────────


def _helper_last(this, options, items, count):
    """{{#last array N}}...{{/last}} — iterate over the last N items."""
    result = []
    for item in list(items)[-int(count):]:
        result.extend(options["fn"](item))
    return result


_HELPERS: dict[str, Callable] = {
    "last": _helper_last,
}


def render_prompt(template_str: str, context: dict[str, Any]) -> str:
    """Compile and render a Handlebars template with the given context.

    Templates are cached by source string to avoid recompilation.
    """
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        return str(compiled(context, helpers=_HELPERS))
    except Exception as e:
        raise PromptError(f"Template error: {e}") from e


# ── Templates ────────────────────────────────────────────

EVENT_CARD_PROMPT = """\
你是《后厨风云》游戏的剧情设计师。请为玩家生成一个餐厅经营事件。

【游戏背景】
这是一款讽刺现实的餐厅模拟游戏，玩家需要在口碑与利润之间做抉择，同时应对网络舆论风暴。

【当前状态】
- 游戏天数: 第{{day}}天 ({{phase}})
- 数值状态: 口碑:{{meters.reputation}}, 利润:{{meters.profit}}, 客流:{{meters.customer_flow}}, 员工:{{meters.staff_morale}}
- 玩家标签: {{#if tags}}{{#each tags}}{{this}} {{/each}}{{else}}暂无{{/if}}
- 最近选择: {{#if sides}}{{#last sides 10}}{{this}} {{/last}}{{else}}暂无{{/if}}
- 最近选择趋势: {{{trend}}}
- 建议事件类型: {{{event_type}}}
{{#if crisis}}
- ⚠️ 需要触发危机事件 (category 使用 crisis)
{{/if}}

【生成要求】
1. 事件要符合建议的事件类型，避免总是生成探店相关内容
2. 标题要吸引眼球，像真实的热搜标题，不超过100字
3. 描述要生动具体，10到500字，包含网络梗和热点元素
4. 两个选择要形成明显的价值观冲突（口碑vs利润），每个不超过100字
5. 数值影响要合理，单项影响控制在-15到+15之间
6. 语言风格要幽默讽刺，符合网络文化

【输出格式】
只返回一个JSON对象，不要包含其他文字。字段:
title, description, category (daily / crisis / opportunity),
leftChoice, rightChoice,
leftEffects 和 rightEffects (对象，可选整数字段 reputation, profit, customerFlow, staffMorale)

示例:
{ "title": "...", "description": "...", "category": "daily", "leftChoice": "...", "rightChoice": "...", "leftEffects": { "reputation": 5, "profit": -3 }, "rightEffects": { "profit": 8 } }
"""

EVALUATION_PROMPT = """\
你是《后厨风云》游戏的资深评论家，请对玩家的经营表现进行点评。

【玩家数据】
- 经营天数: {{day}}天
- 当前状态: 口碑:{{meters.reputation}}, 利润:{{meters.profit}}, 客流:{{meters.customer_flow}}, 员工:{{meters.staff_morale}}
- 主要风格: {{{style}}}
- 选择趋势: {{{trend}}}
- 利润导向选择: {{profit_focused}}次
- 口碑导向选择: {{reputation_focused}}次
- 平衡选择: {{balanced}}次
{{#if ending}}
- 结局: {{{ending}}}
{{/if}}

【评价要求】
1. 语言风格要幽默风趣，像资深游戏玩家的点评
2. 既要肯定玩家的优点，也要指出可以改进的地方
3. 结合具体数值进行分析，不要空泛
4. 字数控制在100-150字之间
5. 给出具体的经营建议

只返回评价正文。
"""


def build_event_context(
    meters: MeterSet,
    day: int,
    phase: str,
    tags: list[PlayerTag],
    sides: list[Side],
    trend: str,
    event_type: str,
    crisis: bool,
) -> dict[str, Any]:
    """Assemble template variables for EVENT_CARD_PROMPT."""
    return {
        "day": day,
        "phase": phase,
        "meters": meters.model_dump(),
        "tags": list(tags),
        "sides": list(sides),
        "trend": trend,
        "event_type": event_type,
        "crisis": crisis,
    }
