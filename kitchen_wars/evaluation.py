"""End-of-run summaries: share text and a critic-style evaluation of play."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from kitchen_wars.content import choice_trend
from kitchen_wars.llm import LLM, LLMError
from kitchen_wars.meters import METERS
from kitchen_wars.models import ChoiceRecord, MeterSet, Session
from kitchen_wars.prompts import EVALUATION_PROMPT, render_prompt

logger = logging.getLogger(__name__)

EVALUATION_WINDOW = 10


def share_text(session: Session) -> str:
    m = session.meters
    lines = [
        f"我在《后厨风云》中经营了{session.current_day}天！",
        f"口碑:{m.reputation} 利润:{m.profit} 客流:{m.customer_flow} 员工:{m.staff_morale}",
    ]
    if session.status == "ended" and session.ending_title:
        lines.append(f"结局：{session.ending_title}")
    lines.append("你能做得更好吗？")
    return "\n".join(lines)


@dataclass(frozen=True)
class StyleCounts:
    profit_focused: int
    reputation_focused: int
    balanced: int

    @property
    def dominant(self) -> str:
        if self.profit_focused > self.reputation_focused:
            return "利润导向"
        if self.reputation_focused > self.profit_focused:
            return "口碑导向"
        return "平衡发展"


def style_counts(choices: Sequence[ChoiceRecord]) -> StyleCounts:
    profit = reputation = balanced = 0
    for c in choices:
        p, r = c.effects.get("profit"), c.effects.get("reputation")
        if p > r:
            profit += 1
        elif r > p:
            reputation += 1
        else:
            balanced += 1
    return StyleCounts(profit, reputation, balanced)


def default_evaluation(meters: MeterSet) -> str:
    average = sum(meters.get(m) for m in METERS) / len(METERS)
    if average >= 70:
        return "经营有方！你已经是餐厅界的老司机了，各项数据都很不错。继续保持这个节奏，说不定能成为下一个米其林餐厅呢！"
    if average >= 50:
        return "中规中矩的经营，像个稳重的大叔。虽然没有什么亮眼表现，但也没有踩大坑。建议可以尝试更大胆的策略，毕竟富贵险中求嘛！"
    return "emmm...经营状况有点堪忧啊朋友。不过别灰心，失败乃成功之母，从错误中学习才能成长。建议重新审视一下经营策略哦！"


def build_evaluation_prompt(session: Session) -> str:
    recent = session.choices[-EVALUATION_WINDOW:]
    counts = style_counts(recent)
    return render_prompt(EVALUATION_PROMPT, {
        "day": session.current_day,
        "meters": session.meters.model_dump(),
        "style": counts.dominant,
        "trend": choice_trend([c.side for c in recent]),
        "profit_focused": counts.profit_focused,
        "reputation_focused": counts.reputation_focused,
        "balanced": counts.balanced,
        "ending": session.ending_title or "",
    })


async def generate_evaluation(llm: LLM | None, session: Session, timeout: float = 20.0) -> str:
    """Ask the LLM for a short review of the run; canned text on any failure."""
    if llm is None:
        return default_evaluation(session.meters)

    prompt = build_evaluation_prompt(session)
    try:
        text = await asyncio.wait_for(llm("evaluation", prompt), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("evaluation timed out after %ss for session %s", timeout, session.id)
        return default_evaluation(session.meters)
    except LLMError as e:
        logger.warning("evaluation failed for session %s: %s", session.id, e)
        return default_evaluation(session.meters)
    except Exception:
        logger.exception("unexpected error from evaluation generator for session %s", session.id)
        return default_evaluation(session.meters)

    if not isinstance(text, str) or not text.strip():
        return default_evaluation(session.meters)
    return text.strip()
