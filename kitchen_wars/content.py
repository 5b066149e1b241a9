"""Event content providers: where the next EventCard comes from.

Two variants behind one router:

    AuthoredContentProvider    — catalog lookup, used for days 1–3. Never fails.
    GenerativeContentProvider  — one LLM call per event, used from day 4.

The generative variant returns an explicit ContentOutcome from generate(); its
next_event() applies the fallback combinator so callers always receive a
valid card. Network errors, timeouts, unparseable replies, schema violations
and any other generator error become a failed outcome and are replaced by
DEFAULT_EVENT.

The crisis heuristic (meters near the edges, every 15th day, five identical
choices in a row) is only a hint in the prompt. Nothing checks the generated
category afterwards.
"""

from __future__ import annotations

import asyncio
import json
import logging
import random
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from kitchen_wars.catalog import DEFAULT_EVENT, get_initial_event
from kitchen_wars.errors import ContentError
from kitchen_wars.llm import LLM, LLMError
from kitchen_wars.meters import METERS
from kitchen_wars.models import EffectDelta, EventCard, MeterSet, PlayerTag, Session, Side
from kitchen_wars.prompts import EVENT_CARD_PROMPT, build_event_context, render_prompt
from kitchen_wars.tagging import GENERATIVE_MAX_TAGS, GENERATIVE_RISK_THRESHOLD, analyze

logger = logging.getLogger(__name__)

AUTHORED_DAYS = 3
GENERATED_ID_BASE = 2000
TREND_WINDOW = 10
CRISIS_LOW = 20
CRISIS_HIGH = 80
CRISIS_CYCLE = 15

EVENT_TYPES = (
    "食品安全事件",
    "员工管理问题",
    "网络舆论危机",
    "供应链问题",
    "竞争对手挑战",
    "政策法规变化",
    "顾客投诉纠纷",
    "媒体采访报道",
    "节日营销机会",
    "设备故障维修",
    "新菜品研发",
    "租金成本压力",
    "网红合作邀请",
    "环保监督检查",
    "税务稽查审计",
    "员工培训需求",
)


# ---------------------------------------------------------------------------
# Prompt hints
# ---------------------------------------------------------------------------

def day_phase(day: int) -> str:
    if day <= 7:
        return "新手期"
    if day <= 30:
        return "成长期"
    if day <= 100:
        return "稳定期"
    return "传奇期"


def choice_trend(sides: Sequence[Side]) -> str:
    """Summarise a run of left/right choices for the prompt."""
    if not sides:
        return "暂无数据"
    left = sum(1 for s in sides if s == "left")
    right = len(sides) - left
    if left > right * 1.5:
        return "偏向保守/口碑导向"
    if right > left * 1.5:
        return "偏向激进/利润导向"
    return "选择较为均衡"


def should_request_crisis(meters: MeterSet, day: int, sides: Sequence[Side]) -> bool:
    danger = any(
        meters.get(m) < CRISIS_LOW or meters.get(m) > CRISIS_HIGH for m in METERS
    )
    cyclic = day % CRISIS_CYCLE == 0
    recent = list(sides)[-5:]
    streak = bool(recent) and len(set(recent)) == 1
    return danger or cyclic or streak


# ---------------------------------------------------------------------------
# Generated content parsing
# ---------------------------------------------------------------------------

class GeneratedEvent(BaseModel):
    """Wire shape of a generated card; ids and provenance are assigned locally."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=10, max_length=500)
    category: Literal["daily", "crisis", "opportunity"]
    left_choice: str = Field(min_length=1, max_length=100)
    right_choice: str = Field(min_length=1, max_length=100)
    left_effects: EffectDelta = Field(default_factory=EffectDelta)
    right_effects: EffectDelta = Field(default_factory=EffectDelta)


_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.MULTILINE)


def parse_event_card(text: str, card_id: int) -> EventCard:
    """Parse and validate LLM output into a generated EventCard.

    Accepts a bare JSON object, optionally wrapped in a ``` fence or
    surrounded by chatter. Raises ContentError on any failure.
    """
    cleaned = _FENCE.sub("", text.strip())
    start, end = cleaned.find("{"), cleaned.rfind("}")
    if start == -1 or end <= start:
        raise ContentError("Generated content contains no JSON object")
    try:
        data = json.loads(cleaned[start:end + 1])
    except json.JSONDecodeError as e:
        raise ContentError(f"Generated content is not valid JSON: {e}") from e
    try:
        draft = GeneratedEvent.model_validate(data)
    except ValidationError as e:
        raise ContentError(f"Generated content failed validation: {e.error_count()} errors") from e
    return EventCard(
        id=card_id,
        is_generated=True,
        **draft.model_dump(),
    )


# ---------------------------------------------------------------------------
# Outcome + providers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ContentOutcome:
    card: EventCard | None = None
    error: ContentError | None = None

    @classmethod
    def success(cls, card: EventCard) -> ContentOutcome:
        return cls(card=card)

    @classmethod
    def failure(cls, error: ContentError) -> ContentOutcome:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.card is not None

    def or_fallback(self, default: EventCard) -> EventCard:
        return self.card if self.card is not None else default


@dataclass(frozen=True)
class PlayerProfile:
    """What the generator needs to know about a player to write the next card."""

    meters: MeterSet
    day: int
    tags: list[PlayerTag]
    sides: list[Side]

    @classmethod
    def from_session(cls, session: Session) -> PlayerProfile:
        return cls(
            meters=session.meters,
            day=session.current_day,
            tags=analyze(
                session.choices,
                session.meters,
                risk_threshold=GENERATIVE_RISK_THRESHOLD,
                max_tags=GENERATIVE_MAX_TAGS,
            ),
            sides=session.recent_sides[-TREND_WINDOW:],
        )


class AuthoredContentProvider:
    async def next_event(self, session: Session) -> EventCard:
        return get_initial_event(session.current_day, session.id)


class GenerativeContentProvider:
    """Generates cards with an LLM, falling back to a fixed default card.

    Args:
        llm:      LLM callable, or None when no backend is configured.
        timeout:  Upper bound in seconds on one generation call.
        fallback: Card returned when generation fails.
        rng:      Random source for the suggested event type.
    """

    def __init__(
        self,
        llm: LLM | None,
        timeout: float = 20.0,
        fallback: EventCard = DEFAULT_EVENT,
        rng: random.Random | None = None,
    ) -> None:
        self._llm = llm
        self._timeout = timeout
        self._fallback = fallback
        self._rng = rng or random.Random()

    @property
    def fallback(self) -> EventCard:
        return self._fallback

    def build_prompt(self, profile: PlayerProfile) -> str:
        sides = profile.sides[-TREND_WINDOW:]
        ctx = build_event_context(
            meters=profile.meters,
            day=profile.day,
            phase=day_phase(profile.day),
            tags=profile.tags,
            sides=sides,
            trend=choice_trend(sides),
            event_type=self._rng.choice(EVENT_TYPES),
            crisis=should_request_crisis(profile.meters, profile.day, sides),
        )
        return render_prompt(EVENT_CARD_PROMPT, ctx)

    async def generate(self, session: Session) -> ContentOutcome:
        return await self.generate_for(PlayerProfile.from_session(session))

    async def generate_for(self, profile: PlayerProfile) -> ContentOutcome:
        if self._llm is None:
            return ContentOutcome.failure(ContentError("No content generator configured"))

        prompt = self.build_prompt(profile)
        try:
            text = await asyncio.wait_for(self._llm("event_card", prompt), timeout=self._timeout)
        except asyncio.TimeoutError:
            return ContentOutcome.failure(
                ContentError(f"Content generation timed out after {self._timeout}s")
            )
        except LLMError as e:
            return ContentOutcome.failure(ContentError(str(e)))
        except Exception as e:
            logger.exception("unexpected error from content generator")
            return ContentOutcome.failure(
                ContentError(f"Content generation failed: {type(e).__name__}: {e}")
            )

        if not isinstance(text, str):
            return ContentOutcome.failure(
                ContentError(f"Content generator returned {type(text).__name__}, expected text")
            )
        try:
            card = parse_event_card(text, GENERATED_ID_BASE + profile.day)
        except ContentError as e:
            return ContentOutcome.failure(e)
        return ContentOutcome.success(card)

    async def next_event(self, session: Session) -> EventCard:
        outcome = await self.generate(session)
        if not outcome.ok:
            logger.warning(
                "content generation failed session=%s day=%d, using default event: %s",
                session.id, session.current_day, outcome.error,
            )
        return outcome.or_fallback(self._fallback)


class EventContentProvider:
    """Routes early days to the catalog and later days to the generator."""

    def __init__(
        self,
        llm: LLM | None,
        timeout: float = 20.0,
        authored_days: int = AUTHORED_DAYS,
        rng: random.Random | None = None,
    ) -> None:
        self.authored = AuthoredContentProvider()
        self.generative = GenerativeContentProvider(llm, timeout=timeout, rng=rng)
        self._authored_days = authored_days

    async def next_event(self, session: Session) -> EventCard:
        if session.current_day <= self._authored_days:
            return await self.authored.next_event(session)
        return await self.generative.next_event(session)
