"""Core domain models.

All engine functions and storage operate on these types.
Pydantic is used for validation and serialisation at every data boundary.
Field names are snake_case; camelCase aliases (``customerFlow``,
``leftChoice``, ...) are accepted on input so generated content in the wire
format validates directly.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Meter = Literal["reputation", "profit", "customer_flow", "staff_morale"]
Side = Literal["left", "right"]
Category = Literal["daily", "crisis", "opportunity", "ending"]
Rarity = Literal["common", "uncommon", "rare", "legendary"]
GameStatus = Literal["active", "ended"]

PlayerTag = Literal[
    "profit_focused",
    "reputation_lover",
    "risk_taker",
    "conservative",
    "staff_friendly",
    "customer_first",
    "social_media_savvy",
    # reserved, not produced by the analyzer yet
    "trendy",
    "traditional",
    "crisis_prone",
]

_WIRE = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class MeterSet(BaseModel):
    """Snapshot of the four restaurant meters, each in [0, 100]."""

    model_config = _WIRE

    reputation: int = Field(50, ge=0, le=100)
    profit: int = Field(50, ge=0, le=100)
    customer_flow: int = Field(50, ge=0, le=100)
    staff_morale: int = Field(50, ge=0, le=100)

    def get(self, meter: Meter) -> int:
        return getattr(self, meter)


class EffectDelta(BaseModel):
    """Signed change one choice applies to the meters. Absent meters are untouched."""

    model_config = _WIRE

    reputation: int | None = Field(None, ge=-50, le=50)
    profit: int | None = Field(None, ge=-50, le=50)
    customer_flow: int | None = Field(None, ge=-50, le=50)
    staff_morale: int | None = Field(None, ge=-50, le=50)

    def get(self, meter: Meter) -> int:
        return getattr(self, meter) or 0

    def magnitude(self) -> int:
        """Sum of absolute changes across all four meters."""
        return (
            abs(self.get("reputation"))
            + abs(self.get("profit"))
            + abs(self.get("customer_flow"))
            + abs(self.get("staff_morale"))
        )


class EventCard(BaseModel):
    """A decision offered to the player: two choices and their effects."""

    model_config = _WIRE

    id: int = Field(ge=0)
    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=10, max_length=500)
    category: Category
    left_choice: str = Field(min_length=1, max_length=100)
    right_choice: str = Field(min_length=1, max_length=100)
    left_effects: EffectDelta = Field(default_factory=EffectDelta)
    right_effects: EffectDelta = Field(default_factory=EffectDelta)
    rarity: Rarity = "common"
    is_generated: bool = False

    def effects_for(self, side: Side) -> EffectDelta:
        return self.left_effects if side == "left" else self.right_effects


class Ending(BaseModel):
    """A terminal outcome reached when a meter hits its floor or ceiling."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    meter: Meter
    at_max: bool


class ChoiceRecord(BaseModel):
    """Append-only log entry for one resolved choice."""

    model_config = ConfigDict(frozen=True)

    day: int = Field(ge=1)
    side: Side
    effects: EffectDelta
    before: MeterSet
    after: MeterSet
    event_id: int | None = None
    generated_event: EventCard | None = None  # full card when the event was generated


class Session(BaseModel):
    """One playthrough: meters, day counter, status, tags and choice log."""

    id: int
    player_id: str = Field(min_length=1)
    meters: MeterSet = Field(default_factory=MeterSet)
    current_day: int = Field(1, ge=1)
    status: GameStatus = "active"
    ending_id: str | None = None
    ending_title: str | None = None
    tags: list[PlayerTag] = Field(default_factory=list)
    choices: list[ChoiceRecord] = Field(default_factory=list)
    current_event: EventCard | None = None
    revision: int = 0
    created_at: str = ""
    updated_at: str = ""

    @property
    def recent_sides(self) -> list[Side]:
        """Choice sides in play order (oldest first)."""
        return [c.side for c in self.choices]
