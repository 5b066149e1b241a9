"""Pydantic request models for API endpoints."""

from typing import Literal

from pydantic import BaseModel, Field

from kitchen_wars.models import MeterSet, PlayerTag, Side


class CreateSession(BaseModel):
    player_id: str = Field(min_length=1)


class ChoiceBody(BaseModel):
    side: Side
    event_id: int | None = None


class PreviewProfile(BaseModel):
    meters: MeterSet = Field(default_factory=MeterSet)
    day: int = Field(4, ge=1)
    tags: list[PlayerTag] = Field(default_factory=list)
    recent_choices: list[Side] = Field(default_factory=list)


class LLMSettings(BaseModel):
    provider_url: str = ""
    api_key: str = ""
    provider_format: Literal["koboldcpp", "openai"] = "koboldcpp"
    model: str = ""
    timeout: float = Field(20, gt=0)


class SettingsUpdate(BaseModel):
    """Partial settings update; only fields present in the request are merged."""

    llm: LLMSettings = Field(default_factory=LLMSettings)
    authored_days: int = Field(3, ge=1)
    max_tags: int = Field(3, ge=3, le=5)


class CheckConnectionBody(BaseModel):
    provider_url: str
    api_key: str = ""
