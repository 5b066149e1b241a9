"""Player tagging: behavioural labels derived from recent choices and meters.

Tags are recomputed from scratch every time. Rules, each evaluated
independently over the last ``window`` choices:

  tendency  — more profit-raising than reputation-raising choices → profit_focused,
              the reverse → reputation_lover, a tie → neither
  risk      — choices whose total |Δ| exceeds risk_threshold count as risky;
              > 60% risky → risk_taker, < 30% → conservative
  meters    — reputation > 70 → social_media_savvy,
              staff morale > 70 → staff_friendly,
              customer flow > 70 → customer_first

Result order is tendency, risk, meters, truncated to max_tags.
"""

from collections.abc import Sequence

from kitchen_wars.models import ChoiceRecord, MeterSet, PlayerTag

MIN_CHOICES = 3
WINDOW = 5
RISK_THRESHOLD = 15
MAX_TAGS = 3

# Variant used when building content-generation prompts
GENERATIVE_RISK_THRESHOLD = 20
GENERATIVE_MAX_TAGS = 5

HIGH_METER = 70

_METER_TAGS: tuple[tuple[str, PlayerTag], ...] = (
    ("reputation", "social_media_savvy"),
    ("staff_morale", "staff_friendly"),
    ("customer_flow", "customer_first"),
)


def analyze(
    history: Sequence[ChoiceRecord],
    meters: MeterSet,
    *,
    risk_threshold: int = RISK_THRESHOLD,
    max_tags: int = MAX_TAGS,
    window: int = WINDOW,
) -> list[PlayerTag]:
    if len(history) < MIN_CHOICES:
        return []

    recent = list(history)[-window:]
    tags: list[PlayerTag] = []

    profit_choices = sum(1 for c in recent if c.effects.get("profit") > 0)
    reputation_choices = sum(1 for c in recent if c.effects.get("reputation") > 0)
    if profit_choices > reputation_choices:
        tags.append("profit_focused")
    elif reputation_choices > profit_choices:
        tags.append("reputation_lover")

    risky = sum(1 for c in recent if c.effects.magnitude() > risk_threshold)
    if risky > len(recent) * 0.6:
        tags.append("risk_taker")
    elif risky < len(recent) * 0.3:
        tags.append("conservative")

    for meter, tag in _METER_TAGS:
        if meters.get(meter) > HIGH_METER:
            tags.append(tag)

    return tags[:max_tags]
