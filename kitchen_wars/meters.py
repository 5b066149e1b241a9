"""Meter model: the four bounded restaurant resources and their clamping rule."""

from kitchen_wars.models import EffectDelta, Meter, MeterSet

METERS: tuple[Meter, ...] = ("reputation", "profit", "customer_flow", "staff_morale")

METER_MIN = 0
METER_MAX = 100


def clamp(value: int) -> int:
    """Saturate value into [0, 100]."""
    return max(METER_MIN, min(METER_MAX, value))


def apply_delta(meters: MeterSet, delta: EffectDelta) -> MeterSet:
    """Return a new snapshot with delta applied and every meter clamped.

    Meters the delta does not mention keep their value.
    """
    return MeterSet(**{m: clamp(meters.get(m) + delta.get(m)) for m in METERS})
