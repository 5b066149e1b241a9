"""Ending rules: which terminal outcome a meter snapshot has reached.

Endings are checked in a fixed priority order and the first match wins, so a
transition that pushes several meters out of range reports exactly one ending:

    reputation floor, reputation ceiling,
    profit floor, profit ceiling,
    customer flow floor, customer flow ceiling,
    staff morale floor, staff morale ceiling
"""

from kitchen_wars.errors import NotFoundError
from kitchen_wars.meters import METER_MAX, METER_MIN
from kitchen_wars.models import Ending, MeterSet

ENDINGS: tuple[Ending, ...] = (
    Ending(
        id="reputation_zero",
        title="恶评如潮",
        description="餐厅声誉扫地，无人问津而倒闭。",
        meter="reputation",
        at_max=False,
    ),
    Ending(
        id="reputation_max",
        title="盛名所累",
        description="过度神化后，任何小瑕疵都引发巨大舆论反噬。",
        meter="reputation",
        at_max=True,
    ),
    Ending(
        id="profit_zero",
        title="资金链断裂",
        description="支付不起房租员工工资而破产。",
        meter="profit",
        at_max=False,
    ),
    Ending(
        id="profit_max",
        title="为富不仁",
        description="过分逐利引发税务稽查而查封。",
        meter="profit",
        at_max=True,
    ),
    Ending(
        id="customer_zero",
        title="门可罗雀",
        description="客流断绝，餐厅直接关门。",
        meter="customer_flow",
        at_max=False,
    ),
    Ending(
        id="customer_max",
        title="不堪重负",
        description="服务跟不上导致安全事故而停业。",
        meter="customer_flow",
        at_max=True,
    ),
    Ending(
        id="staff_zero",
        title="集体跑路",
        description="员工全部辞职，餐厅瘫痪。",
        meter="staff_morale",
        at_max=False,
    ),
    Ending(
        id="staff_max",
        title="养虎为患",
        description="员工联合架空老板，夺取餐厅控制权。",
        meter="staff_morale",
        at_max=True,
    ),
)

_BY_ID = {e.id: e for e in ENDINGS}


def evaluate(meters: MeterSet) -> Ending | None:
    """Return the ending reached by meters, or None while all are inside (0, 100)."""
    for ending in ENDINGS:
        value = meters.get(ending.meter)
        if ending.at_max and value >= METER_MAX:
            return ending
        if not ending.at_max and value <= METER_MIN:
            return ending
    return None


def get_ending(ending_id: str) -> Ending:
    try:
        return _BY_ID[ending_id]
    except KeyError:
        raise NotFoundError(f"Unknown ending: {ending_id}") from None
