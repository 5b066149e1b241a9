"""Authored event catalog and deterministic event selection.

Selection rules:
  day 1      → always the restaurant philosophy card (id 1)
  days 2–3   → daily cards only
  days 4–10  → any card except endings
  day 11+    → any card

For day > 1 the card is picked by ``(day + session_seed * 1000) % len(pool)``
and given id ``day + 1000``. The same (day, seed) always returns the same card.
Ids are only unique within one session.
"""

from kitchen_wars.models import EffectDelta, EventCard

PHILOSOPHY_EVENT_ID = 1
DEFAULT_EVENT_ID = 0
AUTHORED_ID_BASE = 1000


def _card(title, description, category, left_choice, right_choice, left, right, rarity="common"):
    return EventCard(
        id=0,
        title=title,
        description=description,
        category=category,
        left_choice=left_choice,
        right_choice=right_choice,
        left_effects=EffectDelta(**left),
        right_effects=EffectDelta(**right),
        rarity=rarity,
    )


AUTHORED_EVENTS: tuple[EventCard, ...] = (
    # opening choice
    _card(
        "餐厅理念选择",
        "你刚接手这家餐厅，需要确定经营理念。是追求匠心品质，还是拥抱高效经营？",
        "daily",
        "匠心手作，真材实料",
        "高效标准，拥抱科技",
        {"reputation": 8, "profit": -5, "staff_morale": 3},
        {"reputation": -3, "profit": 8, "customer_flow": 3},
    ),
    _card(
        "供货商的诱惑",
        "供货商推荐了一款便宜1/3的冷冻西兰花，保质期2年，但品质一般。隔壁餐厅都在用。",
        "daily",
        "不用，坚持用有机的",
        "就用这个，反正都是炒",
        {"reputation": 3, "profit": -8, "staff_morale": 2},
        {"reputation": -4, "profit": 6, "customer_flow": -1},
    ),
    _card(
        "厨师长的要求",
        "厨师长老王抱怨工资太低，隔壁餐厅想挖他过去，开价比现在高30%。",
        "daily",
        "给他加薪，留住人才",
        "画大饼，承诺年底分红",
        {"profit": -6, "staff_morale": 8, "reputation": 2},
        {"profit": 3, "staff_morale": -5, "customer_flow": -3},
    ),
    _card(
        "网红探店邀请",
        "一位拥有50万粉丝的美食博主想来探店，但要求免费用餐并给2000元\"宣传费\"。",
        "opportunity",
        "拒绝，我们不需要买流量",
        "同意，花钱买曝光值得",
        {"reputation": 4, "profit": 0, "customer_flow": -2},
        {"reputation": -3, "profit": -4, "customer_flow": 10},
        rarity="uncommon",
    ),
    _card(
        "食材涨价风波",
        "主要食材价格暴涨30%，同行都在涨价，但顾客抱怨声四起。你要跟风涨价吗？",
        "crisis",
        "涨价，成本压力太大",
        "不涨，咬牙硬撑",
        {"profit": 5, "reputation": -6, "customer_flow": -4},
        {"profit": -8, "reputation": 4, "customer_flow": 3},
        rarity="uncommon",
    ),
    _card(
        "差评风暴",
        "一位顾客因为等位时间长在网上发差评，引发连锁反应。现在评分从4.8降到了4.2。",
        "crisis",
        "公开道歉，承诺改进",
        "找水军刷好评对抗",
        {"reputation": 3, "profit": -3, "customer_flow": -2},
        {"reputation": -4, "profit": -5, "customer_flow": 4},
        rarity="rare",
    ),
    _card(
        "投资人的橄榄枝",
        "一位投资人看中了你的餐厅，愿意投资500万，但要求3个月内利润翻倍。",
        "opportunity",
        "接受投资，压力山大",
        "拒绝，保持自己的节奏",
        {"profit": 12, "reputation": -3, "staff_morale": -5},
        {"profit": 0, "reputation": 3, "staff_morale": 4},
        rarity="rare",
    ),
    _card(
        "媒体采访机会",
        "本地电视台想做餐饮业专题报道，邀请你作为代表接受采访。这是个好机会吗？",
        "opportunity",
        "接受采访，展示理念",
        "低调拒绝，专心经营",
        {"reputation": 6, "customer_flow": 8, "profit": -2},
        {"reputation": 2, "customer_flow": -1, "staff_morale": 3},
        rarity="uncommon",
    ),
    _card(
        "服务员的困扰",
        "服务员小李反映，最近客人越来越难伺候，经常因为小事投诉。她快撑不住了。",
        "daily",
        "培训服务技巧，提升专业度",
        "告诉她顾客就是上帝",
        {"staff_morale": 4, "profit": -4, "reputation": 3},
        {"staff_morale": -6, "customer_flow": 2, "reputation": -2},
    ),
    _card(
        "后厨效率问题",
        "后厨出餐速度慢，高峰期经常让客人等30分钟。要不要引入预制菜提升效率？",
        "daily",
        "坚持现做，宁可慢点",
        "部分使用预制菜",
        {"reputation": 4, "customer_flow": -5, "staff_morale": 3},
        {"reputation": -6, "customer_flow": 8, "profit": 4},
    ),
    _card(
        "预制菜争议",
        "网上关于预制菜的讨论很激烈，有顾客直接问你们用不用预制菜。如何回应？",
        "crisis",
        "坦诚告知，部分使用",
        "含糊其辞，转移话题",
        {"reputation": -3, "customer_flow": -4, "staff_morale": 3},
        {"reputation": -8, "customer_flow": 2, "profit": 3},
        rarity="uncommon",
    ),
    _card(
        "员工权益检查",
        "劳动监察部门突击检查，发现你们超时工作问题。需要立即整改。",
        "crisis",
        "严格按规定，减少营业时间",
        "私下协商，继续现状",
        {"profit": -8, "staff_morale": 10, "reputation": 4},
        {"profit": 3, "staff_morale": -8, "reputation": -6},
        rarity="rare",
    ),
)

DEFAULT_EVENT = _card(
    "平凡的一天",
    "今天餐厅一切正常，没有什么特别的事情发生。你要如何度过这平静的一天？",
    "daily",
    "专注提升菜品质量",
    "优化运营降低成本",
    {"reputation": 5, "profit": -5},
    {"reputation": -3, "profit": 8},
)


def _applies(event: EventCard, day: int) -> bool:
    if day <= 3:
        return event.category == "daily"
    if day <= 10:
        return event.category != "ending"
    return True


def get_initial_event(day: int, session_seed: int = 0) -> EventCard:
    """Return the authored card for a day, deterministic in (day, session_seed)."""
    if day < 1:
        raise ValueError(f"Day must be >= 1, got {day}")
    if day == 1:
        return AUTHORED_EVENTS[0].model_copy(update={"id": PHILOSOPHY_EVENT_ID})

    pool = [e for e in AUTHORED_EVENTS if _applies(e, day)]
    index = (day + session_seed * 1000) % len(pool)
    return pool[index].model_copy(update={"id": AUTHORED_ID_BASE + day})
