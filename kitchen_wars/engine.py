"""Choice resolution: the single state transition of a game session.

resolve() takes the current Session, the pending EventCard and a side, and
returns a brand new Session plus the ChoiceRecord it appended. The input is
never mutated. Callers persist the returned Session in one write, so the
meters, day counter, status, tags and choice log always change together.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from kitchen_wars.endings import evaluate
from kitchen_wars.errors import InvalidStateError
from kitchen_wars.meters import apply_delta
from kitchen_wars.models import ChoiceRecord, Ending, EventCard, Session, Side
from kitchen_wars.tagging import MAX_TAGS, analyze

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    session: Session
    record: ChoiceRecord
    ending: Ending | None

    @property
    def game_ended(self) -> bool:
        return self.ending is not None


def new_session(session_id: int, player_id: str) -> Session:
    """Fresh session: all meters at 50, day 1, active, no history."""
    return Session(id=session_id, player_id=player_id)


def resolve(
    session: Session,
    event: EventCard,
    side: Side,
    *,
    max_tags: int = MAX_TAGS,
) -> Resolution:
    if session.status != "active":
        raise InvalidStateError(f"Session {session.id} has already ended")

    delta = event.effects_for(side)
    after = apply_delta(session.meters, delta)
    ending = evaluate(after)

    record = ChoiceRecord(
        day=session.current_day,
        side=side,
        effects=delta,
        before=session.meters,
        after=after,
        event_id=event.id,
        generated_event=event if event.is_generated else None,
    )
    choices = [*session.choices, record]

    update = {
        "meters": after,
        "current_day": session.current_day + 1,
        "choices": choices,
        "current_event": None,
        "tags": analyze(choices, after, max_tags=max_tags),
    }
    if ending is not None:
        update["status"] = "ended"
        update["ending_id"] = ending.id
        update["ending_title"] = ending.title
        logger.info("session %s ended on day %d: %s", session.id, session.current_day, ending.id)

    return Resolution(session=session.model_copy(update=update), record=record, ending=ending)
