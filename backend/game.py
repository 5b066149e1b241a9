"""Game session service: the command/query layer over the engine and storage.

Each operation loads the session document, runs the pure engine, and commits
the result in a single save. Fetching a new event is a separate step after
the commit; its result is attached with storage.store_current_event(), which
drops it if the session was restarted, deleted or otherwise changed while the
content provider was working.

A session with a turn in flight is tracked in ``_pending``. A second choice
for the same session is rejected with InvalidStateError until the first one
(including the next-event fetch) has finished.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from backend import storage
from kitchen_wars import engine
from kitchen_wars.content import EventContentProvider, PlayerProfile
from kitchen_wars.endings import get_ending
from kitchen_wars.errors import InvalidStateError, NotFoundError
from kitchen_wars.evaluation import generate_evaluation, share_text
from kitchen_wars.llm import LLM, build_llm
from kitchen_wars.models import (
    ChoiceRecord,
    EffectDelta,
    Ending,
    EventCard,
    MeterSet,
    PlayerTag,
    Session,
    Side,
)

logger = logging.getLogger(__name__)

RECENT_CHOICES = 10
PLAYER_HISTORY_LIMIT = 20

_pending: set[int] = set()
_llm_override: LLM | None = None


def set_llm(llm: LLM | None) -> None:
    """Replace the LLM used for content (used in tests). None restores config."""
    global _llm_override
    _llm_override = llm


def _llm() -> LLM | None:
    if _llm_override is not None:
        return _llm_override
    return build_llm(storage.get_config()["llm"])


def _provider() -> EventContentProvider:
    config = storage.get_config()
    return EventContentProvider(
        _llm(),
        timeout=float(config["llm"]["timeout"]),
        authored_days=int(config["authored_days"]),
    )


# ── Response models ──────────────────────────────────────


class GameState(BaseModel):
    session: Session
    current_event: EventCard | None = None
    recent_choices: list[ChoiceRecord] = Field(default_factory=list)
    next_event_hint: str | None = None
    ending: Ending | None = None
    share_text: str


class ChoiceOutcome(BaseModel):
    new_meters: MeterSet
    effects_applied: EffectDelta
    ending: Ending | None = None
    game_ended: bool
    new_day: int
    next_event: EventCard | None = None


# ── Helpers ──────────────────────────────────────────────


def _load(session_id: int) -> Session:
    session = storage.get_session(session_id)
    if session is None:
        raise NotFoundError(f"Session {session_id} not found")
    return session


async def _store_next_event(session: Session) -> Session | None:
    """Fetch an event and store it; None if the session moved on meanwhile."""
    event = await _provider().next_event(session)
    return storage.store_current_event(session.id, session.revision, event)


async def _attach_next_event(session: Session) -> Session:
    """Like _store_next_event, but always returns the session as currently stored."""
    stored = await _store_next_event(session)
    if stored is None:
        return _load(session.id)
    return stored


def _state(session: Session) -> GameState:
    event = session.current_event
    return GameState(
        session=session,
        current_event=event,
        recent_choices=list(reversed(session.choices[-RECENT_CHOICES:])),
        next_event_hint=f"即将面临{event.category}类型事件" if event else None,
        ending=get_ending(session.ending_id) if session.ending_id else None,
        share_text=share_text(session),
    )


# ── Commands and queries ─────────────────────────────────


async def create_session(player_id: str) -> Session:
    """Start a new game for player_id and attach its day-1 event."""
    session = storage.save_session(engine.new_session(storage.allocate_session_id(), player_id))
    logger.info("created session %s for player %s", session.id, player_id)
    return await _attach_next_event(session)


async def get_state(session_id: int) -> GameState:
    session = _load(session_id)
    if session.status == "active" and session.current_event is None and session_id not in _pending:
        session = await _attach_next_event(session)
    return _state(session)


async def resolve_choice(session_id: int, side: Side, event_id: int | None = None) -> ChoiceOutcome:
    """Apply the player's choice to the pending event and fetch the next one.

    Raises NotFoundError for an unknown session or an event_id that is not
    the pending event, and InvalidStateError when the session has ended, has
    no pending event, or already has a choice in flight.
    """
    if session_id in _pending:
        raise InvalidStateError(f"Session {session_id} already has a choice in progress")
    session = _load(session_id)
    if session.status != "active":
        raise InvalidStateError(f"Session {session_id} has already ended")
    event = session.current_event
    if event is None:
        raise InvalidStateError(f"Session {session_id} has no pending event")
    if event_id is not None and event_id != event.id:
        raise NotFoundError(f"Event {event_id} is not pending for session {session_id}")

    _pending.add(session_id)
    try:
        config = storage.get_config()
        result = engine.resolve(session, event, side, max_tags=int(config["max_tags"]))
        committed = storage.save_session(result.session)
        logger.info(
            "session %s day %d chose %s on event %d",
            session_id, session.current_day, side, event.id,
        )

        # no next event if the session was restarted or deleted during the fetch
        next_event = None
        if not result.game_ended:
            stored = await _store_next_event(committed)
            if stored is not None:
                next_event = stored.current_event
    finally:
        _pending.discard(session_id)

    return ChoiceOutcome(
        new_meters=result.session.meters,
        effects_applied=result.record.effects,
        ending=result.ending,
        game_ended=result.game_ended,
        new_day=result.session.current_day,
        next_event=next_event,
    )


async def restart_session(session_id: int) -> Session:
    """Reset a session to day 1 in place, keeping its id and player."""
    session = _load(session_id)
    fresh = engine.new_session(session.id, session.player_id).model_copy(update={
        "revision": session.revision,
        "created_at": session.created_at,
    })
    stored = storage.save_session(fresh)
    logger.info("restarted session %s", session_id)
    return await _attach_next_event(stored)


async def delete_session(session_id: int) -> None:
    if not storage.delete_session(session_id):
        raise NotFoundError(f"Session {session_id} not found")
    logger.info("deleted session %s", session_id)


async def list_player_sessions(player_id: str) -> list[Session]:
    """A player's sessions, newest first."""
    return storage.list_sessions(player_id)[:PLAYER_HISTORY_LIMIT]


async def evaluate_session(session_id: int) -> str:
    session = _load(session_id)
    timeout = float(storage.get_config()["llm"]["timeout"])
    return await generate_evaluation(_llm(), session, timeout=timeout)


async def preview_event(
    meters: MeterSet,
    day: int,
    tags: list[PlayerTag] | None = None,
    sides: list[Side] | None = None,
) -> EventCard:
    """Generate a card for an ad-hoc player profile. Nothing is stored."""
    profile = PlayerProfile(meters=meters, day=day, tags=list(tags or []), sides=list(sides or []))
    generative = _provider().generative
    outcome = await generative.generate_for(profile)
    if not outcome.ok:
        logger.warning("preview generation failed, using default event: %s", outcome.error)
    return outcome.or_fallback(generative.fallback)
