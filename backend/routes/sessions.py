"""Game session endpoints: create, state, choices, restart, share, evaluation."""

from typing import NoReturn

from fastapi import APIRouter, HTTPException

from backend import game
from kitchen_wars.endings import ENDINGS
from kitchen_wars.errors import GameError, InvalidStateError, NotFoundError
from kitchen_wars.evaluation import share_text

from .models import ChoiceBody, CreateSession, PreviewProfile

router = APIRouter()


def _raise_http(e: GameError) -> NoReturn:
    if isinstance(e, NotFoundError):
        raise HTTPException(404, str(e)) from e
    if isinstance(e, InvalidStateError):
        raise HTTPException(409, str(e)) from e
    raise e


@router.get("/endings")
async def list_endings():
    """List all endings in the order they are checked."""
    return [e.model_dump() for e in ENDINGS]


@router.post("/sessions", status_code=201)
async def create_session(body: CreateSession):
    """Start a new game and return its state with the day-1 event."""
    session = await game.create_session(body.player_id)
    state = await game.get_state(session.id)
    return state.model_dump(mode="json")


@router.get("/sessions/{session_id}")
async def get_session(session_id: int):
    """Get meters, pending event, recent choices and ending for a session."""
    try:
        state = await game.get_state(session_id)
    except GameError as e:
        _raise_http(e)
    return state.model_dump(mode="json")


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: int):
    """Delete a session and its choice log."""
    try:
        await game.delete_session(session_id)
    except GameError as e:
        _raise_http(e)
    return {"ok": True}


@router.post("/sessions/{session_id}/choices")
async def make_choice(session_id: int, body: ChoiceBody):
    """Resolve the pending event with a left/right choice."""
    try:
        outcome = await game.resolve_choice(session_id, body.side, body.event_id)
    except GameError as e:
        _raise_http(e)
    return outcome.model_dump(mode="json")


@router.post("/sessions/{session_id}/restart")
async def restart_session(session_id: int):
    """Reset a session to day 1 with fresh meters."""
    try:
        await game.restart_session(session_id)
        state = await game.get_state(session_id)
    except GameError as e:
        _raise_http(e)
    return state.model_dump(mode="json")


@router.get("/sessions/{session_id}/share")
async def share_session(session_id: int):
    """Shareable summary text for a session."""
    try:
        state = await game.get_state(session_id)
    except GameError as e:
        _raise_http(e)
    return {"text": share_text(state.session)}


@router.get("/sessions/{session_id}/evaluation")
async def evaluate_session(session_id: int):
    """Critic-style review of the player's run."""
    try:
        text = await game.evaluate_session(session_id)
    except GameError as e:
        _raise_http(e)
    return {"evaluation": text}


@router.get("/players/{player_id}/sessions")
async def list_player_sessions(player_id: str):
    """A player's sessions, newest first (at most 20)."""
    sessions = await game.list_player_sessions(player_id)
    return [s.model_dump(mode="json") for s in sessions]


@router.post("/preview-event")
async def preview_event(body: PreviewProfile):
    """Generate an event card for an ad-hoc player profile without saving anything."""
    card = await game.preview_event(body.meters, body.day, body.tags, body.recent_choices)
    return card.model_dump(mode="json")
