"""Session documents: one JSON file per session, replaced atomically on save."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from kitchen_wars.models import EventCard, Session

from .core import sessions_dir, write_json_atomic

logger = logging.getLogger(__name__)


def _session_path(session_id: int) -> Path:
    return sessions_dir() / f"{session_id}.json"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _session_ids() -> list[int]:
    ids = []
    for path in sessions_dir().glob("*.json"):
        if path.stem.isdigit():
            ids.append(int(path.stem))
    return ids


def allocate_session_id() -> int:
    """Next free id: one past the highest stored id, starting at 1."""
    return max(_session_ids(), default=0) + 1


def get_session(session_id: int) -> Session | None:
    path = _session_path(session_id)
    if not path.is_file():
        return None
    return Session.model_validate_json(path.read_text(encoding="utf-8"))


def save_session(session: Session) -> Session:
    """Persist a session in one atomic write. Returns the stored copy.

    Bumps ``revision`` and stamps ``updated_at`` (and ``created_at`` the first time).
    """
    now = _now()
    stored = session.model_copy(update={
        "revision": session.revision + 1,
        "created_at": session.created_at or now,
        "updated_at": now,
    })
    write_json_atomic(_session_path(stored.id), stored.model_dump(mode="json"))
    return stored


def list_sessions(player_id: str | None = None) -> list[Session]:
    """Stored sessions, newest first, optionally filtered by player."""
    results = []
    for session_id in _session_ids():
        session = get_session(session_id)
        if session is None:
            continue
        if player_id is not None and session.player_id != player_id:
            continue
        results.append(session)
    results.sort(key=lambda s: (s.created_at, s.id), reverse=True)
    return results


def delete_session(session_id: int) -> bool:
    path = _session_path(session_id)
    if not path.is_file():
        return False
    path.unlink()
    return True


def store_current_event(session_id: int, revision: int, event: EventCard) -> Session | None:
    """Attach a freshly produced event, unless the session moved on meanwhile.

    The event is stored only if the session still exists, is active, is still
    at ``revision`` and has no pending event. Otherwise it is dropped and None
    is returned.
    """
    session = get_session(session_id)
    if session is None:
        logger.warning("discarding event %d: session %s no longer exists", event.id, session_id)
        return None
    if (
        session.status != "active"
        or session.revision != revision
        or session.current_event is not None
    ):
        logger.warning(
            "discarding stale event %d for session %s (revision %d, now %d)",
            event.id, session_id, revision, session.revision,
        )
        return None
    return save_session(session.model_copy(update={"current_event": event}))
