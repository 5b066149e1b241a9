"""FastMCP server exposing the game as MCP tools.

Tools:
  - start_game(player_id)                      — create a session, return its state
  - game_state(session_id)                     — meters, pending event, recent choices
  - make_choice(session_id, side, event_id?)   — resolve the pending event
  - list_endings()                             — the ending table in priority order

Game errors are returned as {"error": ..., "kind": "not_found" | "invalid_state"}
so an agent can recover without an exception crossing the protocol.

Usage:
    uv run python -m backend.mcp_server
"""

import os
from pathlib import Path

from mcp.server.fastmcp import FastMCP

from backend import game
from kitchen_wars.endings import ENDINGS
from kitchen_wars.errors import InvalidStateError, NotFoundError
from kitchen_wars.models import Side

mcp = FastMCP("kitchen-wars")


def _error(e: Exception, kind: str) -> dict:
    return {"error": str(e), "kind": kind}


@mcp.tool()
async def start_game(player_id: str) -> dict:
    """Start a new game for a player. Returns the state with the day-1 event."""
    session = await game.create_session(player_id)
    state = await game.get_state(session.id)
    return state.model_dump(mode="json")


@mcp.tool()
async def game_state(session_id: int) -> dict:
    """Return meters, the pending event and recent choices for a session."""
    try:
        state = await game.get_state(session_id)
    except NotFoundError as e:
        return _error(e, "not_found")
    return state.model_dump(mode="json")


@mcp.tool()
async def make_choice(session_id: int, side: Side, event_id: int | None = None) -> dict:
    """Choose "left" or "right" on the pending event. Returns the outcome."""
    try:
        outcome = await game.resolve_choice(session_id, side, event_id)
    except NotFoundError as e:
        return _error(e, "not_found")
    except InvalidStateError as e:
        return _error(e, "invalid_state")
    return outcome.model_dump(mode="json")


@mcp.tool()
def list_endings() -> list[dict]:
    """List all endings in the order they are checked."""
    return [e.model_dump() for e in ENDINGS]


if __name__ == "__main__":
    from backend import storage
    storage.init_storage(Path(os.getenv("DATA_DIR", Path(__file__).parent.parent / "data")))
    mcp.run()
