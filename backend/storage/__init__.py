"""File-based JSON storage.

Data layout:
  data/
    sessions/
      <id>.json     One game session: meters, day, status, tags, the pending
                    event and the ordered choice log (before/after meters and
                    the full card for generated events)
    config.json     App settings (LLM connection, authored days, tag limit)

Every write goes through write_json_atomic(): the document is written to a
temp file in the same directory and renamed over the target, so a session is
always either fully at its previous turn or fully at the next one.

Session ids are integers allocated as one past the highest stored id.
Each save bumps the session's ``revision``; store_current_event() compares
it to discard events produced for a session that has since changed.

Config: get_config() returns defaults merged with stored values.
update_config() applies partial updates, with ``llm`` merged key-by-key.
"""

# Re-export all public symbols so `from backend import storage` keeps working.

from .core import (  # noqa: F401
    data_dir,
    init_storage,
    sessions_dir,
    write_json_atomic,
)

from .sessions import (  # noqa: F401
    allocate_session_id,
    delete_session,
    get_session,
    list_sessions,
    save_session,
    store_current_event,
)

from .config import (  # noqa: F401
    get_config,
    update_config,
)
