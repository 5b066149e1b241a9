"""Error taxonomy for the game core.

NotFoundError and InvalidStateError are surfaced to callers (the HTTP layer
maps them to 404 and 409). ContentError is recoverable: the content provider
absorbs it and substitutes the default event, so it never fails a turn.
"""


class GameError(Exception):
    """Base class for all game errors."""


class NotFoundError(GameError):
    """Raised when a session, event or ending id does not exist."""


class InvalidStateError(GameError):
    """Raised when an operation is not allowed in the session's current state."""


class ContentError(GameError):
    """Raised when event content cannot be generated or fails validation."""
