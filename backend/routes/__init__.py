"""FastAPI API endpoints under /api.

Endpoint groups: settings (health, settings, check-connection) and game
(endings, sessions and their choices, restart, share, evaluation, player
history, event preview). Session child actions are nested under
/api/sessions/{session_id}/.
"""

from fastapi import APIRouter

from .sessions import router as sessions_router
from .settings import router as settings_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(sessions_router)
