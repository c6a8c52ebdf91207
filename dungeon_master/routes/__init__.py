"""FastAPI API endpoints under /api.

Endpoint groups: settings (health, models), game (start, action, continue,
state, model switch), saves (save, list, load). Turn endpoints return the
orchestrator's step result; while its status is "continue" the client calls
/api/continue again.
"""

from fastapi import APIRouter

from .game import router as game_router
from .saves import router as saves_router
from .settings import router as settings_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(game_router)
router.include_router(saves_router)
