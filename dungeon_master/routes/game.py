"""Session lifecycle + turn endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from dungeon_master.i18n import t
from dungeon_master.llm import GameMasterLLM, LLMError
from dungeon_master.models import Session
from dungeon_master.pipeline import TurnOrchestrator
from dungeon_master.sessions import SessionNotFound, SessionStore

from .deps import get_llm, get_orchestrator, get_store
from .models import ActionBody, ContinueBody, StartBody, SwitchModelBody

logger = logging.getLogger(__name__)

router = APIRouter()


def _session_or_404(store: SessionStore, session_id: str) -> Session:
    try:
        return store.get(session_id)
    except SessionNotFound:
        raise HTTPException(404, "Session not found")


async def _run_step(
    store: SessionStore,
    orchestrator: TurnOrchestrator,
    session_id: str,
    action: str | None,
) -> dict:
    _session_or_404(store, session_id)
    async with store.lock(session_id):
        # re-read under the lock: /load replaces the session object
        session = _session_or_404(store, session_id)
        try:
            result = await orchestrator.step(session, action)
        except LLMError as e:
            logger.error("session %s: model call failed: %s", session_id, e)
            raise HTTPException(502, t("error.upstream", session.language, error=e))
    return result.to_dict()


@router.post("/start")
async def start_game(
    body: StartBody,
    store: SessionStore = Depends(get_store),
    orchestrator: TurnOrchestrator = Depends(get_orchestrator),
    llm: GameMasterLLM = Depends(get_llm),
):
    """Create a session for a new character and generate the opening scene."""
    model = await llm.resolve_model(body.model)
    session = store.create(body.character, model, body.language)
    async with store.lock(session.id):
        try:
            message = await orchestrator.open_scene(session)
        except LLMError as e:
            logger.error("session %s: opening scene failed: %s", session.id, e)
            store.delete(session.id)
            raise HTTPException(502, t("error.upstream", session.language, error=e))
    return {"sessionId": session.id, "message": message}


@router.post("/action")
async def player_action(
    body: ActionBody,
    store: SessionStore = Depends(get_store),
    orchestrator: TurnOrchestrator = Depends(get_orchestrator),
):
    """Send a player action and run one turn step."""
    return await _run_step(store, orchestrator, body.session_id, body.action)


@router.post("/continue")
async def continue_turn(
    body: ContinueBody,
    store: SessionStore = Depends(get_store),
    orchestrator: TurnOrchestrator = Depends(get_orchestrator),
):
    """Run the next step after a "continue" result, without new player input."""
    return await _run_step(store, orchestrator, body.session_id, None)


@router.get("/state/{session_id}")
async def get_state(session_id: str, store: SessionStore = Depends(get_store)):
    """Full session state (character, history, map, companions)."""
    _session_or_404(store, session_id)
    return store.serialize(session_id)


@router.post("/session/model")
async def switch_model(body: SwitchModelBody, store: SessionStore = Depends(get_store)):
    """Change the model used by a session's future steps."""
    _session_or_404(store, body.session_id)
    async with store.lock(body.session_id):
        store.switch_model(body.session_id, body.model)
    return {"message": "Model updated", "model": body.model}
