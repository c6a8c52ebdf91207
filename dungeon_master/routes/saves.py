"""Save / list / load endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from dungeon_master.saves import SaveNotFound, SaveStorage
from dungeon_master.sessions import SessionNotFound, SessionStore

from .deps import get_saves, get_store
from .models import LoadBody, SaveBody

router = APIRouter()


@router.post("/save")
async def save_game(
    body: SaveBody,
    store: SessionStore = Depends(get_store),
    saves: SaveStorage = Depends(get_saves),
):
    """Write the session to a JSON save file."""
    try:
        store.get(body.session_id)
    except SessionNotFound:
        raise HTTPException(404, "Session not found")
    async with store.lock(body.session_id):
        session = store.get(body.session_id)
        filename, timestamp = saves.save(store.serialize(body.session_id))
        session.last_saved = timestamp
    return {"message": "Game saved successfully", "filename": filename, "timestamp": timestamp}


@router.get("/saves")
async def list_saves(saves: SaveStorage = Depends(get_saves)):
    """List save files, newest first."""
    return {"saves": [s.model_dump(by_alias=True) for s in saves.list_saves()]}


@router.post("/load")
async def load_game(
    body: LoadBody,
    store: SessionStore = Depends(get_store),
    saves: SaveStorage = Depends(get_saves),
):
    """Restore a save into memory under its original session id.

    Waits for any step in flight on that id, so the step commits to the old
    object before it is replaced and later steps see the restored one.
    """
    try:
        record = saves.load(body.filename)
    except ValueError as e:
        raise HTTPException(400, str(e))
    except SaveNotFound:
        raise HTTPException(404, "Save file not found")
    if not isinstance(record, dict):
        raise HTTPException(400, "Corrupt save file: expected a JSON object")
    async with store.lock(str(record.get("id"))):
        try:
            session = store.restore(record)
        except ValueError as e:
            raise HTTPException(400, f"Corrupt save file: {e}")
    return {"sessionId": session.id, "message": "Game loaded"}
