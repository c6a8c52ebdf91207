"""Health check and model list endpoints."""

from fastapi import APIRouter, Depends

from dungeon_master.llm import GameMasterLLM

from .deps import get_llm

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/models")
async def list_models(llm: GameMasterLLM = Depends(get_llm)):
    """Models installed on the LLM backend ([] if it is unreachable)."""
    return {"models": await llm.list_models()}
