"""FastAPI dependencies: the app-wide collaborators built by create_app()."""

from fastapi import Request

from dungeon_master.llm import GameMasterLLM
from dungeon_master.pipeline import TurnOrchestrator
from dungeon_master.saves import SaveStorage
from dungeon_master.sessions import SessionStore


def get_store(request: Request) -> SessionStore:
    return request.app.state.store


def get_orchestrator(request: Request) -> TurnOrchestrator:
    return request.app.state.orchestrator


def get_saves(request: Request) -> SaveStorage:
    return request.app.state.saves


def get_llm(request: Request) -> GameMasterLLM:
    return request.app.state.llm
