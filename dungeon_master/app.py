import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dungeon_master import config
from dungeon_master.llm import GameMasterLLM, OllamaLLM
from dungeon_master.pipeline import TurnOrchestrator
from dungeon_master.routes import router
from dungeon_master.rules import load_rulebook
from dungeon_master.saves import SaveStorage
from dungeon_master.sessions import SessionStore

load_dotenv(Path(__file__).parent.parent / ".env")


def create_app(
    saves_dir: Path | None = None,
    llm: GameMasterLLM | None = None,
) -> FastAPI:
    """Build the app. Tests pass a temp saves dir and a stub LLM."""
    settings = config.get_settings()
    logging.basicConfig(
        level=settings["log_level"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if llm is None:
        llm = OllamaLLM(
            settings["ollama_url"],
            timeout=settings["llm_timeout"],
            default_model=settings["default_model"],
        )

    app = FastAPI(title="LLM Dungeon Master")
    app.state.llm = llm
    app.state.store = SessionStore()
    app.state.saves = SaveStorage(saves_dir or config.saves_path(settings))
    app.state.orchestrator = TurnOrchestrator(
        llm,
        rulebook=load_rulebook(config.rulebook_path(settings)),
        max_auto_steps=settings["max_auto_steps"],
    )

    # The browser client is served from a separate dev server.
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
    app.include_router(router, prefix="/api")
    return app


# Default app instance for uvicorn (uses SAVES_DIR / OLLAMA_URL env vars or defaults)
app = create_app()
