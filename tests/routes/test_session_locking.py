"""Per-session serialization between turn steps and /api/load."""

import asyncio

import pytest

from dungeon_master.models import Character
from dungeon_master.pipeline import TurnOrchestrator
from dungeon_master.routes.game import _run_step
from dungeon_master.routes.models import LoadBody
from dungeon_master.routes.saves import load_game
from dungeon_master.saves import SaveStorage
from dungeon_master.sessions import SessionStore

HERE = "[[coordinates[x: 0, y: 0]]]"


class GateLLM:
    """Blocks inside the model call until released."""

    def __init__(self) -> None:
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def __call__(self, stage: str, messages: list[dict], model: str) -> str:
        self.entered.set()
        await self.release.wait()
        return f"The night is still. {HERE}"


async def _settle() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.fixture
def saved(tmp_path):
    """A store with one session and a save file of its current state."""
    store = SessionStore()
    session = store.create(Character(name="Arin"), "llama3")
    saves = SaveStorage(tmp_path / "saves")
    filename, _ = saves.save(store.serialize(session.id))
    return store, saves, session, filename


async def test_queued_step_writes_to_restored_session(saved, stub_llm, rulebook) -> None:
    store, saves, original, filename = saved
    orchestrator = TurnOrchestrator(stub_llm({"narrator": [f"Quiet. {HERE}"]}), rulebook=rulebook)

    lock = store.lock(original.id)
    await lock.acquire()
    load_task = asyncio.create_task(load_game(LoadBody(filename=filename), store=store, saves=saves))
    await _settle()
    step_task = asyncio.create_task(_run_step(store, orchestrator, original.id, "I wait"))
    await _settle()
    lock.release()

    await load_task
    result = await step_task

    live = store.get(original.id)
    assert live is not original
    assert [m.role for m in live.history] == ["user", "assistant"]
    assert live.history[-1].content == result["narrative"]
    assert original.history == []


async def test_load_waits_for_step_in_flight(saved, rulebook) -> None:
    store, saves, original, filename = saved
    llm = GateLLM()
    orchestrator = TurnOrchestrator(llm, rulebook=rulebook)

    step_task = asyncio.create_task(_run_step(store, orchestrator, original.id, "I wait"))
    await llm.entered.wait()
    load_task = asyncio.create_task(load_game(LoadBody(filename=filename), store=store, saves=saves))
    await _settle()
    assert not load_task.done()

    llm.release.set()
    await step_task
    await load_task

    assert [m.role for m in original.history] == ["user", "assistant"]
    live = store.get(original.id)
    assert live is not original
    assert live.history == []
