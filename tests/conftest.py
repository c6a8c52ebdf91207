"""Shared test helpers: StubLLM and session fixtures."""

import random

import pytest

from dungeon_master.models import Character, ChatMessage
from dungeon_master.rules import load_rulebook
from dungeon_master.sessions import SessionStore


# ---------------------------------------------------------------------------
# StubLLM — dispatches by stage name, independent queue per stage
# ---------------------------------------------------------------------------

class StubLLM:
    """Deterministic LLM stand-in for tests.

    Provide a dict mapping stage name → list of responses (in call order).
    A response that is an Exception instance is raised instead of returned.
    Raises if a stage is called more times than responses were provided.
    """

    def __init__(self, responses: dict[str, list], models: list[str] | None = None) -> None:
        self._queues: dict[str, list] = {k: list(v) for k, v in responses.items()}
        self._models = models if models is not None else ["llama3:latest"]
        self.calls: list[tuple[str, list[dict], str]] = []

    async def __call__(self, stage: str, messages: list[dict], model: str) -> str:
        self.calls.append((stage, messages, model))
        queue = self._queues.get(stage)
        if not queue:
            raise AssertionError(
                f"StubLLM: unexpected call to stage={stage!r} "
                f"(no responses queued). calls so far: {[c[0] for c in self.calls]}"
            )
        response = queue.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def list_models(self) -> list[str]:
        return list(self._models)

    async def resolve_model(self, model: str | None) -> str:
        if model:
            return model
        return self._models[0] if self._models else "llama3"

    def stages(self) -> list[str]:
        return [c[0] for c in self.calls]

    def assert_exhausted(self) -> None:
        """Assert every queued response was consumed — catches missing LLM calls."""
        leftover = {k: v for k, v in self._queues.items() if v}
        if leftover:
            raise AssertionError(
                f"StubLLM: unused responses remain: {leftover}"
            )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def stub_llm():
    """The StubLLM class, so tests can build one per scenario."""
    return StubLLM


@pytest.fixture
def rulebook():
    return load_rulebook()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def store() -> SessionStore:
    return SessionStore()


@pytest.fixture
def arin() -> Character:
    return Character(name="Arin", race="Human", char_class="Fighter")


@pytest.fixture
def session(store, arin):
    """A fresh session with the opening scene already in history."""
    s = store.create(arin, "llama3", "en")
    s.history.append(ChatMessage(role="system", content="You are the Dungeon Master."))
    s.history.append(ChatMessage(role="assistant", content="You stand at the gates of Emberfall."))
    return s
