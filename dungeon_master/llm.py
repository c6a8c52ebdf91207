"""LLM client — HTTP connection to a local Ollama chat backend.

The orchestrator is handed an LLM callable matching the protocol:

    async def __call__(self, stage: str, messages: list[dict], model: str) -> str: ...

`messages` is the ordered conversation ({"role", "content"} dicts). `stage`
identifies which step is calling ("narrator", "protocol_fix",
"coordinates_fix", "intro"); implementations may use it for logging.

Two implementations are provided:

    OllamaLLM — real HTTP client for Ollama's /api/chat and /api/tags.
    EchoLLM   — returns the last message back unchanged. Useful for
                smoke-testing the wiring without a running model.

Tests use StubLLM (defined in the test helpers) instead.
"""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

from dungeon_master.pipeline.sanitizer import TERMINAL_TOKENS

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "llama3"


# ---------------------------------------------------------------------------
# Protocol — every LLM implementation must match this signature
# ---------------------------------------------------------------------------

class ChatLLM(Protocol):
    async def __call__(self, stage: str, messages: list[dict], model: str) -> str: ...


class GameMasterLLM(ChatLLM, Protocol):
    """What the app needs from its LLM: chat plus the backend's model list."""

    async def list_models(self) -> list[str]: ...

    async def resolve_model(self, model: str | None) -> str: ...


# ---------------------------------------------------------------------------
# OllamaLLM — connects to a real backend
# ---------------------------------------------------------------------------

class OllamaLLM:
    """Async HTTP client for Ollama.

    Endpoints:
      POST /api/chat   {"model", "messages", "stream": false, "options": {"stop": [...]}}
                       Response: {"message": {"role": "assistant", "content": "..."}}
      GET  /api/tags   Response: {"models": [{"name": "llama3:latest"}, ...]}

    Args:
        base_url:      Base URL of the backend, e.g. "http://localhost:11434".
        timeout:       HTTP timeout in seconds. Defaults to 120.
        default_model: Used when neither the caller nor /api/tags names a model.
        stop:          Stop sequences; defaults to the sanitizer's terminal tokens.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        timeout: float = 120.0,
        default_model: str = DEFAULT_MODEL,
        stop: list[str] | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._default_model = default_model
        self._stop = list(stop) if stop is not None else list(TERMINAL_TOKENS)

    async def list_models(self) -> list[str]:
        """Names of locally installed models, or [] if the backend is unreachable."""
        url = f"{self._base_url}/api/tags"
        try:
            async with httpx.AsyncClient(timeout=5) as client:
                resp = await client.get(url)
                resp.raise_for_status()
            return [m["name"] for m in resp.json().get("models", []) if "name" in m]
        except (httpx.HTTPError, ValueError, KeyError, AttributeError) as e:
            logger.warning("Failed to list models from %s: %s", url, e)
            return []

    async def resolve_model(self, model: str | None) -> str:
        """The given model, else the first installed one, else the default."""
        if model:
            return model
        models = await self.list_models()
        return models[0] if models else self._default_model

    def _parse_response(self, data: dict) -> str:
        message = data.get("message")
        if not isinstance(message, dict) or "content" not in message:
            raise LLMError("Unexpected response format from Ollama backend")
        return message["content"]

    async def __call__(self, stage: str, messages: list[dict], model: str) -> str:
        url = f"{self._base_url}/api/chat"
        body = {
            "model": model or self._default_model,
            "messages": messages,
            "stream": False,
            "options": {"stop": self._stop},
        }
        logger.debug("llm call stage=%s model=%s messages=%d", stage, body["model"], len(messages))

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, json=body)
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise LLMError(f"Cannot connect to LLM backend at {self._base_url}") from e
        except httpx.HTTPStatusError as e:
            raise LLMError(
                f"LLM backend returned HTTP {e.response.status_code}"
            ) from e
        except httpx.TimeoutException as e:
            raise LLMError(f"LLM backend timed out after {self._timeout}s") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise LLMError("LLM backend returned invalid JSON") from e
        text = self._parse_response(data)
        logger.debug("llm response stage=%s len=%d", stage, len(text))
        return text


# ---------------------------------------------------------------------------
# EchoLLM — returns the last message unchanged; useful for smoke tests
# ---------------------------------------------------------------------------

class EchoLLM:
    """Returns the last message's content as-is. No network calls."""

    def __init__(self, model: str = "echo") -> None:
        self._model = model

    async def list_models(self) -> list[str]:
        return [self._model]

    async def resolve_model(self, model: str | None) -> str:
        return model or self._model

    async def __call__(self, stage: str, messages: list[dict], model: str) -> str:
        logger.debug("EchoLLM stage=%s messages=%d", stage, len(messages))
        return messages[-1]["content"] if messages else ""


# ---------------------------------------------------------------------------
# LLMError — raised by OllamaLLM for all connection and protocol failures
# ---------------------------------------------------------------------------

class LLMError(RuntimeError):
    """Raised when the LLM backend cannot be reached or returns an error."""
