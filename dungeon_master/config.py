"""Runtime settings: defaults merged with environment variables.

The environment is populated from ``.env`` at the repository root (see
``app.py`` and ``main.py``). Unparseable numeric values fall back to the
default with a warning.
"""

import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_DEFAULTS: dict[str, Any] = {
    "ollama_url": "http://localhost:11434",
    "default_model": "llama3",
    "llm_timeout": 120.0,
    "saves_dir": "saves",
    "max_auto_steps": 5,
    "rulebook_path": "",
    "log_level": "INFO",
    "host": "0.0.0.0",
    "port": 3000,
}


def _number(name: str, default: float | int) -> float | int:
    raw = os.getenv(name, "")
    if not raw:
        return default
    try:
        return type(default)(raw)
    except ValueError:
        logger.warning("Invalid value for %s: %r, using %r", name, raw, default)
        return default


def get_settings() -> dict[str, Any]:
    """Read settings, returning defaults merged with environment values."""
    settings: dict[str, Any] = dict(_DEFAULTS)
    settings["ollama_url"] = os.getenv("OLLAMA_URL", _DEFAULTS["ollama_url"])
    settings["default_model"] = os.getenv("DEFAULT_MODEL", _DEFAULTS["default_model"])
    settings["llm_timeout"] = _number("LLM_TIMEOUT", _DEFAULTS["llm_timeout"])
    settings["saves_dir"] = os.getenv("SAVES_DIR", _DEFAULTS["saves_dir"])
    settings["max_auto_steps"] = _number("MAX_AUTO_STEPS", _DEFAULTS["max_auto_steps"])
    settings["rulebook_path"] = os.getenv("RULEBOOK_PATH", _DEFAULTS["rulebook_path"])
    settings["log_level"] = os.getenv("LOG_LEVEL", _DEFAULTS["log_level"]).upper()
    settings["host"] = os.getenv("HOST", _DEFAULTS["host"])
    settings["port"] = _number("PORT", _DEFAULTS["port"])
    return settings


def saves_path(settings: dict[str, Any]) -> Path:
    return Path(settings["saves_dir"])


def rulebook_path(settings: dict[str, Any]) -> Path | None:
    return Path(settings["rulebook_path"]) if settings["rulebook_path"] else None
