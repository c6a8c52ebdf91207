"""JSON file storage for saved games.

Each save is one flat JSON file holding a serialized session record. There
is no database — reads and writes go through plain helper methods that load
and dump JSON.

Directory layout:

    {base}/
      {character_name}_{session_id}.json   ← session record (see models.Session)
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class SaveNotFound(FileNotFoundError):
    """Raised when a requested save file does not exist."""


class SaveSummary(BaseModel):
    """One row of the save list."""

    model_config = ConfigDict(populate_by_name=True)

    filename: str
    character_name: str = Field(alias="characterName")
    race: str = ""
    char_class: str = Field("", alias="class")
    model: str = ""
    last_saved: str | None = Field(None, alias="lastSaved")
    session_id: str = Field(alias="sessionId")


def save_filename(character_name: str, session_id: str) -> str:
    """ "Arin the Bold", "171" → "arin_the_bold_171.json" """
    safe = re.sub(r"[^a-z0-9]", "_", character_name, flags=re.IGNORECASE).lower()
    return f"{safe}_{session_id}.json"


class SaveStorage:
    def __init__(self, base_path: Path) -> None:
        self._base = Path(base_path)
        self._base.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Internal path helpers
    # ------------------------------------------------------------------

    def _path(self, filename: str) -> Path:
        if not filename or "/" in filename or "\\" in filename or ".." in filename:
            raise ValueError(f"Invalid save filename: {filename!r}")
        return self._base / filename

    def _read_json(self, path: Path) -> Any:
        return json.loads(path.read_text(encoding="utf-8"))

    def _write_json(self, path: Path, data: Any) -> None:
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")

    # ------------------------------------------------------------------
    # Saves
    # ------------------------------------------------------------------

    def save(self, record: dict[str, Any]) -> tuple[str, str]:
        """Write a session record, stamping lastSaved. Returns (filename, timestamp)."""
        timestamp = datetime.now(timezone.utc).isoformat()
        record = dict(record, lastSaved=timestamp)
        filename = save_filename(record["character"]["name"], record["id"])
        self._write_json(self._path(filename), record)
        logger.info("saved session %s to %s", record["id"], filename)
        return filename, timestamp

    def load(self, filename: str) -> dict[str, Any]:
        path = self._path(filename)
        if not path.is_file():
            raise SaveNotFound(filename)
        logger.info("loading save %s", filename)
        return self._read_json(path)

    def list_saves(self) -> list[SaveSummary]:
        """All readable saves, newest first."""
        summaries: list[SaveSummary] = []
        for path in self._base.glob("*.json"):
            try:
                data = self._read_json(path)
                character = data["character"]
                summaries.append(SaveSummary(
                    filename=path.name,
                    character_name=character["name"],
                    race=character.get("race", ""),
                    char_class=character.get("class", ""),
                    model=data.get("model", ""),
                    last_saved=data.get("lastSaved"),
                    session_id=str(data["id"]),
                ))
            except (OSError, ValueError, KeyError, TypeError) as e:
                logger.warning("Skipping unreadable save %s: %s", path.name, e)
        summaries.sort(key=lambda s: s.last_saved or "", reverse=True)
        return summaries
