"""Rule excerpts and combat detection driven by keyword data.

The topic → keywords → reference text mapping lives in ``rulebook.json``
(or the file named by the RULEBOOK_PATH setting) so that prompt content can be
tuned without touching the turn logic. Matching is case-insensitive and
anchored at the start of a word ("orc" matches "orcs" but not "torch"). It is
a best-effort signal only.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_RULEBOOK_PATH = Path(__file__).parent / "rulebook.json"


def _mentions(texts: list[str], keywords: list[str]) -> bool:
    haystack = "\n".join(texts).lower()
    return any(
        re.search(r"(?<!\w)" + re.escape(kw.lower()), haystack)
        for kw in keywords
    )


@dataclass
class Topic:
    name: str
    keywords: list[str]
    text: str


@dataclass
class Rulebook:
    topics: list[Topic] = field(default_factory=list)
    combat_keywords: list[str] = field(default_factory=list)

    def match_topics(self, texts: list[str]) -> list[Topic]:
        """Topics whose keywords appear in any of the texts, in file order."""
        return [topic for topic in self.topics if _mentions(texts, topic.keywords)]

    def excerpt(self, texts: list[str]) -> str | None:
        matched = self.match_topics(texts)
        if not matched:
            return None
        return "\n\n".join(topic.text for topic in matched)

    def combat_active(self, texts: list[str]) -> bool:
        return _mentions(texts, self.combat_keywords)


def load_rulebook(path: Path | None = None) -> Rulebook:
    """Load a rulebook JSON file. Falls back to an empty rulebook if unreadable."""
    path = path or DEFAULT_RULEBOOK_PATH
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Rulebook %s could not be loaded: %s", path, e)
        return Rulebook()

    topics = [
        Topic(name=name, keywords=list(entry.get("keywords", [])), text=entry.get("text", ""))
        for name, entry in data.get("topics", {}).items()
        if entry.get("text")
    ]
    return Rulebook(topics=topics, combat_keywords=list(data.get("combat_keywords", [])))
