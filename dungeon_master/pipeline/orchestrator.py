"""Turn orchestrator — runs one step of a player turn.

Step flow:
  1. AWAITING_MODEL  build context (history + rules + stats + reminders), call the model.
  2. SANITIZING      cut at terminal tokens, cut after the first ROLL / ROLL_GROUP,
                     cut at leftover "System:" labels.
  3. Corrections     (a) protocol: the reply asks the player what they do next to a
                         roll, or instead of one during combat → one re-prompt.
                     (b) coordinates: no coordinate tag → one re-prompt asking only
                         for it. Protocol correction always runs first.
  4. DECIDING        commit: player action + directive-stripped narrative to history,
                     position/map, stats (directive or fallback), companions.
  5. CONTINUE        a roll was honoured: its result goes to history as a system
                     message and the caller must call step() again without input.
     COMPLETE        no roll, an unparseable roll, or the continuation bound reached.

Every model call happens before the commit, so an LLMError leaves the session
exactly as it was.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Literal

from dungeon_master.dice import RollResult
from dungeon_master.i18n import asks_player, t
from dungeon_master.models import ChatMessage, Session
from dungeon_master.prompts import render_system_prompt
from dungeon_master.rules import Rulebook, load_rulebook

from . import effects
from .context import build_context, combat_active
from .directives import (
    RollGroup,
    RollMatch,
    find_coordinates,
    find_first_roll,
    parse_directives,
    strip_directives,
)
from .fallback import RegexStatExtractor, StatExtractor
from .sanitizer import sanitize, truncate_at_directive, truncate_at_system_label

if TYPE_CHECKING:
    from dungeon_master.llm import ChatLLM

logger = logging.getLogger(__name__)

DEFAULT_MAX_AUTO_STEPS = 5


class TurnState(str, Enum):
    AWAITING_MODEL = "awaiting_model"
    SANITIZING = "sanitizing"
    DECIDING = "deciding"
    CONTINUE = "continue"
    COMPLETE = "complete"


@dataclass
class StepResult:
    status: Literal["continue", "complete"]
    message: str    # what the player sees; a honoured roll tag stays visible
    narrative: str  # what went into history
    rolls: list[RollResult] = field(default_factory=list)
    corrections: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "message": self.message,
            "narrative": self.narrative,
            "rolls": [r.to_dict() for r in self.rolls],
            "corrections": list(self.corrections),
        }


@dataclass
class _Reply:
    full: str                # sanitized, before roll truncation
    text: str                # truncated after the first roll and at system labels
    roll: RollMatch | None


def _clean(raw: str) -> _Reply:
    full = sanitize(raw)
    roll = find_first_roll(full)
    text = truncate_at_directive(full, roll) if roll else full
    text = truncate_at_system_label(text)
    if roll is not None and roll.end > len(text):
        roll = None
    return _Reply(full=full, text=text, roll=roll)


def _system(content: str) -> dict:
    return {"role": "system", "content": content}


def _assistant(content: str) -> dict:
    return {"role": "assistant", "content": content}


class TurnOrchestrator:
    """Drives turn steps for sessions. Stateless between calls.

    Args:
        llm:            Chat completion callable (see dungeon_master.llm).
        rulebook:       Keyword data for rule excerpts and combat detection.
        fallback:       Stat extractor used when no UPDATE_STATS directive is
                        present; None disables the fallback path.
        max_auto_steps: Continuations allowed after one player action before
                        further rolls are refused.
        rng:            Random source for dice; module-level random if None.
    """

    def __init__(
        self,
        llm: ChatLLM,
        rulebook: Rulebook | None = None,
        fallback: StatExtractor | None = RegexStatExtractor(),
        max_auto_steps: int = DEFAULT_MAX_AUTO_STEPS,
        rng: random.Random | None = None,
    ) -> None:
        self._llm = llm
        self._rulebook = rulebook if rulebook is not None else load_rulebook()
        self._fallback = fallback
        self._max_auto_steps = max_auto_steps
        self._rng = rng

    def _enter(self, session: Session, state: TurnState) -> None:
        logger.debug("session %s: %s", session.id, state.value)

    # ------------------------------------------------------------------
    # Opening scene
    # ------------------------------------------------------------------

    async def open_scene(self, session: Session) -> str:
        """Generate the opening narration and seed the session history."""
        lang = session.language
        system_prompt = f"{render_system_prompt(session)}\n\n{t('intro.request', lang)}"
        context = [_system(system_prompt), _system(t("reminder.coordinates", lang))]

        raw = await self._llm("intro", context, session.model)

        full = sanitize(raw)
        narrative = strip_directives(truncate_at_system_label(full))
        parsed = parse_directives(full)
        if parsed.coordinates is not None:
            effects.apply_coordinates(session, parsed.coordinates, narrative)
        if parsed.stats is not None:
            effects.apply_stats(session.character, parsed.stats)
        effects.apply_companions(session, parsed.add_companions, parsed.remove_companions)

        session.history.append(ChatMessage(role="system", content=system_prompt))
        session.history.append(ChatMessage(role="assistant", content=narrative))
        logger.info("session %s: opening scene generated (%d chars)", session.id, len(narrative))
        return narrative

    # ------------------------------------------------------------------
    # Turn step
    # ------------------------------------------------------------------

    async def step(self, session: Session, action: str | None = None) -> StepResult:
        """Run one step. Pass the player's action, or None to continue after a roll."""
        lang = session.language
        working = list(session.history)
        if action is not None:
            working.append(ChatMessage(role="user", content=action))
        continuations = 0 if action is not None else session.pending_steps
        corrections: list[str] = []

        self._enter(session, TurnState.AWAITING_MODEL)
        context = build_context(session, working, self._rulebook)
        raw = await self._llm("narrator", context, session.model)

        self._enter(session, TurnState.SANITIZING)
        reply = _clean(raw)

        in_combat = combat_active(working, self._rulebook) or self._rulebook.combat_active([reply.full])
        if asks_player(reply.full) and (reply.roll is not None or in_combat):
            logger.warning("session %s: reply asks the player instead of rolling, re-prompting", session.id)
            corrections.append("protocol")
            fix = context + [_assistant(reply.full), _system(t("fix.protocol", lang))]
            reply = _clean(await self._llm("protocol_fix", fix, session.model))

        coords = find_coordinates(reply.full)
        if coords is None:
            logger.warning("session %s: reply has no coordinates, re-prompting", session.id)
            corrections.append("coordinates")
            fix = context + [_assistant(reply.full), _system(t("fix.coordinates", lang))]
            coords = find_coordinates(sanitize(await self._llm("coordinates_fix", fix, session.model)))
            if coords is None:
                logger.warning("session %s: still no coordinates, keeping position", session.id)

        # ── Commit: no model calls past this point ──
        self._enter(session, TurnState.DECIDING)
        roll = reply.roll
        if roll is not None and continuations >= self._max_auto_steps:
            logger.warning(
                "session %s: %d automatic steps reached, ignoring roll", session.id, continuations
            )
            roll = None

        parsed = parse_directives(reply.text)
        narrative = strip_directives(reply.text)
        character = session.character

        if action is not None:
            session.history.append(ChatMessage(role="user", content=action))
        if coords is not None:
            effects.apply_coordinates(session, coords, narrative)
        if parsed.stats is not None:
            effects.apply_stats(character, parsed.stats)
        elif self._fallback is not None:
            effects.apply_extracted_stats(character, self._fallback.extract(narrative, character))
        effects.apply_companions(session, parsed.add_companions, parsed.remove_companions)
        session.history.append(ChatMessage(role="assistant", content=narrative))

        message = reply.text if roll is not None else narrative
        results = effects.execute_roll(roll.directive, self._rng) if roll is not None else None
        if results is None:
            session.pending_steps = 0
            self._enter(session, TurnState.COMPLETE)
            return StepResult("complete", message, narrative, corrections=corrections)

        summary = effects.roll_summary(results, lang, group=isinstance(roll.directive, RollGroup))
        session.history.append(ChatMessage(role="system", content=summary))
        session.pending_steps = continuations + 1
        logger.info("session %s: rolled %s", session.id, ", ".join(
            f"{r.label + ' ' if r.label else ''}{r.expression}={r.total}" for r in results
        ))
        self._enter(session, TurnState.CONTINUE)
        return StepResult("continue", message, narrative, rolls=results, corrections=corrections)
