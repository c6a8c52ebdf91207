"""Turn pipeline: raw model text → trusted game state.

Executes one step of a player turn:
  1. Build context — history, matched rule excerpts, stats block, reminders.
  2. Call the game-master model.
  3. Sanitize — cut at hallucinated turn markers, after the first roll
     directive, and at leftover "System:" labels.
  4. Correct — at most one protocol re-prompt and one coordinates re-prompt.
  5. Apply — position/map, stats (directive, else narrative fallback),
     companions; history gets the directive-free narrative.
  6. Roll — execute the roll directive, report it as a system message and
     return "continue"; otherwise "complete".

Directive format (parsed by parse_directives):
  [[ROLL: 1d20+3]]  [[ROLL_GROUP: a=1d20, b=1d20+1]]  [[UPDATE_STATS: {...}]]
  [[coordinates[x: 1, y: -2]]]  [[ADD_COMPANION: {...}]]  [[REMOVE_COMPANION: "name"]]
"""

from .directives import (  # noqa: F401
    AddCompanion,
    Coordinates,
    ParsedDirectives,
    RemoveCompanion,
    Roll,
    RollGroup,
    RollMatch,
    UpdateStats,
    find_coordinates,
    find_first_roll,
    parse_directives,
    strip_directives,
)
from .fallback import ExtractedStats, RegexStatExtractor, StatExtractor  # noqa: F401
from .orchestrator import StepResult, TurnOrchestrator, TurnState  # noqa: F401
from .sanitizer import (  # noqa: F401
    TERMINAL_TOKENS,
    sanitize,
    truncate_at_directive,
    truncate_at_system_label,
)
