"""Raw model output cleanup, applied before any directive is trusted.

Local chat models regularly keep going past their own turn: they emit the
template's control tokens, then invent a "User:" line or a "System: Result:"
block. Everything from the first such marker on is discarded.
"""

import re

from .directives import RollMatch

# Chat-template control tokens of the common local model families.
CONTROL_TOKENS = [
    "<start_of_turn>",
    "<end_of_turn>",
    "<end_of_start>",
    "<|begin_of_text|>",
    "<|end_of_text|>",
    "<|eot_id|>",
    "<|start_header_id|>",
    "<|end_header_id|>",
    "<|reserved_special_token_",
    "<|im_start|>",
    "<|im_end|>",
    "</s>",
]

# Fabricated turn prefixes, English and French.
ROLE_PREFIXES = [
    "User:",
    "Player:",
    "Human:",
    "System:",
    "Système:",
    "Système :",
    "Assistant:",
    "Assistant :",
    "Dungeon Master:",
    "Maître du Donjon:",
]

# Sent to the backend as stop sequences as well.
TERMINAL_TOKENS = CONTROL_TOKENS + ROLE_PREFIXES

_TERMINAL_RE = re.compile(
    "|".join(re.escape(t) for t in CONTROL_TOKENS)
    + "|"
    + r"(?<![\w])(?:"
    + "|".join(re.escape(p) for p in ROLE_PREFIXES)
    + ")"
)

# Partial tokens: "<|eot", "<|reserved_special_token_3|>", "<end_of_turn", a dangling "<|".
_FRAGMENT_RE = re.compile(
    r"<\|[\w]*\|?>?"
    r"|</?(?:start_of_turn|end_of_turn|end_of_start)>?"
    r"|</s>"
)

# "[System]", "**System:**", "(Système) :" and similar leftovers.
_SYSTEM_LABEL_RE = re.compile(
    r"(?<!\w)[\[(*_]*\s*(?:System|SYSTEM|Système|SYSTÈME)\s*[\])*_]*\s*:"
    r"|\[(?:System|SYSTEM|Système|SYSTÈME)\]"
)


def sanitize(raw: str) -> str:
    """Cut the text at the first terminal token and scrub leftover fragments."""
    if not raw:
        return ""
    text = raw
    match = _TERMINAL_RE.search(text)
    if match:
        text = text[: match.start()]
    text = _FRAGMENT_RE.sub("", text)
    return text.strip()


def truncate_at_directive(text: str, match: RollMatch) -> str:
    """Keep everything up to and including the roll directive's closing bracket."""
    return text[: match.end].rstrip()


def truncate_at_system_label(text: str) -> str:
    match = _SYSTEM_LABEL_RE.search(text)
    if not match:
        return text
    return text[: match.start()].rstrip()
