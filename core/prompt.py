"""
Prompt files.

A prompt file has two stanzas separated by a line starting with ``---``:

    You are Clutha, a helpful bot on a Discord server.

    > What can you do?

    Answer questions, mostly.
    ---
    > Hello!

    Hi there.

The first stanza is the preamble sent ahead of every conversation; the second
seeds the dialogue with an opening exchange. Paragraphs are grouped the same
way replies are (see utils.text.split_result); a paragraph starting with ``>``
is a user turn, anything else is a model turn.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from core.dialogue import MODEL, USER, Dialogue
from utils.errors import CluthaError
from utils.text import split_result

__all__ = ["Prompt", "PromptError", "STANZA_SEPARATOR", "USER_MARKER", "read_dialogue", "parse_prompt", "load_prompt", "list_prompts"]

STANZA_SEPARATOR = "---"
USER_MARKER = ">"
PROMPT_SUFFIX = ".txt"


class PromptError(CluthaError):
    """A prompt file could not be read or parsed."""


@dataclass
class Prompt:
    preamble: Dialogue = field(default_factory=Dialogue)
    initial: Dialogue = field(default_factory=Dialogue)
    name: str = ""

    def copy(self) -> "Prompt":
        return Prompt(self.preamble.copy(), self.initial.copy(), self.name)


def read_dialogue(text: str) -> Dialogue:
    """Parse one stanza into a dialogue."""
    dialogue = Dialogue()
    for group in split_result(text):
        body = group.strip()
        if not body:
            continue
        if body.startswith(USER_MARKER):
            dialogue.push(USER, body[len(USER_MARKER):].strip())
        else:
            dialogue.push(MODEL, body)
    return dialogue


def _split_stanzas(text: str) -> tuple[str, str]:
    lines = text.split("\n")
    for i, line in enumerate(lines):
        if line.startswith(STANZA_SEPARATOR):
            return "\n".join(lines[:i]), "\n".join(lines[i + 1:])
    return text, ""


def parse_prompt(text: str, name: str = "") -> Prompt:
    preamble, initial = _split_stanzas(text)
    return Prompt(read_dialogue(preamble), read_dialogue(initial), name)


def load_prompt(path: str | Path) -> Prompt:
    """Load a prompt file, raising PromptError on any I/O or decode failure."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise PromptError(f"Could not read prompt file {path}: {exc}", cause=exc) from exc
    return parse_prompt(text, name=path.stem)


def list_prompts(directory: str | Path) -> list[str]:
    """Names of the prompt files available in ``directory``."""
    directory = Path(directory)
    if not directory.is_dir():
        return []
    return sorted(p.stem for p in directory.glob(f"*{PROMPT_SUFFIX}") if p.is_file())
