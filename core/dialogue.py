"""
Rolling dialogue buffer.

A channel's transcript is kept as a list of role-tagged turns with a budget
measured in words. Pushing past the budget evicts the oldest turns first.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from itertools import groupby
from typing import Iterable, Iterator

__all__ = [
    "USER",
    "MODEL",
    "TURN_SEPARATOR",
    "Turn",
    "Dialogue",
    "word_count",
    "assemble_prompt",
]

USER = "user"
MODEL = "model"

# Joins consecutive same-role turns into one submission entry
TURN_SEPARATOR = "\n\n"


def word_count(text: str) -> int:
    """Approximate length of ``text`` in words.

    Splits on single spaces only, so an empty string still counts as one.
    """
    return len(text.strip().split(" "))


@dataclass(frozen=True)
class Turn:
    role: str
    text: str

    def __len__(self) -> int:
        return word_count(self.text)


class Dialogue:
    """Ordered, size-bounded sequence of turns with FIFO eviction."""

    def __init__(self, max_len: int = 1000):
        self.max_len = max_len
        self.total_len = 0
        self._turns: deque[Turn] = deque()

    def __iter__(self) -> Iterator[Turn]:
        return iter(self._turns)

    def __len__(self) -> int:
        return len(self._turns)

    def __repr__(self) -> str:
        return f"Dialogue(turns={len(self._turns)}, total_len={self.total_len}, max_len={self.max_len})"

    @property
    def turns(self) -> list[Turn]:
        return list(self._turns)

    def push(self, role: str, text: str) -> None:
        """Append a turn, then evict from the front until back under budget."""
        turn = Turn(role, text)
        self.total_len += len(turn)
        self._turns.append(turn)
        self._truncate_to_size()

    def _truncate_to_size(self) -> None:
        while self.total_len > self.max_len and self._turns:
            evicted = self._turns.popleft()
            self.total_len -= len(evicted)

    def append(self, other: Iterable[Turn]) -> None:
        """Push every turn of ``other`` in order.

        Each turn is pushed on its own, so eviction can drop turns from the
        front of the combined result part way through.
        """
        for turn in list(other):
            self.push(turn.role, turn.text)

    def reset(self) -> None:
        """Drop all turns. The budget is left as it is."""
        self._turns.clear()
        self.total_len = 0

    def copy(self) -> "Dialogue":
        clone = Dialogue(self.max_len)
        clone._turns = deque(self._turns)
        clone.total_len = self.total_len
        return clone


def assemble_prompt(turns: Iterable[Turn]) -> list[tuple[str, str]]:
    """Fold adjacent same-role turns into (role, text) submission entries.

    Only neighbours are merged: user, model, user gives three entries.
    """
    prompt: list[tuple[str, str]] = []
    for role, group in groupby(turns, key=lambda t: t.role):
        prompt.append((role, TURN_SEPARATOR.join(t.text for t in group)))
    return prompt
