"""
Per-channel conversation state.

Each channel the bot has seen gets a ChannelState: its mode, the prompt
applied to it and its rolling dialogue. States live in a process-wide
registry and are never torn down.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Callable

from config import MAX_DIALOGUE_LEN
from core.dialogue import MODEL, USER, Dialogue, assemble_prompt
from core.prompt import Prompt

__all__ = [
    "Mode",
    "ChannelKind",
    "ChannelState",
    "ChannelRegistry",
    "initial_mode",
    "parse_mode",
    "registry",
]


class Mode(Enum):
    """When the bot reads and answers messages in a channel."""
    OFF = "off"          # ignores all non-command messages
    PASSIVE = "passive"  # reads and answers only when mentioned
    LURKING = "lurking"  # reads everything, answers when mentioned
    ACTIVE = "active"    # reads and answers everything


_MODE_ALIASES = {
    "off": Mode.OFF,
    "passive": Mode.PASSIVE,
    "lurk": Mode.LURKING,
    "lurking": Mode.LURKING,
    "active": Mode.ACTIVE,
}


def parse_mode(value: str) -> Mode | None:
    return _MODE_ALIASES.get(value.strip().lower())


class ChannelKind(Enum):
    GUILD_TEXT = "guild_text"
    THREAD = "thread"
    DIRECT = "direct"
    OTHER = "other"


def initial_mode(kind: ChannelKind) -> Mode:
    if kind in (ChannelKind.GUILD_TEXT, ChannelKind.DIRECT):
        return Mode.ACTIVE
    if kind is ChannelKind.THREAD:
        return Mode.LURKING
    return Mode.PASSIVE


class ChannelState:
    """Mode, prompt and dialogue for one channel.

    Hold ``lock`` for the whole of any read-modify-write on the state.
    """

    def __init__(
        self,
        mode: Mode,
        prompt: Prompt | None = None,
        *,
        max_dialogue_len: int = MAX_DIALOGUE_LEN,
    ):
        self.mode = mode
        self.max_dialogue_len = max_dialogue_len
        self.prompt = Prompt()
        self.dialogue = Dialogue(max_dialogue_len)
        self.lock = asyncio.Lock()
        self.apply_prompt(prompt or Prompt())

    def __repr__(self) -> str:
        return f"ChannelState(mode={self.mode.value}, prompt={self.prompt.name!r}, dialogue={self.dialogue!r})"

    # ------------------
    # Gating
    # ------------------

    def should_process(self, *, from_self: bool, mentioned: bool) -> bool:
        """Whether an inbound message is recorded in the dialogue."""
        if from_self:
            return False
        if self.mode is Mode.OFF:
            return False
        if self.mode is Mode.PASSIVE:
            return mentioned
        return True

    def should_respond(self, *, mentioned: bool) -> bool:
        """Whether a recorded message gets a reply."""
        if self.mode in (Mode.PASSIVE, Mode.LURKING):
            return mentioned
        return self.mode is Mode.ACTIVE

    # ------------------
    # Dialogue
    # ------------------

    def process_user_text(self, text: str) -> None:
        self.dialogue.push(USER, text)

    def process_model_text(self, text: str) -> None:
        self.dialogue.push(MODEL, text)

    def assemble_prompt(self) -> list[tuple[str, str]]:
        """Preamble followed by the rolling dialogue, ready for the backend."""
        return assemble_prompt([*self.prompt.preamble, *self.dialogue])

    def apply_prompt(self, prompt: Prompt) -> None:
        """Switch to ``prompt`` and restart the dialogue from its opening exchange.

        The dialogue budget shrinks by the preamble's length so both always
        fit in one submission.
        """
        self.prompt = prompt
        self.dialogue.max_len = max(0, self.max_dialogue_len - prompt.preamble.total_len)
        self.reset_dialogue()

    def reset_dialogue(self) -> None:
        self.dialogue.reset()
        self.dialogue.append(self.prompt.initial)

    def derive(self, mode: Mode = Mode.ACTIVE) -> "ChannelState":
        """Copy of this state (prompt and dialogue so far) under a new mode."""
        state = ChannelState(mode, self.prompt.copy(), max_dialogue_len=self.max_dialogue_len)
        state.dialogue = self.dialogue.copy()
        return state


class ChannelRegistry:
    """Maps channel ids to their state, creating entries on first use.

    The registry lock only covers lookup and insertion; callers take the
    per-channel lock for anything longer.
    """

    def __init__(self, prompt_factory: Callable[[], Prompt] | None = None):
        self._states: dict[int, ChannelState] = {}
        self._lock = asyncio.Lock()
        self._prompt_factory = prompt_factory

    def set_prompt_factory(self, factory: Callable[[], Prompt] | None) -> None:
        """Set the callable that supplies the prompt for new channels."""
        self._prompt_factory = factory

    def __contains__(self, channel_id: int) -> bool:
        return channel_id in self._states

    def __len__(self) -> int:
        return len(self._states)

    async def get(self, channel_id: int, kind: ChannelKind) -> ChannelState:
        async with self._lock:
            state = self._states.get(channel_id)
            if state is None:
                prompt = self._prompt_factory() if self._prompt_factory else None
                state = ChannelState(initial_mode(kind), prompt)
                self._states[channel_id] = state
            return state

    async def insert(self, channel_id: int, state: ChannelState) -> ChannelState:
        """Register ``state`` for a new channel, replacing any previous entry."""
        async with self._lock:
            self._states[channel_id] = state
            return state


# Process-wide registry
registry = ChannelRegistry()
