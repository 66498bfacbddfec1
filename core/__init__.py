# core package - main bot logic

from .dialogue import Dialogue, Turn, assemble_prompt, word_count
from .prompt import Prompt, PromptError, load_prompt
from .channel import ChannelRegistry, ChannelState, Mode, registry
from .conversation import handle_dialogue, respond, set_backend

__all__ = [
    "Dialogue",
    "Turn",
    "assemble_prompt",
    "word_count",
    "Prompt",
    "PromptError",
    "load_prompt",
    "ChannelRegistry",
    "ChannelState",
    "Mode",
    "registry",
    "handle_dialogue",
    "respond",
    "set_backend",
]
