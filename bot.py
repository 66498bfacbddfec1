"""
Discord AI bot (chat + commands)

Key rules:
- Every channel has a mode deciding whether the bot reads and answers.
- Commands start with COMMAND_PREFIX and never enter the dialogue.
- Commands live in the commands package (single source of truth).

Notes:
- Backends are synchronous, so replies are generated in a worker thread to
  avoid blocking Discord's event loop.
"""

from __future__ import annotations

import discord

from ai import build_backend
from commands import handle_commands, is_command
from config import (
    BACKEND,
    CHATGPT_MODEL,
    DEFAULT_PROMPT,
    DISCORD_TOKEN,
    GEMINI_KEY,
    GEMINI_MODEL,
    OPENAI_KEY,
    PROMPTS_DIR,
)
from core.channel import registry
from core.conversation import handle_dialogue, set_backend
from core.prompt import PromptError, load_prompt
from utils.errors import log_error, wrap_discord_errors
from utils.logging import log


# =========================
# Startup
# =========================

def _default_prompt_factory():
    """Load DEFAULT_PROMPT once and hand each new channel its own copy."""
    if not DEFAULT_PROMPT:
        return None
    try:
        prompt = load_prompt(PROMPTS_DIR / f"{DEFAULT_PROMPT}.txt")
    except PromptError as exc:
        log_error(f"Default prompt {DEFAULT_PROMPT!r} unavailable, starting without one.", exc)
        return None
    log(f"[Prompt] Default prompt {prompt.name} ({prompt.preamble.total_len} words)")
    return prompt.copy


def _configure() -> None:
    if BACKEND == "chatgpt":
        backend = build_backend(BACKEND, OPENAI_KEY, CHATGPT_MODEL)
    else:
        backend = build_backend(BACKEND, GEMINI_KEY, GEMINI_MODEL)
    set_backend(backend)
    log(f"[AI] Using {BACKEND} backend.")
    registry.set_prompt_factory(_default_prompt_factory())


# =========================
# Discord client setup
# =========================

intents = discord.Intents.default()
intents.message_content = True
intents.guild_messages = True
intents.dm_messages = True

client = discord.Client(intents=intents)


@client.event
async def on_ready() -> None:
    """Fired when the bot connects."""
    log(f"{client.user} is connected! (ID: {client.user.id})")


@client.event
@wrap_discord_errors
async def on_message(message: discord.Message) -> None:
    """
    Main message handler.

    Order:
    1) Route commands to the commands package
    2) Otherwise: hand to the dialogue handler (mode gating happens there)
    """
    content = message.content or ""

    if is_command(content):
        if message.author == client.user:
            return
        await handle_commands(message, content, client=client)
        return

    await handle_dialogue(message, client.user)


# =========================
# Start bot
# =========================

def main() -> None:
    _configure()
    client.run(DISCORD_TOKEN)


if __name__ == "__main__":
    main()
