"""
AI conversation handler - core message processing logic.
Handles:
- Mode gating (record the message? answer it?)
- Reply generation through the configured backend
- Moving long replies into their own thread
- Splitting replies into Discord-sized segments
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass

import discord

from ai import Backend, BackendError
from config import SEGMENT_LIMIT, THREAD_REPLY_THRESHOLD
from core.channel import ChannelKind, ChannelRegistry, ChannelState, Mode, registry
from core.context import channel_kind, is_mentioned, send_segments, strip_mention, thread_title
from utils.errors import CluthaError, log_error, report_discord_error
from utils.logging import log, log_ai, log_user
from utils.text import prepare_response

__all__ = ["handle_dialogue", "process_message", "respond", "set_backend", "should_fork", "Reply"]

# Module-level backend (set from bot.py)
_backend: Backend | None = None


def set_backend(backend: Backend | None) -> None:
    """Set the backend instance (called from bot.py)."""
    global _backend
    _backend = backend


def _get_backend() -> Backend:
    if _backend is None:
        raise CluthaError("No backend configured.")
    return _backend


@dataclass
class Reply:
    text: str
    destination: discord.abc.Messageable
    segments: list[str]
    forked: bool = False


def should_fork(reply: str, kind: ChannelKind, origin: discord.Message | None) -> bool:
    """Long replies in guild text channels go to a new thread on the original message.

    DMs and threads cannot host a new thread, so they always answer in place.
    """
    return (
        len(reply) > THREAD_REPLY_THRESHOLD
        and kind is ChannelKind.GUILD_TEXT
        and origin is not None
    )


async def process_message(
    message: discord.Message,
    bot_user: discord.abc.User,
    *,
    states: ChannelRegistry = registry,
) -> bool:
    """Record an inbound message if the channel's mode allows it.

    Returns True when the message should be answered.
    """
    kind = channel_kind(message.channel)
    state = await states.get(message.channel.id, kind)
    mentioned = is_mentioned(message, bot_user)
    text = strip_mention(message.content or "", bot_user)

    async with state.lock:
        if not state.should_process(from_self=message.author.id == bot_user.id, mentioned=mentioned):
            return False
        if not text:
            return False
        log_user(f"{message.author.display_name}: {text}")
        state.process_user_text(text)
        return state.should_respond(mentioned=mentioned)


async def respond(
    channel: discord.abc.Messageable,
    *,
    origin: discord.Message | None = None,
    states: ChannelRegistry = registry,
) -> Reply:
    """Generate a reply for ``channel``, record it and post it.

    A failed backend call is reported in the channel and re-raised.
    """
    kind = channel_kind(channel)
    state = await states.get(channel.id, kind)
    backend = _get_backend()
    forked: ChannelState | None = None

    # The lock is held across the backend call so turns never interleave
    async with state.lock:
        prompt = state.assemble_prompt()
        try:
            async with channel.typing():
                start_time = time.perf_counter()
                text = await asyncio.to_thread(backend.generate, prompt)
                response_time = time.perf_counter() - start_time
        except BackendError as exc:
            await report_discord_error(channel, "There is an issue with my AI.", exc)
            raise

        if should_fork(text, kind, origin):
            forked = state.derive(Mode.ACTIVE)
        else:
            state.process_model_text(text)

    log_ai(f"AI ({response_time:.2f}s): {text}")

    destination: discord.abc.Messageable = channel
    if forked is not None and origin is not None:
        try:
            thread = await origin.create_thread(name=thread_title(text))
        except discord.HTTPException as exc:
            log_error("Could not create a thread, replying in the channel.", exc)
            forked = None
            async with state.lock:
                state.process_model_text(text)
        else:
            log(f"[Thread] Moved long reply into thread {thread.id}")
            forked = await states.insert(thread.id, forked)
            async with forked.lock:
                forked.process_model_text(text)
            destination = thread

    segments = prepare_response(text, SEGMENT_LIMIT)
    await send_segments(destination, segments)
    return Reply(text, destination, segments, forked=forked is not None)


async def handle_dialogue(
    message: discord.Message,
    bot_user: discord.abc.User,
    *,
    states: ChannelRegistry = registry,
) -> Reply | None:
    """Run one inbound message through gating and, if due, answer it."""
    if not await process_message(message, bot_user, states=states):
        return None
    return await respond(message.channel, origin=message, states=states)
