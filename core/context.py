"""
Discord-facing helpers for the conversation handler.
Provides:
- channel_kind: classifies a Discord channel for the initial mode.
- is_mentioned: whether a message addresses the bot.
- send_segments: posts prepared reply segments in order.
- thread_title: name for a thread forked off a long reply.
"""

from __future__ import annotations

from typing import Iterable

import discord

from config import THREAD_TITLE_LEN
from core.channel import ChannelKind

__all__ = ["channel_kind", "is_mentioned", "strip_mention", "send_segments", "thread_title"]


def channel_kind(channel: object) -> ChannelKind:
    # Thread must be checked first; it is not a TextChannel but shares its API
    if isinstance(channel, discord.Thread):
        return ChannelKind.THREAD
    if isinstance(channel, discord.TextChannel):
        return ChannelKind.GUILD_TEXT
    if isinstance(channel, discord.DMChannel):
        return ChannelKind.DIRECT
    return ChannelKind.OTHER


def is_mentioned(message: discord.Message, bot_user: discord.abc.User) -> bool:
    return any(user.id == bot_user.id for user in message.mentions)


def strip_mention(content: str, bot_user: discord.abc.User) -> str:
    """Remove the bot's own mention tags from message content."""
    for tag in (f"<@{bot_user.id}>", f"<@!{bot_user.id}>"):
        content = content.replace(tag, "")
    return content.strip()


async def send_segments(channel: discord.abc.Messageable, segments: Iterable[str]) -> None:
    """Send each segment as its own message, in order."""
    for segment in segments:
        if not segment.strip():
            continue
        await channel.send(segment)


def thread_title(reply: str) -> str:
    title = reply[:THREAD_TITLE_LEN].replace("\n", " ")
    # Discord rejects blank thread names
    return title if title.strip() else "Reply"
