"""commands

Discord command handling, split by audience.

Important design rule:
- bot.py routes anything starting with COMMAND_PREFIX here BEFORE the
  dialogue handler, so commands are never recorded in a conversation
"""

from __future__ import annotations

import discord

from commands.core import handle_ping, handle_shutdown, handle_version
from commands.admin import handle_mode, handle_prompt, handle_prompts, handle_reset
from config import COMMAND_PREFIX
from core.channel import ChannelRegistry, registry

__all__ = ["handle_commands", "is_command"]

_HANDLERS = {
	"version": handle_version,
	"ping": handle_ping,
	"shutdown": handle_shutdown,
	"mode": handle_mode,
	"prompt": handle_prompt,
	"prompts": handle_prompts,
	"reset": handle_reset,
}


def is_command(content: str, prefix: str = COMMAND_PREFIX) -> bool:
	return content.lstrip().startswith(prefix)


async def handle_commands(
	message: discord.Message,
	content: str,
	*,
	client: discord.Client,
	states: ChannelRegistry = registry,
	prefix: str = COMMAND_PREFIX,
) -> bool:
	"""
	Central command router.
	Returns True if a command was handled (caller should return).
	"""
	body = content.strip()[len(prefix):]
	parts = body.split(maxsplit=1)
	if not parts:
		return False
	name = parts[0].lower()
	arg = parts[1].strip() if len(parts) > 1 else ""
	handler = _HANDLERS.get(name)
	if handler is None:
		await message.channel.send(f"Unknown command `{prefix}{name}`. Try: {', '.join(sorted(_HANDLERS))}")
		return True
	return await handler(message, arg, client=client, states=states)
