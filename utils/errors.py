"""
Error types and reporting for Clutha.

Commands and the reply path send a short "❌" notice to the channel with
`report_discord_error`; anything that escapes an event handler is logged by
`wrap_discord_errors`. Backend and prompt failures subclass `CluthaError`.
"""

from __future__ import annotations
import functools
import traceback
from typing import Any, Callable, Coroutine, TypeVar
from utils.logging import log

import discord

__all__ = ["CluthaError", "log_error", "report_discord_error", "wrap_discord_errors"]

class CluthaError(Exception):
	"""Base class for bot errors.

	``cause`` holds the HTTP or file error underneath, when there is one.
	"""
	def __init__(self, message: str, *, cause: Exception | None = None):
		super().__init__(message)
		self.cause = cause

def log_error(message: str, exc: BaseException | None = None) -> None:
	"""Log ``message``, followed by the traceback of ``exc`` when given."""
	if exc is None:
		log(f"[ERROR] {message}")
		return
	details = "".join(traceback.format_exception(exc))
	log(f"[ERROR] {message}\n{details}")

async def report_discord_error(channel: discord.abc.Messageable, message: str, exc: Exception | None = None) -> None:
	"""Post ``message`` as an error notice in ``channel`` and log ``exc``."""
	log_error(message, exc)
	try:
		await channel.send(f"❌ {message}")
	except discord.DiscordException as e:
		log(f"[ERROR] Could not post error notice in channel {getattr(channel, 'id', '?')}: {e}")

F = TypeVar("F", bound=Callable[..., Coroutine[Any, Any, Any]])
def wrap_discord_errors(func: F) -> F:
	"""Decorator: log errors escaping a Discord event handler.

	Handlers report user-facing failures themselves, so the wrapper only logs.
	"""
	@functools.wraps(func)
	async def wrapper(*args, **kwargs):
		try:
			return await func(*args, **kwargs)
		except Exception as exc:
			log_error(f"Unhandled error in {func.__name__}.", exc)
	return wrapper  # type: ignore
