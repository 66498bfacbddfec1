"""Core commands for the Clutha bot."""
from importlib.metadata import PackageNotFoundError, version

import discord

from commands.admin import is_admin
from utils.logging import log

def bot_version() -> str:
	try:
		return version("clutha")
	except PackageNotFoundError:
		return "unknown"

async def handle_version(message: discord.Message, arg: str, **_) -> bool:
	await message.channel.send(f"Clutha version {bot_version()}")
	return True

async def handle_ping(message: discord.Message, arg: str, **_) -> bool:
	channel = message.channel
	where = getattr(channel, "mention", None) or "this"
	await message.channel.send(
		f"User **{discord.utils.escape_markdown(message.author.name)}** used the 'ping' command in the {where} channel"
	)
	return True

async def handle_shutdown(message: discord.Message, arg: str, *, client: discord.Client, **_) -> bool:
	if not is_admin(message):
		await message.channel.send("You don't have permission to shut me down.")
		return True
	await message.channel.send("Shutting down")
	log(f"[Shutdown] Requested by {message.author}")
	await client.close()
	return True
