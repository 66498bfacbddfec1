"""Admin-only commands for the Clutha bot: channel mode and prompt control."""
import discord

from config import PROMPTS_DIR
from core.channel import ChannelRegistry, parse_mode
from core.context import channel_kind
from core.prompt import PromptError, list_prompts, load_prompt
from utils.errors import report_discord_error
from utils.logging import log

def is_admin(message: discord.Message) -> bool:
	# In a DM the author owns the conversation
	if not message.guild:
		return True
	perms = getattr(message.author, "guild_permissions", None)
	return bool(perms and getattr(perms, "administrator", False))

async def _deny(message: discord.Message, what: str) -> bool:
	await message.channel.send(f"You don't have permission to {what}.")
	return True

async def _state(message: discord.Message, states: ChannelRegistry):
	return await states.get(message.channel.id, channel_kind(message.channel))

async def handle_mode(message: discord.Message, arg: str, *, states: ChannelRegistry, **_) -> bool:
	state = await _state(message, states)
	if not arg:
		await message.channel.send(f"Mode is **{state.mode.value}**")
		return True
	if not is_admin(message):
		return await _deny(message, "change the mode")
	mode = parse_mode(arg)
	if mode is None:
		await message.channel.send("Usage: `mode <off|passive|lurk|active>`")
		return True
	async with state.lock:
		state.mode = mode
	log(f"[Mode] Channel {message.channel.id} set to {mode.value}")
	await message.channel.send(f"Mode set to **{mode.value}**")
	return True

async def handle_prompt(message: discord.Message, arg: str, *, states: ChannelRegistry, **_) -> bool:
	if not is_admin(message):
		return await _deny(message, "change the prompt")
	name = arg.strip()
	if not name:
		state = await _state(message, states)
		await message.channel.send(f"Prompt is **{state.prompt.name or 'none'}**")
		return True
	if name not in list_prompts(PROMPTS_DIR):
		await message.channel.send(f"No prompt called `{name}`.")
		return True
	try:
		prompt = load_prompt(PROMPTS_DIR / f"{name}.txt")
	except PromptError as exc:
		await report_discord_error(message.channel, f"Could not load prompt `{name}`.", exc)
		return True
	state = await _state(message, states)
	async with state.lock:
		state.apply_prompt(prompt)
	log(f"[Prompt] Channel {message.channel.id} now using {name} ({prompt.preamble.total_len} words)")
	await message.channel.send(f"Prompt set to **{name}**")
	return True

async def handle_prompts(message: discord.Message, arg: str, **_) -> bool:
	names = list_prompts(PROMPTS_DIR)
	if not names:
		await message.channel.send("No prompts available.")
	else:
		await message.channel.send("Prompts: " + ", ".join(f"`{n}`" for n in names))
	return True

async def handle_reset(message: discord.Message, arg: str, *, states: ChannelRegistry, **_) -> bool:
	if not is_admin(message):
		return await _deny(message, "reset the conversation")
	state = await _state(message, states)
	async with state.lock:
		state.reset_dialogue()
	await message.channel.send("Conversation reset.")
	return True
