"""Runtime configuration, read from the environment."""

from __future__ import annotations

import os
from pathlib import Path


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else default


# Resolve file paths relative to this script
BASE_DIR = Path(__file__).resolve().parent

# =========================
# Discord
# =========================

DISCORD_TOKEN = os.getenv("DISCORD_TOKEN", "")
COMMAND_PREFIX = os.getenv("COMMAND_PREFIX", "~")

# Discord hard-limit is 2000 chars; segments stay a margin below it
DISCORD_MESSAGE_LIMIT = _int_env("DISCORD_MESSAGE_LIMIT", 2000)
MESSAGE_MARGIN = _int_env("MESSAGE_MARGIN", 100)
SEGMENT_LIMIT = DISCORD_MESSAGE_LIMIT - MESSAGE_MARGIN

# Replies longer than this are moved into a new thread
THREAD_REPLY_THRESHOLD = _int_env("THREAD_REPLY_THRESHOLD", SEGMENT_LIMIT)
THREAD_TITLE_LEN = 100

# =========================
# Dialogue
# =========================

# Word budget shared by a channel's preamble and its rolling dialogue
MAX_DIALOGUE_LEN = _int_env("MAX_DIALOGUE_LEN", 1000)

PROMPTS_DIR = Path(os.getenv("PROMPTS_DIR", str(BASE_DIR / "prompts")))
DEFAULT_PROMPT = os.getenv("DEFAULT_PROMPT", "").strip()

# =========================
# LLM backend
# =========================

BACKEND = os.getenv("BACKEND", "gemini").strip().lower()
GEMINI_KEY = os.getenv("GEMINI_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "models/gemini-2.5-flash-lite")
OPENAI_KEY = os.getenv("OPENAI_KEY", "")
CHATGPT_MODEL = os.getenv("CHATGPT_MODEL", "gpt-3.5-turbo")
