"""Logging utilities for the Discord bot."""

from __future__ import annotations

import os
from datetime import datetime
from typing import TYPE_CHECKING

import pytz

if TYPE_CHECKING:
    from pytz.tzinfo import BaseTzInfo

# Default timezone for timestamps
DEFAULT_TZ: BaseTzInfo = pytz.timezone(os.getenv("LOG_TZ", "Europe/London"))


def _timestamp(tz: BaseTzInfo | None = None) -> str:
    return datetime.now(tz or DEFAULT_TZ).strftime("%Y-%m-%d %H:%M:%S")


def log(message: str, tz: BaseTzInfo | None = None) -> None:
    """Print console messages with a local timestamp."""
    print(f"[{_timestamp(tz)}] {message}")


def log_user(message: str) -> None:
    """Log an inbound chat message."""
    log(f"### {message}")


def log_ai(message: str) -> None:
    """Log a generated reply."""
    log(f">>> {message}")
