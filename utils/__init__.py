# utils package - shared utilities for the Discord bot
from utils.logging import log, log_user, log_ai, DEFAULT_TZ
from utils.errors import CluthaError, log_error, report_discord_error, wrap_discord_errors
from utils.text import split_result, merge_groups, prepare_response, OVERSIZED_PLACEHOLDER

__all__ = [
    # logging
    "log",
    "log_user",
    "log_ai",
    "DEFAULT_TZ",
    # errors
    "CluthaError",
    "log_error",
    "report_discord_error",
    "wrap_discord_errors",
    # text
    "split_result",
    "merge_groups",
    "prepare_response",
    "OVERSIZED_PLACEHOLDER",
]
