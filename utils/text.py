"""Text manipulation utilities for Discord messages.

Long replies are cut into groups at paragraph boundaries, then the groups are
packed into segments that fit under the Discord message limit.
"""

from __future__ import annotations

from typing import Iterable

__all__ = [
    "CODE_FENCE",
    "OVERSIZED_PLACEHOLDER",
    "split_result",
    "merge_groups",
    "prepare_response",
]

CODE_FENCE = "```"
HEADING_MARK = "*"

# Sent in place of a group that cannot fit in a single message
OVERSIZED_PLACEHOLDER = "*[this section was too long to post]*\n\n"


def _is_heading(line: str) -> bool:
    return line.startswith(HEADING_MARK) and line.endswith(HEADING_MARK)


def _lines(text: str) -> list[str]:
    # Lines end at "\n" only; a trailing "\r" is dropped
    lines = [line.removesuffix("\r") for line in text.split("\n")]
    if lines[-1] == "":
        lines.pop()
    return lines


def split_result(text: str) -> list[str]:
    """Split text into content-aware groups.

    Blank lines end a group, except straight after a single-line
    ``*heading*`` so the heading stays with its paragraph. A fenced code
    block is always kept whole as one group.
    """
    groups: list[str] = []
    current: list[str] = []
    after_heading = False
    in_code_block = False

    def flush() -> None:
        nonlocal current
        if current:
            groups.append("".join(current))
        current = []

    for line in _lines(text):
        if not line and not in_code_block and not after_heading:
            current.append("\n")
            flush()
        elif line.startswith(CODE_FENCE):
            in_code_block = not in_code_block
            if in_code_block:
                flush()
                current.append(line + "\n")
            else:
                current.append(line + "\n")
                flush()
        else:
            current.append(line + "\n")
            after_heading = _is_heading(line)

    flush()
    return groups


def merge_groups(groups: Iterable[str], max_size: int) -> list[str]:
    """Pack groups greedily into segments of at most ``max_size`` characters.

    A group that is longer than ``max_size`` on its own is dropped and
    OVERSIZED_PLACEHOLDER is posted in its place.
    """
    segments: list[str] = []
    running = ""

    for group in groups:
        if len(running) + len(group) > max_size:
            if running:
                segments.append(running)
            running = ""
        if len(group) > max_size:
            running += OVERSIZED_PLACEHOLDER
            continue
        running += group

    if running:
        segments.append(running)
    return segments


def prepare_response(text: str, limit: int) -> list[str]:
    """Return the segments to send for a generated reply.

    Short replies go out untouched as a single segment.
    """
    if len(text) < limit:
        return [text]
    return merge_groups(split_result(text), limit)
