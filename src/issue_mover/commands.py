"""Recognize slash commands in comment bodies."""

from __future__ import annotations

import re

from .models import Command

COMMAND_NAME = "move"

_COMMAND_RE = re.compile(r"^/(\w+)\b *(.*)$", re.MULTILINE)


def parse_command(body: str, name: str = COMMAND_NAME) -> Command | None:
    """Return the first ``/<name> ...`` command of a comment body, if any.

    Only commands at the start of a line count; the rest of that line
    becomes the command arguments.
    """
    for match in _COMMAND_RE.finditer(body or ""):
        if match.group(1) == name:
            return Command(arguments=match.group(2).strip())
    return None


def is_command_only(body: str) -> bool:
    """Whether a command comment has no content besides the command line."""
    return "\n" not in (body or "").strip()
