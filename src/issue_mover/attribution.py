"""Render user and bot identities for issue bodies and notices."""

from __future__ import annotations

from typing import Final

GITHUB_URL: Final[str] = "https://github.com"
BOT_SUFFIX: Final[str] = "[bot]"


def is_bot(username: str) -> bool:
    return username.endswith(BOT_SUFFIX)


def format_author(username: str, *, mention: bool) -> str:
    """Format a user for display.

    Bots are linked to their app page and never mentioned, so moving an
    issue does not notify them again. Humans get a live ``@mention`` when
    ``mention`` is set, otherwise a link to their profile.

    Args:
        username: GitHub login, bots carry the ``[bot]`` suffix
        mention: Whether a live mention is wanted

    Returns:
        Markdown for the identity
    """
    if is_bot(username):
        slug = username.removesuffix(BOT_SUFFIX)
        return f"[{slug}]({GITHUB_URL}/apps/{slug})"
    if mention:
        return f"@{username}"
    return f"[{username}]({GITHUB_URL}/{username})"
