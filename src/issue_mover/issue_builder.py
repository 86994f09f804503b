"""Build moved issue/comment bodies and the notices posted on the source issue."""

from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING, Final

from .arguments import USAGE
from .attribution import format_author

if TYPE_CHECKING:
    from .models import IssueRef

INVALID_ARGUMENTS_NOTICE: Final[str] = (
    f"⚠️ The command arguments are not valid.\n\n**Usage:** \n```sh\n{USAGE}\n```"
)
SAME_REPOSITORY_NOTICE: Final[str] = "⚠️ The source and target repository must be different."
MISSING_TARGET_NOTICE: Final[str] = "⚠️ The target repository does not exist."
INELIGIBLE_TARGET_NOTICE: Final[str] = (
    "⚠️ The target repository must have issues enabled and it must not be archived."
)
TARGET_PERMISSION_NOTICE: Final[str] = "⚠️ You must have write permission for the target repository."


def app_not_installed_notice(app_url: str) -> str:
    return f"⚠️ The [GitHub App]({app_url}) must be installed for the target repository."


def format_timestamp(timestamp: dt.datetime) -> str:
    """Format a timestamp in UTC for attribution lines.

    Args:
        timestamp: Aware datetime; naive values are taken to be UTC already

    Returns:
        Formatted timestamp (e.g., "Jan 15, 2024, 3:07 PM")
    """
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(dt.UTC)
    hour = timestamp.hour % 12 or 12
    return f"{timestamp:%b} {timestamp.day}, {timestamp.year}, {hour}:{timestamp:%M %p}"


def attribution_line(author: str, created_at: dt.datetime, *, mention: bool) -> str:
    return f"*{format_author(author, mention=mention)} commented on {format_timestamp(created_at)} UTC:*"


def build_issue_body(
    *,
    author: str,
    created_at: dt.datetime,
    markdown: str,
    mover: str,
    source: IssueRef,
    mention_authors: bool,
) -> str:
    """Build the body of the destination issue.

    Args:
        author: Login of the source issue author
        created_at: Creation time of the source issue
        markdown: Source body, already converted to Markdown
        mover: Login of the user who issued the move command
        source: The source issue
        mention_authors: Mention the author instead of linking the profile

    Returns:
        Attribution line, body and provenance line separated by blank lines
    """
    return (
        f"{attribution_line(author, created_at, mention=mention_authors)}\n\n"
        f"{markdown}\n\n"
        f"*This issue was moved by {format_author(mover, mention=True)} from {source}.*"
    )


def build_comment_body(*, author: str, created_at: dt.datetime, markdown: str, mention_authors: bool) -> str:
    """Build the body of a replicated comment."""
    return f"{attribution_line(author, created_at, mention=mention_authors)}\n\n{markdown}"


def completion_notice(mover: str, target: IssueRef) -> str:
    """Notice posted on the source issue once the move is done."""
    return f"This issue was moved by {format_author(mover, mention=True)} to {target}."
