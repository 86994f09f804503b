"""
Command-line interface for the issue mover.

Runs the move pipeline for a ``/move`` comment that was already posted, the
same way the webhook handler would.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import re
import sys
from typing import TYPE_CHECKING

from .commands import COMMAND_NAME, parse_command
from .config import load_config
from .exceptions import MoveError, RemoteError
from .installations import AppInstallationProvider
from .models import IssueCommentEvent, IssueRef
from .mover import IssueMover
from .utils import get_app_credentials, setup_logging

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .models import MoveOutcome

logger: logging.Logger = logging.getLogger(__name__)

_ISSUE_RE = re.compile(r"^([A-Za-z0-9-]+)/([A-Za-z0-9._-]+)#(\d+)$")


def parse_issue_ref(value: str) -> IssueRef:
    """Parse "owner/repo#number" for argparse."""
    match = _ISSUE_RE.match(value.strip())
    if not match or int(match.group(3)) < 1:
        msg = f"Invalid issue reference '{value}'. Expected format: 'owner/repository#number'"
        raise argparse.ArgumentTypeError(msg)
    return IssueRef(match.group(1), match.group(2), int(match.group(3)))


def parse_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Move a GitHub issue to another repository, as requested by a /move comment"
    )

    _ = parser.add_argument("issue", type=parse_issue_ref, help="Source issue (owner/repo#number)")

    _ = parser.add_argument(
        "--comment-id", "-c", type=int, required=True, help="Id of the comment carrying the /move command"
    )

    _ = parser.add_argument(
        "--dry-run", "-n", action="store_true", help="Log every step without changing anything on GitHub"
    )

    _ = parser.add_argument("--log-file", help="Also append log output to this file")

    _ = parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    return parser.parse_args(argv)


def _print_outcome(outcome: MoveOutcome) -> None:
    if outcome.moved:
        print(f"Moved to {outcome.target} ({outcome.comments_moved} comments)")
    elif outcome.status == "rejected":
        print(f"Move rejected: {outcome.reason}")
    else:
        print(f"Command ignored: {outcome.reason}")


def run(args: argparse.Namespace) -> MoveOutcome:
    """Load everything the pipeline needs for the comment and run it."""
    source: IssueRef = args.issue
    app_id, private_key = get_app_credentials()
    provider = AppInstallationProvider.from_credentials(app_id, private_key)
    source_client = provider.client_for(source.repository)

    config = load_config(source_client, source.repository)
    if args.dry_run:
        config = dataclasses.replace(config, perform=False)

    comment = source_client.get_comment(source.repository, args.comment_id)
    command = parse_command(comment.body)
    if command is None:
        msg = f"Comment {args.comment_id} does not contain a /{COMMAND_NAME} command"
        raise MoveError(msg)

    issue = source_client.get_issue(source)
    event = IssueCommentEvent(
        source=source,
        comment_id=comment.id,
        comment_body=comment.body,
        comment_author=comment.author,
        issue_state=issue.state,
        issue_locked=issue.locked,
        is_pull_request=issue.pull_request,
    )
    return IssueMover(provider).move(event, command, config=config, source_client=source_client)


def main(argv: Sequence[str] | None = None) -> None:
    """Main entry point."""
    args = parse_arguments(argv)

    # Setup logging
    verbose: bool = getattr(args, "verbose", False)
    setup_logging(verbose=verbose, log_file=args.log_file)

    try:
        outcome = run(args)
    except RemoteError:
        logger.exception("Move failed on GitHub")
        sys.exit(1)
    except MoveError as e:
        logger.error(f"Move failed: {e}")  # noqa: TRY400
        sys.exit(1)
    except Exception:
        logger.exception("Move failed")
        sys.exit(1)

    _print_outcome(outcome)
    sys.exit(0)
