"""Move an issue, with its comments, to another repository.

Move Flow
---------
One ``/move`` command runs the stages below in order. Every stage may end the
run early; nothing after a failed stage runs and the source issue is left
untouched.

Gates (no writes except a notice on the source issue):
    1. Event filter: bots and pull requests are ignored
    2. Source permission: the command author needs write/admin (silent)
    3. Arguments: "[to ][<owner>/]<repo>", aliases, length limits
    4. Same repository: source and target must differ
    5. Installation: a client for the target owner (same owner reuses the
       source client)
    6. Target exists
    7. Target permission: write/admin, unless both repositories are public
       and share the owner
    8. Target eligibility: issues enabled and not archived

Replication:
    9. Create the destination issue (title, attributed body, common labels)
    10. Replicate comments one at a time, in source order, skipping the
        command comment when it holds nothing but the command

Finalization (source issue, only if it was not locked):
    11. Delete the command comment, post the completion notice
    12. Close and lock, as configured

Dry Run
-------
``Config.perform=False`` does not select another code path. Every write is
skipped at the call site, while every log line, including the ones for the
skipped writes, is still emitted with a "(dry run)" suffix. The destination
number is unknown in a dry run, so later messages show the target repository
without it.

Error Handling
--------------
Gate failures become a ``rejected`` outcome. A failed write after the
destination issue exists is not rolled back: already replicated comments stay
and finalization does not run. Only the deletion of the command comment and
the completion notice tolerate a refusal from GitHub. Any other error
propagates to the caller.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING

from . import issue_builder as ib
from .arguments import resolve_target
from .attribution import is_bot
from .commands import is_command_only
from .exceptions import (
    AppNotInstalledError,
    ForbiddenError,
    IneligibleTargetError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from .github_utils import PAGE_SIZE
from .installations import resolve_target_client
from .markdown import html_to_markdown
from .models import IssueRef, MigrationContext, MoveOutcome
from .permissions import require_write_access, target_check_required

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .config import Config
    from .models import Command, IssueCommentEvent, IssueData, RepositoryInfo, RepositoryRef
    from .protocols import ClientProvider, RepositoryClient

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)


def _trace(
    event: str,
    message: str,
    *,
    config: Config,
    source: IssueRef,
    user: str,
    target: RepositoryRef | None = None,
    level: int = logging.INFO,
) -> None:
    """Log a pipeline milestone with structured fields."""
    if not config.perform:
        message += " (dry run)"
    logger.log(
        level,
        message,
        extra={
            "event": event,
            "source": str(source),
            "target": str(target) if target is not None else None,
            "user": user,
            "perform": config.perform,
        },
    )


def _trace_ctx(ctx: MigrationContext, config: Config, event: str, message: str) -> None:
    _trace(event, message, config=config, source=ctx.source, user=ctx.cmd_user, target=ctx.target)


def check_target_eligibility(info: RepositoryInfo) -> None:
    """Raise IneligibleTargetError unless the repository accepts new issues."""
    if not info.has_issues:
        msg = f"Issues are disabled in {info.full_name}"
        raise IneligibleTargetError(msg)
    if info.archived:
        msg = f"{info.full_name} is archived"
        raise IneligibleTargetError(msg)


def common_labels(source_labels: Iterable[str], target_labels: Iterable[str]) -> frozenset[str]:
    """Source labels that exist in the target, spelled as in the target.

    GitHub label names are case-insensitive, so matching is too.
    """
    by_lower = {name.lower(): name for name in target_labels}
    return frozenset(by_lower[name.lower()] for name in source_labels if name.lower() in by_lower)


class IssueMover:
    """Runs the move pipeline for one command at a time.

    The mover keeps no per-run state: every run builds its own
    ``MigrationContext`` and passes it from stage to stage, so a single
    instance can serve any number of commands.
    """

    _provider: ClientProvider
    _page_size: int

    def __init__(self, provider: ClientProvider, *, page_size: int = PAGE_SIZE) -> None:
        self._provider = provider
        self._page_size = page_size

    def move(
        self,
        event: IssueCommentEvent,
        command: Command,
        *,
        config: Config,
        source_client: RepositoryClient,
    ) -> MoveOutcome:
        """Move the issue the command was posted on.

        Args:
            event: The comment carrying the command
            command: Parsed command
            config: Effective configuration of the source repository
            source_client: Client of the source repository's installation

        Returns:
            The outcome: moved, rejected (with the reason) or ignored

        Raises:
            RemoteError: On unexpected GitHub failures
        """
        source = event.source
        user = event.comment_author
        _trace(
            "received",
            f"[{source}] Received move command from {user}: {command.arguments!r}",
            config=config,
            source=source,
            user=user,
        )

        if event.author_is_bot or is_bot(user):
            return self._ignore(event, config, "bot")
        if event.is_pull_request:
            return self._ignore(event, config, "pull request")

        try:
            require_write_access(source_client, source.repository, user)
        except PermissionDeniedError as e:
            _trace(
                "rejected:source permission",
                f"[{source}] Ignoring command: {e}",
                config=config,
                source=source,
                user=user,
                level=logging.WARNING,
            )
            return MoveOutcome(status="rejected", reason="source permission")

        try:
            target_repo = resolve_target(command.arguments, source, config.aliases)
        except ValidationError:
            return self._reject(event, config, source_client, "invalid arguments", ib.INVALID_ARGUMENTS_NOTICE)

        if source.same_repository(target_repo):
            return self._reject(
                event, config, source_client, "same repository", ib.SAME_REPOSITORY_NOTICE, target=target_repo
            )

        try:
            target_client = resolve_target_client(self._provider, source_client, source, target_repo)
        except AppNotInstalledError:
            notice = ib.app_not_installed_notice(self._provider.app_url)
            return self._reject(event, config, source_client, "app not installed", notice, target=target_repo)

        try:
            target_info = target_client.get_repository(target_repo)
        except NotFoundError:
            return self._reject(
                event, config, source_client, "missing target", ib.MISSING_TARGET_NOTICE, target=target_repo
            )

        # Visibility of the source only matters within one owner
        source_private = source.same_owner(target_repo) and source_client.get_repository(source.repository).private
        if target_check_required(source, target_repo, source_private=source_private, target_info=target_info):
            try:
                require_write_access(target_client, target_repo, user)
            except PermissionDeniedError:
                return self._reject(
                    event, config, source_client, "target permission", ib.TARGET_PERMISSION_NOTICE, target=target_repo
                )

        try:
            check_target_eligibility(target_info)
        except IneligibleTargetError:
            return self._reject(
                event, config, source_client, "issues disabled", ib.INELIGIBLE_TARGET_NOTICE, target=target_repo
            )

        issue = source_client.get_issue(source)
        labels: frozenset[str] = frozenset()
        if config.move_labels and issue.labels:
            labels = common_labels(issue.labels, target_client.get_label_names(target_repo))

        ctx = MigrationContext(
            source=source,
            target=IssueRef(target_repo.owner, target_repo.repo),
            cmd_user=user,
            cmd_comment_id=event.comment_id,
            is_cmd_comment_content=not is_command_only(event.comment_body),
            same_owner=source.same_owner(target_repo),
            issue_open=event.issue_state == "open",
            issue_locked=event.issue_locked,
            common_labels=labels,
        )

        try:
            ctx = self._create_issue(ctx, config, issue, target_client)
        except ForbiddenError:
            notice = ib.app_not_installed_notice(self._provider.app_url)
            return self._reject(event, config, source_client, "no app permission", notice, target=target_repo)

        moved = self._move_comments(ctx, config, source_client, target_client)
        self._finalize(ctx, config, source_client)
        return MoveOutcome(status="moved", target=ctx.target, comments_moved=moved)

    def _ignore(self, event: IssueCommentEvent, config: Config, reason: str) -> MoveOutcome:
        _trace(
            f"ignored:{reason}",
            f"[{event.source}] Ignoring command ({reason})",
            config=config,
            source=event.source,
            user=event.comment_author,
        )
        return MoveOutcome(status="ignored", reason=reason)

    def _reject(
        self,
        event: IssueCommentEvent,
        config: Config,
        source_client: RepositoryClient,
        reason: str,
        notice: str,
        *,
        target: RepositoryRef | None = None,
    ) -> MoveOutcome:
        """Explain on the source issue why the move cannot happen."""
        _trace(
            f"rejected:{reason}",
            f"[{event.source}] Commenting: {reason}",
            config=config,
            source=event.source,
            user=event.comment_author,
            target=target,
            level=logging.WARNING,
        )
        if config.perform:
            source_client.create_comment(event.source, notice)
        return MoveOutcome(
            status="rejected",
            reason=reason,
            target=IssueRef(target.owner, target.repo) if target is not None else None,
        )

    def _create_issue(
        self,
        ctx: MigrationContext,
        config: Config,
        issue: IssueData,
        target_client: RepositoryClient,
    ) -> MigrationContext:
        """Create the destination issue and return the context with its number."""
        body = ib.build_issue_body(
            author=issue.author,
            created_at=issue.created_at,
            markdown=html_to_markdown(
                issue.body_html,
                keep_content_mentions=config.keep_content_mentions,
                same_owner=ctx.same_owner,
            ),
            mover=ctx.cmd_user,
            source=ctx.source,
            mention_authors=config.mention_authors,
        )

        _trace_ctx(ctx, config, "moving", f"[{ctx.source}] Moving to {ctx.target}")
        number: int | None = None
        if config.perform:
            number = target_client.create_issue(
                ctx.target.repository, issue.title, body, sorted(ctx.common_labels)
            )
        ctx = dataclasses.replace(ctx, target=dataclasses.replace(ctx.target, number=number))
        _trace_ctx(ctx, config, "created", f"[{ctx.source}] Created {ctx.target}")
        return ctx

    def _move_comments(
        self,
        ctx: MigrationContext,
        config: Config,
        source_client: RepositoryClient,
        target_client: RepositoryClient,
    ) -> int:
        """Replicate the source comments, one at a time and in order."""
        moved = 0
        for comment in source_client.iter_comments(ctx.source, per_page=self._page_size):
            if comment.id == ctx.cmd_comment_id and not ctx.is_cmd_comment_content:
                continue

            comment_url = f"{ctx.source}#issuecomment-{comment.id}"
            _trace_ctx(ctx, config, "comment moving", f"[{comment_url}] Moving to {ctx.target}")
            body = ib.build_comment_body(
                author=comment.author,
                created_at=comment.created_at,
                markdown=html_to_markdown(
                    comment.body_html,
                    keep_content_mentions=config.keep_content_mentions,
                    same_owner=ctx.same_owner,
                ),
                mention_authors=config.mention_authors,
            )
            created = ""
            if config.perform:
                created = f"#issuecomment-{target_client.create_comment(ctx.target, body)}"
            _trace_ctx(ctx, config, "comment created", f"[{comment_url}] Created {ctx.target}{created}")
            moved += 1

        logger.debug(f"[{ctx.source}] Replicated {moved} comments to {ctx.target}")
        return moved

    def _finalize(self, ctx: MigrationContext, config: Config, source_client: RepositoryClient) -> None:
        """Clean up the source issue after a successful move."""
        # Locked issues accept neither comments nor deletions
        if not ctx.issue_locked:
            if config.delete_command and not ctx.is_cmd_comment_content:
                _trace_ctx(
                    ctx, config, "deleting command", f"[{ctx.source}#issuecomment-{ctx.cmd_comment_id}] Deleting"
                )
                if config.perform:
                    try:
                        source_client.delete_comment(ctx.source.repository, ctx.cmd_comment_id)
                    except (ForbiddenError, NotFoundError) as e:
                        logger.info(f"[{ctx.source}] Command comment not deleted: {e}")

            _trace_ctx(ctx, config, "completed", f"[{ctx.source}] Commenting: move completed")
            if config.perform:
                try:
                    source_client.create_comment(ctx.source, ib.completion_notice(ctx.cmd_user, ctx.target))
                except ForbiddenError as e:
                    logger.info(f"[{ctx.source}] Completion notice not posted: {e}")

        if config.close_source_issue and ctx.issue_open:
            _trace_ctx(ctx, config, "closing", f"[{ctx.source}] Closing")
            if config.perform:
                source_client.close_issue(ctx.source)

        if config.lock_source_issue and not ctx.issue_locked:
            _trace_ctx(ctx, config, "locking", f"[{ctx.source}] Locking")
            if config.perform:
                source_client.lock_issue(ctx.source)
