"""Data models exchanged between the pipeline, the remote clients and the harness.

All models are immutable. A run never mutates a model in place; when the
destination issue number becomes known, a new ``IssueRef`` (and a new
``MigrationContext``) is derived with ``dataclasses.replace``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

# GitHub-imposed name lengths
MAX_OWNER_LENGTH = 39
MAX_REPO_LENGTH = 100


@dataclass(frozen=True)
class RepositoryRef:
    """A repository, identified by owner login and repository name."""

    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def repository(self) -> RepositoryRef:
        return RepositoryRef(self.owner, self.repo)

    def same_repository(self, other: RepositoryRef) -> bool:
        """Compare owner and name the way GitHub does (case-insensitively)."""
        return self.owner.lower() == other.owner.lower() and self.repo.lower() == other.repo.lower()

    def same_owner(self, other: RepositoryRef) -> bool:
        return self.owner.lower() == other.owner.lower()

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True)
class IssueRef(RepositoryRef):
    """An issue. ``number`` is None while the issue does not exist yet (dry run)."""

    number: int | None = None

    def __str__(self) -> str:
        if self.number is None:
            return self.full_name
        return f"{self.full_name}#{self.number}"


@dataclass(frozen=True)
class Command:
    """Raw text following the trigger token."""

    arguments: str = ""


@dataclass(frozen=True)
class IssueCommentEvent:
    """A comment carrying a move command, as delivered by the harness.

    ``issue_state`` and ``issue_locked`` are the issue state captured when the
    comment was posted; the pipeline does not re-fetch them.
    """

    source: IssueRef
    comment_id: int
    comment_body: str
    comment_author: str
    author_is_bot: bool = False
    issue_state: Literal["open", "closed"] = "open"
    issue_locked: bool = False
    is_pull_request: bool = False


@dataclass(frozen=True)
class RepositoryInfo:
    """Repository metadata relevant to eligibility and permission checks."""

    full_name: str
    private: bool
    has_issues: bool
    archived: bool


@dataclass(frozen=True)
class IssueData:
    """A source issue with its server-rendered HTML body."""

    title: str
    body_html: str
    author: str
    created_at: datetime
    labels: tuple[str, ...] = ()
    state: Literal["open", "closed"] = "open"
    locked: bool = False
    pull_request: bool = False


@dataclass(frozen=True)
class CommentData:
    """An issue comment with its server-rendered HTML body and raw Markdown."""

    id: int
    body_html: str
    author: str
    created_at: datetime
    body: str = ""


@dataclass(frozen=True)
class MigrationContext:
    """Working state of one move, threaded through every pipeline stage."""

    source: IssueRef
    target: IssueRef
    cmd_user: str
    cmd_comment_id: int
    is_cmd_comment_content: bool
    same_owner: bool
    issue_open: bool
    issue_locked: bool
    common_labels: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class MoveOutcome:
    """Result of one move run."""

    status: Literal["moved", "rejected", "ignored"]
    reason: str = ""
    target: IssueRef | None = None
    comments_moved: int = 0

    @property
    def moved(self) -> bool:
        return self.status == "moved"
