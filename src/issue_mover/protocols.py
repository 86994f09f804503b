"""Protocols defining the contracts between the move pipeline and the remote side.

The pipeline never talks to PyGithub directly. It works against two small
interfaces:

1. RepositoryClient: the operations a move needs, scoped to one installation
   (one owner's repositories)
2. ClientProvider: hands out the RepositoryClient authorized for a target
   repository, resolving the app installation when needed

This separation allows:
- Testing the whole pipeline with in-memory fakes
- Swapping the transport without touching pipeline logic
- Keeping all status-code handling inside the adapter (github_utils.py)

Error contract:
    Implementations raise the kinds from exceptions.py, never transport
    exceptions. NotFoundError for 404/410, ForbiddenError for 403 and
    RemoteError for anything else.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .models import CommentData, IssueData, IssueRef, RepositoryInfo, RepositoryRef


class RepositoryClient(Protocol):
    """Operations available to an authenticated installation.

    Read operations are always allowed, including during a dry run. The
    pipeline only calls the write operations (create_*, delete_*, close_*,
    lock_*) when the configuration says to perform the move.
    """

    def get_repository(self, repo: RepositoryRef) -> RepositoryInfo:
        """Return repository metadata.

        Raises:
            NotFoundError: If the repository does not exist or is not visible
        """
        ...

    def get_permission(self, repo: RepositoryRef, username: str) -> str:
        """Return the user's permission level: admin, write, read or none."""
        ...

    def get_issue(self, issue: IssueRef) -> IssueData:
        """Return the issue with its HTML-rendered body."""
        ...

    def iter_comments(self, issue: IssueRef, per_page: int = 100) -> Iterator[CommentData]:
        """Yield all comments of an issue in creation order.

        Pages are requested lazily as the caller iterates. Calling again
        starts over from the first page.
        """
        ...

    def get_comment(self, repo: RepositoryRef, comment_id: int) -> CommentData:
        """Return a single issue comment."""
        ...

    def get_label_names(self, repo: RepositoryRef) -> list[str]:
        """Return the names of all labels defined in the repository."""
        ...

    def get_file_text(self, repo: RepositoryRef, path: str) -> str | None:
        """Return a file from the default branch, or None if it does not exist."""
        ...

    def create_issue(self, repo: RepositoryRef, title: str, body: str, labels: list[str]) -> int:
        """Create an issue and return its number."""
        ...

    def create_comment(self, issue: IssueRef, body: str) -> int:
        """Create a comment on an issue and return the comment id."""
        ...

    def delete_comment(self, repo: RepositoryRef, comment_id: int) -> None:
        """Delete an issue comment."""
        ...

    def close_issue(self, issue: IssueRef) -> None:
        """Close an issue."""
        ...

    def lock_issue(self, issue: IssueRef) -> None:
        """Lock an issue's conversation."""
        ...


class ClientProvider(Protocol):
    """Resolves clients for repositories outside the source installation."""

    @property
    def app_url(self) -> str:
        """Public listing page of the app (e.g. https://github.com/apps/move)."""
        ...

    def client_for(self, repo: RepositoryRef) -> RepositoryClient:
        """Return a client authorized for the repository's installation.

        Raises:
            AppNotInstalledError: If no installation of the app covers the repository
            RemoteError: For any other failure
        """
        ...
