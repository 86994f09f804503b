"""
Pytest configuration and fixtures.

The pipeline tests run against in-memory fakes of the RepositoryClient and
ClientProvider protocols. All fake clients of one test share a call log, so
tests can assert the global order of remote calls across installations.
"""

from __future__ import annotations

import datetime as dt
import itertools
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import pytest

from issue_mover.config import Config
from issue_mover.exceptions import AppNotInstalledError, NotFoundError
from issue_mover.models import CommentData, IssueCommentEvent, IssueData, IssueRef, RepositoryInfo

if TYPE_CHECKING:
    from collections.abc import Iterator

    from issue_mover.models import RepositoryRef

CREATED_AT = dt.datetime(2024, 1, 15, 15, 7, tzinfo=dt.UTC)

WRITE_CALLS = frozenset({"create_issue", "create_comment", "delete_comment", "close_issue", "lock_issue"})


@dataclass
class FakeRepository:
    """State of one repository as seen through a fake client."""

    full_name: str
    private: bool = False
    has_issues: bool = True
    archived: bool = False
    permissions: dict[str, str] = field(default_factory=dict)
    labels: list[str] = field(default_factory=list)
    files: dict[str, str] = field(default_factory=dict)
    issues: dict[int, IssueData] = field(default_factory=dict)
    comments: dict[int, list[CommentData]] = field(default_factory=dict)


class FakeRepositoryClient:
    """In-memory RepositoryClient that records every call.

    ``errors`` maps an operation name to the exception it raises.
    """

    def __init__(self, log: list[tuple[object, ...]] | None = None) -> None:
        self.repositories: dict[str, FakeRepository] = {}
        self.log: list[tuple[object, ...]] = [] if log is None else log
        self.errors: dict[str, Exception] = {}
        self.created_issues: dict[str, list[tuple[str, str, list[str]]]] = {}
        self.created_comments: list[tuple[str, str]] = []
        self._numbers = itertools.count(100)
        self._comment_ids = itertools.count(9000)

    def add_repository(self, full_name: str, **kwargs: object) -> FakeRepository:
        repository = FakeRepository(full_name, **kwargs)  # pyright: ignore[reportArgumentType]
        self.repositories[full_name.lower()] = repository
        return repository

    def _call(self, name: str, *args: object) -> None:
        self.log.append((name, *args))
        if name in self.errors:
            raise self.errors[name]

    def _lookup(self, repo: RepositoryRef) -> FakeRepository:
        try:
            return self.repositories[repo.full_name.lower()]
        except KeyError:
            msg = f"{repo.full_name} not found"
            raise NotFoundError(msg) from None

    @property
    def writes(self) -> list[tuple[object, ...]]:
        return [entry for entry in self.log if entry[0] in WRITE_CALLS]

    def get_repository(self, repo: RepositoryRef) -> RepositoryInfo:
        self._call("get_repository", repo.full_name)
        repository = self._lookup(repo)
        return RepositoryInfo(
            full_name=repository.full_name,
            private=repository.private,
            has_issues=repository.has_issues,
            archived=repository.archived,
        )

    def get_permission(self, repo: RepositoryRef, username: str) -> str:
        self._call("get_permission", repo.full_name, username)
        return self._lookup(repo).permissions.get(username, "none")

    def get_issue(self, issue: IssueRef) -> IssueData:
        self._call("get_issue", str(issue))
        return self._lookup(issue).issues[issue.number or 0]

    def iter_comments(self, issue: IssueRef, per_page: int = 100) -> Iterator[CommentData]:
        comments = self._lookup(issue).comments.get(issue.number or 0, [])
        for page, start in enumerate(range(0, max(len(comments), 1), per_page), start=1):
            self._call("list_comments", str(issue), page)
            yield from comments[start : start + per_page]

    def get_comment(self, repo: RepositoryRef, comment_id: int) -> CommentData:
        self._call("get_comment", repo.full_name, comment_id)
        for comments in self._lookup(repo).comments.values():
            for comment in comments:
                if comment.id == comment_id:
                    return comment
        msg = f"Comment {comment_id} not found"
        raise NotFoundError(msg)

    def get_label_names(self, repo: RepositoryRef) -> list[str]:
        self._call("get_label_names", repo.full_name)
        return list(self._lookup(repo).labels)

    def get_file_text(self, repo: RepositoryRef, path: str) -> str | None:
        self._call("get_file_text", repo.full_name, path)
        return self._lookup(repo).files.get(path)

    def create_issue(self, repo: RepositoryRef, title: str, body: str, labels: list[str]) -> int:
        self._call("create_issue", repo.full_name)
        self.created_issues.setdefault(repo.full_name, []).append((title, body, labels))
        return next(self._numbers)

    def create_comment(self, issue: IssueRef, body: str) -> int:
        self._call("create_comment", str(issue))
        self.created_comments.append((str(issue), body))
        return next(self._comment_ids)

    def delete_comment(self, repo: RepositoryRef, comment_id: int) -> None:
        self._call("delete_comment", repo.full_name, comment_id)

    def close_issue(self, issue: IssueRef) -> None:
        self._call("close_issue", str(issue))

    def lock_issue(self, issue: IssueRef) -> None:
        self._call("lock_issue", str(issue))


class FakeProvider:
    """ClientProvider handing out fake clients by owner."""

    def __init__(self, clients: dict[str, FakeRepositoryClient] | None = None) -> None:
        self.clients: dict[str, FakeRepositoryClient] = {
            owner.lower(): client for owner, client in (clients or {}).items()
        }
        self.lookups: list[str] = []

    @property
    def app_url(self) -> str:
        return "https://github.com/apps/move"

    def client_for(self, repo: RepositoryRef) -> FakeRepositoryClient:
        self.lookups.append(repo.full_name)
        try:
            return self.clients[repo.owner.lower()]
        except KeyError:
            msg = f"The app is not installed for {repo.full_name}"
            raise AppNotInstalledError(msg) from None


def make_issue(**kwargs: object) -> IssueData:
    values: dict[str, object] = {
        "title": "Crash on startup",
        "body_html": "<p>It <strong>crashes</strong>.</p>",
        "author": "alice",
        "created_at": CREATED_AT,
    }
    values.update(kwargs)
    return IssueData(**values)  # pyright: ignore[reportArgumentType]


def make_comment(comment_id: int, body_html: str, author: str = "bob", body: str = "") -> CommentData:
    return CommentData(id=comment_id, body_html=body_html, author=author, created_at=CREATED_AT, body=body)


def make_event(body: str = "/move to repo2", **kwargs: object) -> IssueCommentEvent:
    values: dict[str, object] = {
        "source": IssueRef("octo", "repo1", 1),
        "comment_id": 500,
        "comment_body": body,
        "comment_author": "mover",
    }
    values.update(kwargs)
    return IssueCommentEvent(**values)  # pyright: ignore[reportArgumentType]


@pytest.fixture
def call_log() -> list[tuple[object, ...]]:
    return []


@pytest.fixture
def source_client(call_log: list[tuple[object, ...]]) -> FakeRepositoryClient:
    """Installation of the "octo" owner with repo1 (source) and repo2."""
    client = FakeRepositoryClient(call_log)
    client.add_repository(
        "octo/repo1",
        permissions={"mover": "write"},
        labels=["bug", "Needs-Triage"],
        issues={1: make_issue(labels=("bug", "needs-triage", "wontfix"))},
        comments={
            1: [
                make_comment(11, "<p>First</p>"),
                make_comment(12, "<p>Second</p>", author="dependabot[bot]"),
                make_comment(500, "<p>/move to repo2</p>", author="mover", body="/move to repo2"),
            ]
        },
    )
    client.add_repository("octo/repo2", permissions={"mover": "write"}, labels=["bug", "needs-triage"])
    return client


@pytest.fixture
def other_client(call_log: list[tuple[object, ...]]) -> FakeRepositoryClient:
    """Installation of the "acme" owner with a private repository."""
    client = FakeRepositoryClient(call_log)
    client.add_repository("acme/tracker", private=True, permissions={"mover": "admin"}, labels=["bug"])
    return client


@pytest.fixture
def provider(source_client: FakeRepositoryClient, other_client: FakeRepositoryClient) -> FakeProvider:
    return FakeProvider({"octo": source_client, "acme": other_client})


@pytest.fixture
def config() -> Config:
    return Config(perform=True)
