"""PyGithub implementation of the RepositoryClient protocol.

All GitHub status handling lives here. Past this module the pipeline only
sees the error kinds from exceptions.py.
"""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Final

from github import Github, GithubException, UnknownObjectException

from .exceptions import ForbiddenError, NotFoundError, RemoteError
from .models import CommentData, IssueData, RepositoryInfo

if TYPE_CHECKING:
    from github.Auth import Auth
    from github.Repository import Repository

    from .models import IssueRef, RepositoryRef

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)

# Asks the REST API for raw and server-rendered bodies (body, body_html)
FULL_MEDIA_TYPE: Final[str] = "application/vnd.github.full+json"
PAGE_SIZE: Final[int] = 100


def get_client(auth: Auth | None = None) -> Github:
    """Get a GitHub client using the given authentication."""
    return Github(auth=auth)


@contextmanager
def remote_call(action: str) -> Iterator[None]:
    """Translate PyGithub exceptions raised inside the block into error kinds."""
    try:
        yield
    except UnknownObjectException as e:
        msg = f"{action}: not found"
        raise NotFoundError(msg) from e
    except GithubException as e:
        if e.status == 403:
            msg = f"{action}: forbidden ({e.data})"
            raise ForbiddenError(msg) from e
        if e.status in (404, 410):
            msg = f"{action}: not found"
            raise NotFoundError(msg) from e
        msg = f"{action} failed: {e}"
        raise RemoteError(msg) from e


def _parse_timestamp(value: str) -> dt.datetime:
    return dt.datetime.fromisoformat(value.replace("Z", "+00:00"))


def _login(data: dict[str, Any]) -> str:
    user = data.get("user") or {}
    return user.get("login") or "ghost"


def _comment(data: dict[str, Any]) -> CommentData:
    return CommentData(
        id=data["id"],
        body_html=data.get("body_html") or "",
        author=_login(data),
        created_at=_parse_timestamp(data["created_at"]),
        body=data.get("body") or "",
    )


class GithubRepositoryClient:
    """RepositoryClient backed by a PyGithub ``Github`` instance.

    Issue and comment reads go through the requester directly so they can ask
    for rendered bodies, which PyGithub's ``Issue`` objects do not expose.
    """

    _github: Github

    def __init__(self, github: Github) -> None:
        self._github = github

    def _repo(self, repo: RepositoryRef) -> Repository:
        return self._github.get_repo(repo.full_name, lazy=True)

    def _request(
        self,
        verb: str,
        url: str,
        *,
        parameters: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> Any:  # noqa: ANN401 - JSON payload
        _, data = self._github.requester.requestJsonAndCheck(
            verb, url, parameters=parameters, headers=headers, input=payload
        )
        return data

    def get_repository(self, repo: RepositoryRef) -> RepositoryInfo:
        with remote_call(f"Get repository {repo}"):
            github_repo = self._github.get_repo(repo.full_name)
            return RepositoryInfo(
                full_name=github_repo.full_name,
                private=github_repo.private,
                has_issues=github_repo.has_issues,
                archived=github_repo.archived,
            )

    def get_permission(self, repo: RepositoryRef, username: str) -> str:
        with remote_call(f"Get permission of {username} on {repo}"):
            return self._repo(repo).get_collaborator_permission(username)

    def get_issue(self, issue: IssueRef) -> IssueData:
        with remote_call(f"Get issue {issue}"):
            data = self._request(
                "GET",
                f"/repos/{issue.full_name}/issues/{issue.number}",
                headers={"Accept": FULL_MEDIA_TYPE},
            )
        return IssueData(
            title=data["title"],
            body_html=data.get("body_html") or "",
            author=_login(data),
            created_at=_parse_timestamp(data["created_at"]),
            labels=tuple(label["name"] for label in data.get("labels") or []),
            state=data.get("state", "open"),
            locked=bool(data.get("locked")),
            pull_request="pull_request" in data,
        )

    def iter_comments(self, issue: IssueRef, per_page: int = PAGE_SIZE) -> Iterator[CommentData]:
        page = 1
        while True:
            with remote_call(f"List comments of {issue} (page {page})"):
                data = self._request(
                    "GET",
                    f"/repos/{issue.full_name}/issues/{issue.number}/comments",
                    parameters={"per_page": per_page, "page": page},
                    headers={"Accept": FULL_MEDIA_TYPE},
                )
            logger.debug(f"Fetched {len(data)} comments of {issue} (page {page})")
            for comment in data:
                yield _comment(comment)
            if len(data) < per_page:
                return
            page += 1

    def get_comment(self, repo: RepositoryRef, comment_id: int) -> CommentData:
        with remote_call(f"Get comment {comment_id} in {repo}"):
            data = self._request(
                "GET",
                f"/repos/{repo.full_name}/issues/comments/{comment_id}",
                headers={"Accept": FULL_MEDIA_TYPE},
            )
        return _comment(data)

    def get_label_names(self, repo: RepositoryRef) -> list[str]:
        with remote_call(f"List labels of {repo}"):
            return [label.name for label in self._repo(repo).get_labels()]

    def get_file_text(self, repo: RepositoryRef, path: str) -> str | None:
        try:
            with remote_call(f"Get {path} from {repo}"):
                contents = self._repo(repo).get_contents(path)
        except NotFoundError:
            return None
        if isinstance(contents, list):
            msg = f"{path} in {repo} is a directory"
            raise RemoteError(msg)
        return contents.decoded_content.decode("utf-8")

    def create_issue(self, repo: RepositoryRef, title: str, body: str, labels: list[str]) -> int:
        with remote_call(f"Create issue in {repo}"):
            return self._repo(repo).create_issue(title=title, body=body, labels=labels).number

    def create_comment(self, issue: IssueRef, body: str) -> int:
        with remote_call(f"Comment on {issue}"):
            data = self._request(
                "POST", f"/repos/{issue.full_name}/issues/{issue.number}/comments", payload={"body": body}
            )
        return data["id"]

    def delete_comment(self, repo: RepositoryRef, comment_id: int) -> None:
        with remote_call(f"Delete comment {comment_id} in {repo}"):
            self._request("DELETE", f"/repos/{repo.full_name}/issues/comments/{comment_id}")

    def close_issue(self, issue: IssueRef) -> None:
        with remote_call(f"Close {issue}"):
            self._request("PATCH", f"/repos/{issue.full_name}/issues/{issue.number}", payload={"state": "closed"})

    def lock_issue(self, issue: IssueRef) -> None:
        with remote_call(f"Lock {issue}"):
            self._request("PUT", f"/repos/{issue.full_name}/issues/{issue.number}/lock")
