"""Resolve the installation (and client) authorized for a repository."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from github import Auth, GithubIntegration

from .exceptions import AppNotInstalledError, NotFoundError
from .github_utils import GithubRepositoryClient, remote_call

if TYPE_CHECKING:
    from .models import RepositoryRef
    from .protocols import ClientProvider, RepositoryClient

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)


class AppInstallationProvider:
    """ClientProvider backed by a GitHub App.

    Each call to ``client_for`` looks up the installation covering the
    repository and derives a client scoped to that installation. Nothing is
    cached between calls, so concurrent moves never share tokens.
    """

    _integration: GithubIntegration
    _app_url: str | None

    def __init__(self, integration: GithubIntegration, *, app_url: str | None = None) -> None:
        self._integration = integration
        self._app_url = app_url

    @classmethod
    def from_credentials(cls, app_id: int | str, private_key: str) -> AppInstallationProvider:
        return cls(GithubIntegration(auth=Auth.AppAuth(app_id, private_key)))

    @property
    def app_url(self) -> str:
        if self._app_url is None:
            with remote_call("Get app"):
                self._app_url = self._integration.get_app().html_url
        return self._app_url

    def client_for(self, repo: RepositoryRef) -> RepositoryClient:
        try:
            with remote_call(f"Get installation for {repo}"):
                installation = self._integration.get_repo_installation(repo.owner, repo.repo)
        except NotFoundError as e:
            msg = f"The app is not installed for {repo}"
            raise AppNotInstalledError(msg) from e

        logger.debug(f"Using installation {installation.id} for {repo}")
        with remote_call(f"Authenticate installation {installation.id}"):
            github = self._integration.get_github_for_installation(installation.id)
        return GithubRepositoryClient(github)


def resolve_target_client(
    provider: ClientProvider,
    source_client: RepositoryClient,
    source: RepositoryRef,
    target: RepositoryRef,
) -> RepositoryClient:
    """Return the client to use for the target repository.

    Repositories of the same owner share one installation, so the source
    client is reused without a lookup.

    Raises:
        AppNotInstalledError: If the app is not installed for the target
    """
    if source.same_owner(target):
        return source_client
    logger.debug(f"Resolving installation for {target}")
    return provider.client_for(target)
