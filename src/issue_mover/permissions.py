"""Permission checks for the command author on source and target repositories."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from .exceptions import PermissionDeniedError

if TYPE_CHECKING:
    from .models import RepositoryInfo, RepositoryRef
    from .protocols import RepositoryClient

logger: logging.Logger = logging.getLogger(__name__)

WRITE_ROLES: Final[frozenset[str]] = frozenset({"write", "admin"})


def has_write_access(role: str | None) -> bool:
    return role in WRITE_ROLES


def require_write_access(client: RepositoryClient, repo: RepositoryRef, username: str) -> str:
    """Check that a user may write to a repository.

    Returns:
        The user's role

    Raises:
        PermissionDeniedError: If the role is neither write nor admin
    """
    role = client.get_permission(repo, username)
    logger.debug(f"{username} has '{role}' permission on {repo}")
    if not has_write_access(role):
        msg = f"{username} has '{role}' permission on {repo}, write or admin required"
        raise PermissionDeniedError(msg)
    return role


def target_check_required(
    source: RepositoryRef,
    target: RepositoryRef,
    *,
    source_private: bool,
    target_info: RepositoryInfo,
) -> bool:
    """Decide whether the target permission check must run.

    A move between two public repositories of the same owner is covered by
    the source check. Any other combination needs an explicit target check.
    """
    if not source.same_owner(target):
        return True
    return source_private or target_info.private
