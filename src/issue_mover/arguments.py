"""Resolve the free-text command argument into a target repository."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from .exceptions import ValidationError
from .models import MAX_OWNER_LENGTH, MAX_REPO_LENGTH, RepositoryRef

if TYPE_CHECKING:
    from collections.abc import Mapping

logger: logging.Logger = logging.getLogger(__name__)

USAGE = "/move [to ][<owner>/]<repo>"

_TO_PREFIX = re.compile(r"^\s*to (.*)$", re.IGNORECASE | re.DOTALL)


def strip_to_prefix(arguments: str) -> str:
    """Remove a leading "to " (any case) and surrounding whitespace."""
    return _TO_PREFIX.sub(r"\1", arguments).strip()


def resolve_target(arguments: str, source: RepositoryRef, aliases: Mapping[str, str] | None = None) -> RepositoryRef:
    """Turn command arguments into the target repository.

    Accepted forms are ``[to ]<owner>/<repo>`` and ``[to ]<repo>``; the owner
    defaults to the source owner. An alias replaces the argument only when it
    matches the whole (trimmed) argument.

    Args:
        arguments: Text following the command token
        source: The source repository
        aliases: Alias text -> target repository

    Returns:
        The target repository reference

    Raises:
        ValidationError: If the arguments do not describe a valid repository
    """
    args = strip_to_prefix(arguments)
    aliases = aliases or {}
    if args in aliases:
        logger.debug(f"Alias '{args}' resolves to '{aliases[args].strip()}'")
        args = aliases[args].strip()

    owner, sep, repo = args.partition("/")
    if not sep:
        owner, repo = source.owner, owner
    owner = owner.strip()
    repo = repo.strip()

    if not repo or "/" in repo:
        msg = f"Invalid repository name in arguments: {arguments!r}"
        raise ValidationError(msg)
    if not owner:
        msg = f"Invalid repository owner in arguments: {arguments!r}"
        raise ValidationError(msg)
    if len(owner) > MAX_OWNER_LENGTH:
        msg = f"Repository owner must be at most {MAX_OWNER_LENGTH} characters: {owner!r}"
        raise ValidationError(msg)
    if len(repo) > MAX_REPO_LENGTH:
        msg = f"Repository name must be at most {MAX_REPO_LENGTH} characters: {repo!r}"
        raise ValidationError(msg)

    return RepositoryRef(owner=owner, repo=repo)
