"""
Repository configuration for the issue mover.

Settings are read from ``.github/move.yml`` in the source repository. Keys use
the camelCase names of the configuration file; every key is optional.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Final

import yaml

from .exceptions import ConfigError

if TYPE_CHECKING:
    from .models import RepositoryRef
    from .protocols import RepositoryClient

logger: logging.Logger = logging.getLogger(__name__)

CONFIG_PATH: Final[str] = ".github/move.yml"
DRY_RUN_ENV_VAR: Final[str] = "DRY_RUN"

# File key -> Config field
_BOOLEAN_KEYS: Final[dict[str, str]] = {
    "perform": "perform",
    "closeSourceIssue": "close_source_issue",
    "lockSourceIssue": "lock_source_issue",
    "deleteCommand": "delete_command",
    "mentionAuthors": "mention_authors",
    "keepContentMentions": "keep_content_mentions",
    "moveLabels": "move_labels",
}
_ALIASES_KEY: Final[str] = "aliases"


def default_perform(env: Mapping[str, str] | None = None) -> bool:
    """Moves are performed unless the DRY_RUN environment variable is set."""
    env = os.environ if env is None else env
    return not env.get(DRY_RUN_ENV_VAR)


@dataclass(frozen=True)
class Config:
    """Effective settings for one move. ``perform=False`` is a dry run."""

    perform: bool = field(default_factory=default_perform)
    close_source_issue: bool = True
    lock_source_issue: bool = False
    delete_command: bool = True
    mention_authors: bool = True
    keep_content_mentions: bool = False
    move_labels: bool = True
    aliases: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None, *, env: Mapping[str, str] | None = None) -> Config:
        """Validate a parsed configuration file.

        Raises:
            ConfigError: On unknown keys or wrongly typed values
        """
        data = data or {}
        if not isinstance(data, Mapping):
            msg = f"Configuration must be a mapping, got {type(data).__name__}"
            raise ConfigError(msg)

        unknown = sorted(set(data) - set(_BOOLEAN_KEYS) - {_ALIASES_KEY})
        if unknown:
            msg = f"Unknown configuration keys: {', '.join(map(str, unknown))}"
            raise ConfigError(msg)

        values: dict[str, Any] = {"perform": default_perform(env)}
        for key, attribute in _BOOLEAN_KEYS.items():
            if key not in data:
                continue
            if not isinstance(data[key], bool):
                msg = f"Configuration key '{key}' must be a boolean, got {data[key]!r}"
                raise ConfigError(msg)
            values[attribute] = data[key]

        values["aliases"] = MappingProxyType(_parse_aliases(data.get(_ALIASES_KEY)))
        return cls(**values)


def _parse_aliases(raw: Any) -> dict[str, str]:  # noqa: ANN401 - raw YAML value
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        msg = f"Configuration key '{_ALIASES_KEY}' must be a mapping, got {raw!r}"
        raise ConfigError(msg)

    aliases: dict[str, str] = {}
    for alias, target in raw.items():
        if not isinstance(alias, str) or not alias.strip():
            msg = f"Alias names must be non-empty strings, got {alias!r}"
            raise ConfigError(msg)
        if not isinstance(target, str):
            msg = f"Alias '{alias}' must map to a string, got {target!r}"
            raise ConfigError(msg)
        aliases[alias.strip()] = target.strip()
    return aliases


def parse_config(text: str, *, env: Mapping[str, str] | None = None) -> Config:
    """Parse the YAML configuration file content."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        msg = f"Invalid YAML in {CONFIG_PATH}: {e}"
        raise ConfigError(msg) from e
    return Config.from_dict(data, env=env)


def load_config(client: RepositoryClient, repo: RepositoryRef, *, env: Mapping[str, str] | None = None) -> Config:
    """Load the configuration of a repository.

    Repositories without a configuration file get the defaults in dry-run
    mode, so the app stays silent where it was not set up.
    """
    text = client.get_file_text(repo, CONFIG_PATH)
    if text is None:
        logger.info(f"No {CONFIG_PATH} in {repo}, running in dry-run mode")
        return Config(perform=False)
    return parse_config(text, env=env)
