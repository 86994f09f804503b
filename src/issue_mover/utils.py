"""
Utility functions for the issue mover.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Final

from .exceptions import ConfigError

if TYPE_CHECKING:
    from collections.abc import Mapping

APP_ID_ENV_VAR: Final[str] = "GITHUB_APP_ID"
PRIVATE_KEY_ENV_VAR: Final[str] = "GITHUB_APP_PRIVATE_KEY"
PRIVATE_KEY_PATH_ENV_VAR: Final[str] = "GITHUB_APP_PRIVATE_KEY_PATH"


def setup_logging(*, verbose: bool = False, log_file: str | None = None) -> None:
    """Configure logging for the move process."""
    level = logging.DEBUG if verbose else logging.INFO
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="a"))
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def get_app_credentials(env: Mapping[str, str] | None = None) -> tuple[str, str]:
    """Read the GitHub App id and private key from the environment.

    The key is taken from GITHUB_APP_PRIVATE_KEY, or read from the file named
    by GITHUB_APP_PRIVATE_KEY_PATH.

    Raises:
        ConfigError: If the id or the key is missing
    """
    env = os.environ if env is None else env

    app_id = env.get(APP_ID_ENV_VAR, "").strip()
    if not app_id:
        msg = f"Environment variable {APP_ID_ENV_VAR} is not set"
        raise ConfigError(msg)

    private_key = env.get(PRIVATE_KEY_ENV_VAR, "")
    if not private_key:
        key_path = env.get(PRIVATE_KEY_PATH_ENV_VAR, "")
        if not key_path:
            msg = f"Set {PRIVATE_KEY_ENV_VAR} or {PRIVATE_KEY_PATH_ENV_VAR}"
            raise ConfigError(msg)
        try:
            private_key = Path(key_path).read_text()
        except OSError as e:
            msg = f"Cannot read private key from {key_path}: {e}"
            raise ConfigError(msg) from e

    return app_id, private_key
