"""
Issue Mover

Moves GitHub issues, with their comments, to another repository when a
maintainer comments ``/move [to ][<owner>/]<repo>`` on them.
"""

from __future__ import annotations

from .cli import main
from .config import Config, load_config
from .exceptions import MoveError
from .markdown import html_to_markdown
from .mover import IssueMover
from .utils import setup_logging

# Package version
__version__ = "0.1.0"

__all__ = [
    "Config",
    "IssueMover",
    "MoveError",
    "html_to_markdown",
    "load_config",
    "main",
    "setup_logging",
]
