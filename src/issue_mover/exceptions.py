"""
Custom exception classes for the issue mover.
"""

from __future__ import annotations


class MoveError(Exception):
    """Base exception for move errors."""


class ConfigError(MoveError):
    """Raised when the repository configuration is invalid."""


class ValidationError(MoveError):
    """Raised when the command arguments do not name a valid target."""


class PermissionDeniedError(MoveError):
    """Raised when the command author lacks write access to a repository."""


class NotFoundError(MoveError):
    """Raised when a remote resource does not exist or is not visible."""


class AppNotInstalledError(NotFoundError):
    """Raised when the app has no installation covering the target repository."""


class IneligibleTargetError(MoveError):
    """Raised when the target repository has issues disabled or is archived."""


class ForbiddenError(MoveError):
    """Raised when the remote side refuses a request (e.g. the issue is locked)."""


class RemoteError(MoveError):
    """Raised for any other remote failure. Never handled by the pipeline."""
