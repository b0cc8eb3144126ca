"""Custom exception types raised while scaffolding a project."""

from __future__ import annotations


class ScaffoldError(RuntimeError):
    """Base class for failures that abort the scaffolding run."""

    def __init__(self, message: str, *, reported: bool = False) -> None:
        super().__init__(message)
        self.reported = reported


class AbortedError(ScaffoldError):
    """Raised when the user cancels a prompt or declines an overwrite."""


class FetchError(ScaffoldError):
    """Raised when a template snapshot cannot be downloaded or extracted."""

    def __init__(self, message: str, *, spec: str, reported: bool = False) -> None:
        super().__init__(message, reported=reported)
        self.spec = spec


class InstallError(ScaffoldError):
    """Raised when the package manager fails to install dependencies."""


__all__ = ["AbortedError", "FetchError", "InstallError", "ScaffoldError"]
