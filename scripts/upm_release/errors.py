"""Exceptions raised by the release helpers."""

from __future__ import annotations

__all__ = [
    "ArtifactError",
    "CommandError",
    "ConfigurationError",
    "GitHubApiError",
    "ReleaseError",
]


class ReleaseError(RuntimeError):
    """Base class for failures that abort a release run."""


class ConfigurationError(ReleaseError):
    """Raised when inputs, the manifest, or the tag state forbid a release."""


class CommandError(ReleaseError):
    """Raised when a version-control command exits with a non-zero status.

    Parameters
    ----------
    stderr : str
        Standard error captured from the failed command.
    command : str, optional
        Human readable rendering of the command, used when ``stderr`` is
        empty.
    """

    def __init__(self, stderr: str, command: str = "") -> None:
        self.stderr = stderr
        self.command = command
        message = stderr.strip() or f"Command failed: {command}"
        super().__init__(message)


class ArtifactError(ReleaseError):
    """Raised when the packaging step does not yield exactly one archive."""


class GitHubApiError(ReleaseError):
    """Raised when a GitHub API request through ``gh`` fails."""
