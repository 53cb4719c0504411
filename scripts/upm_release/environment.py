"""Environment helpers and the ambient GitHub Actions context."""

from __future__ import annotations

import dataclasses
import json
import os
import typing as typ
from pathlib import Path

from .errors import ConfigurationError

__all__ = ["ReleaseContext", "require_env", "require_env_path"]


def require_env(name: str, environ: typ.Mapping[str, str] | None = None) -> str:
    """Return the value of ``name`` or raise :class:`ConfigurationError`.

    Parameters
    ----------
    name:
        Name of the environment variable to fetch.
    environ:
        Mapping to read from. Defaults to :data:`os.environ`.

    Raises
    ------
    ConfigurationError
        Raised when the environment variable is unset or empty.
    """
    source = os.environ if environ is None else environ
    value = source.get(name)
    if not value:
        message = f"Environment variable '{name}' is not set."
        raise ConfigurationError(message)
    return value


def require_env_path(
    name: str, environ: typ.Mapping[str, str] | None = None
) -> Path:
    """Return ``Path`` value for ``name`` or raise :class:`ConfigurationError`."""
    return Path(require_env(name, environ))


def _event_sender(event_path: str | None) -> str | None:
    """Return ``sender.login`` from the workflow event payload, if present."""
    if not event_path:
        return None
    try:
        payload = json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None
    if not isinstance(payload, dict):
        return None
    sender = payload.get("sender")
    if not isinstance(sender, dict):
        return None
    login = sender.get("login")
    return login if isinstance(login, str) and login else None


@dataclasses.dataclass(frozen=True, slots=True)
class ReleaseContext:
    """Ambient values provided by the GitHub Actions runner.

    Each component is handed only the attributes it needs: the commitish
    resolver reads :attr:`workspace` and :attr:`sha`, the changelog composer
    reads :attr:`repository` and the actor fields, the packager reads
    :attr:`output_dir`, and the publisher reads :attr:`token` and
    :attr:`repository`.

    Attributes
    ----------
    token : str
        Token used for GitHub API calls.
    workspace : Path
        Checkout root (``GITHUB_WORKSPACE``).
    repository : str
        ``owner/repo`` slug (``GITHUB_REPOSITORY``).
    output_dir : Path
        Scratch directory for the packaging step (``RUNNER_TEMP``).
    sha : str | None
        Commit that triggered the workflow (``GITHUB_SHA``).
    actor : str | None
        Account that triggered the workflow (``GITHUB_ACTOR``).
    event_actor : str | None
        ``sender.login`` from the event payload at ``GITHUB_EVENT_PATH``.
    """

    token: str
    workspace: Path
    repository: str
    output_dir: Path
    sha: str | None = None
    actor: str | None = None
    event_actor: str | None = None

    @classmethod
    def from_environ(
        cls,
        token: str | None = None,
        environ: typ.Mapping[str, str] | None = None,
    ) -> ReleaseContext:
        """Build the context from ``environ`` (defaults to :data:`os.environ`).

        ``token`` is the explicit ``github-token`` input; ``GITHUB_TOKEN`` is
        used when it is blank.
        """
        source = os.environ if environ is None else environ
        resolved_token = token or source.get("GITHUB_TOKEN")
        if not resolved_token:
            message = (
                "GitHub token is required to create a release. Please ensure "
                "your workflow enables permissions for GITHUB_TOKEN or pass a "
                "personal access token."
            )
            raise ConfigurationError(message)
        repository = require_env("GITHUB_REPOSITORY", source)
        if repository.count("/") != 1:
            message = f"GITHUB_REPOSITORY must be 'owner/repo', got '{repository}'"
            raise ConfigurationError(message)
        return cls(
            token=resolved_token,
            workspace=require_env_path("GITHUB_WORKSPACE", source),
            repository=repository,
            output_dir=require_env_path("RUNNER_TEMP", source),
            sha=source.get("GITHUB_SHA") or None,
            actor=source.get("GITHUB_ACTOR") or None,
            event_actor=_event_sender(source.get("GITHUB_EVENT_PATH")),
        )
