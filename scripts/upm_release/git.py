"""Version-control accessor built on :mod:`plumbum`.

Every git invocation in the release flow goes through :meth:`Git.run`, which
captures standard output and standard error separately and turns a non-zero
exit status into :class:`~upm_release.errors.CommandError`. Calls mutate the
single checked-out working tree, so they must be issued one at a time.

Examples
--------
>>> git = Git(Path("."))  # doctest: +SKIP
>>> rev_parse(git, "HEAD")  # doctest: +SKIP
'3f1c2d...'
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

from plumbum import local
from plumbum.commands import CommandNotFound

from . import workflow_commands
from .errors import CommandError, ConfigurationError

if typ.TYPE_CHECKING:
    from plumbum.commands.base import BaseCommand

__all__ = [
    "BOT_EMAIL",
    "BOT_NAME",
    "Git",
    "GitRunner",
    "commit_message",
    "configure_identity",
    "fetch_tags",
    "rev_parse",
]

BOT_NAME = "github-actions[bot]"
BOT_EMAIL = "github-actions[bot]@users.noreply.github.com"


class GitRunner(typ.Protocol):
    """Anything able to run a git subcommand and return its stdout."""

    def run(self, *args: str, warn_on_error: bool = False) -> str: ...


class Git:
    """Run git subcommands against the repository at ``cwd``.

    Parameters
    ----------
    cwd : Path, optional
        Working tree passed to ``git -C``. Defaults to the process working
        directory.
    command : BaseCommand, optional
        Pre-bound plumbum command used instead of ``local["git"]``.
    """

    def __init__(
        self, cwd: Path | None = None, *, command: BaseCommand | None = None
    ) -> None:
        if command is None:
            try:
                command = local["git"]
            except CommandNotFound as exc:
                message = "git executable not found on PATH"
                raise ConfigurationError(message) from exc
        self.cwd = cwd
        self._command = command

    def run(self, *args: str, warn_on_error: bool = False) -> str:
        """Run ``git <args>`` and return its standard output.

        Parameters
        ----------
        *args : str
            Subcommand and arguments.
        warn_on_error : bool, default=False
            Surface standard error from a successful command as a workflow
            warning instead of discarding it.

        Returns
        -------
        str
            Captured standard output, untrimmed.

        Raises
        ------
        CommandError
            If git exits with a non-zero status. The error carries the
            captured standard error.
        """
        argv = [*self._cwd_args(), *args]
        retcode, stdout, stderr = self._command.run(argv, retcode=None)
        if retcode != 0:
            raise CommandError(stderr, command=" ".join(["git", *args]))
        if stderr and warn_on_error:
            workflow_commands.warning(stderr.strip(), title=f"git {args[0]}")
        return stdout

    def _cwd_args(self) -> list[str]:
        return ["-C", str(self.cwd)] if self.cwd is not None else []


def configure_identity(git: GitRunner) -> None:
    """Configure the bot identity used for commits made by the run."""
    git.run("config", "user.name", BOT_NAME)
    git.run("config", "user.email", BOT_EMAIL)


def fetch_tags(git: GitRunner) -> None:
    """Force-refresh local tags from the remote."""
    git.run("fetch", "--tags", "--force")


def rev_parse(git: GitRunner, ref: str) -> str:
    """Return the commit hash ``ref`` resolves to."""
    return git.run("rev-parse", ref).strip()


def commit_message(git: GitRunner, commitish: str) -> str:
    """Return the full message of ``commitish``, trimmed."""
    return git.run("log", "-1", "--pretty=%B", commitish).strip()
