"""Invoke the Unity editor to pack and sign the package.

The editor is an opaque collaborator: it receives the package directory, an
output directory, batch-mode flags and the Unity account credentials, and is
expected to leave exactly one ``.tgz`` archive in the output directory.
"""

from __future__ import annotations

import dataclasses
import typing as typ
from pathlib import Path

from plumbum import local
from plumbum.commands import CommandNotFound

from . import workflow_commands
from .errors import ArtifactError, ConfigurationError

if typ.TYPE_CHECKING:
    from plumbum.commands.base import BaseCommand

__all__ = [
    "BATCH_FLAGS",
    "PackagingCredentials",
    "UnityPackager",
    "find_signed_archive",
]

BATCH_FLAGS = ("-batchmode", "-nographics", "-quit", "-logFile", "-")


@dataclasses.dataclass(frozen=True, slots=True)
class PackagingCredentials:
    """Unity account used to sign the package."""

    username: str
    password: str = dataclasses.field(repr=False)
    organization_id: str


def find_signed_archive(output_dir: Path) -> Path:
    """Return the single ``.tgz`` archive in ``output_dir``.

    Raises
    ------
    ArtifactError
        If the directory holds no archive or more than one.
    """
    archives = sorted(path for path in output_dir.glob("*.tgz") if path.is_file())
    if not archives:
        message = f"Signed .tgz file not found in the output directory {output_dir}"
        raise ArtifactError(message)
    if len(archives) > 1:
        listed = ", ".join(path.name for path in archives)
        message = f"Expected one signed .tgz in {output_dir}, found: {listed}"
        raise ArtifactError(message)
    return archives[0]


def _resolve_editor(editor: str) -> BaseCommand:
    """Return a command for ``editor``, a path or a name looked up on PATH."""
    message = f"Unity editor executable not found: {editor}"
    if Path(editor).parent != Path() and not Path(editor).is_file():
        raise ConfigurationError(message)
    try:
        return local[editor]
    except CommandNotFound as exc:
        raise ConfigurationError(message) from exc


class UnityPackager:
    """Run ``-upmPack`` with a Unity editor executable.

    Parameters
    ----------
    editor : str | Path | BaseCommand
        Editor executable path, or a pre-bound plumbum command.
    """

    def __init__(self, editor: str | Path | BaseCommand) -> None:
        if isinstance(editor, (str, Path)):
            editor = _resolve_editor(str(editor))
        self._editor = editor

    def pack(
        self,
        package_dir: Path,
        output_dir: Path,
        credentials: PackagingCredentials,
    ) -> Path:
        """Pack ``package_dir`` into ``output_dir`` and return the archive."""
        workflow_commands.add_mask(credentials.password)
        output_dir.mkdir(parents=True, exist_ok=True)
        args = [
            *BATCH_FLAGS,
            "-username",
            credentials.username,
            "-password",
            credentials.password,
            "-cloudOrganization",
            credentials.organization_id,
            "-upmPack",
            str(package_dir),
            str(output_dir),
        ]
        retcode, stdout, stderr = self._editor.run(args, retcode=None)
        if stdout:
            print(stdout, end="" if stdout.endswith("\n") else "\n")
        if retcode != 0:
            detail = stderr.strip() or f"exit status {retcode}"
            message = f"Unity editor failed to pack {package_dir}: {detail}"
            raise ArtifactError(message)
        return find_signed_archive(output_dir)
