"""Package manifest discovery and parsing.

The manifest is the UPM ``package.json`` that carries the authoritative
package ``name`` and ``version``. It is located with a glob evaluated from the
workspace root; exactly one match is required.

Usage
-----
Locate and read the manifest from a checkout::

    from pathlib import Path
    from upm_release.manifest import find_manifest, read_package_identity

    path = find_manifest("**/Packages/**/package.json", Path.cwd())
    identity = read_package_identity(path)
    print(identity.name, identity.version)
"""

from __future__ import annotations

import dataclasses
import json
from glob import has_magic
from pathlib import Path, PurePath, PurePosixPath

from .errors import ConfigurationError

__all__ = [
    "DEFAULT_MANIFEST_GLOB",
    "PackageIdentity",
    "find_manifest",
    "glob_root_and_pattern",
    "read_package_identity",
]

DEFAULT_MANIFEST_GLOB = "**/Packages/**/package.json"


@dataclasses.dataclass(frozen=True, slots=True)
class PackageIdentity:
    """Name and version read from the manifest.

    Examples
    --------
    >>> PackageIdentity("com.example.tools", "1.2.0-pre.1").is_prerelease
    True
    """

    name: str
    version: str

    @property
    def is_prerelease(self) -> bool:
        """Return ``True`` when the version carries a ``-pre`` marker."""
        return "-pre" in self.version

    @property
    def title(self) -> str:
        """Default release title, ``"<name> <version>"``."""
        return f"{self.name} {self.version}"


def glob_root_and_pattern(candidate: PurePath) -> tuple[str, str]:
    """Return the filesystem root and relative glob pattern for ``candidate``."""
    anchor = candidate.anchor
    if not anchor:
        message = f"Expected absolute path, received '{candidate}'"
        raise ValueError(message)

    root_text = (candidate.drive + candidate.root) or anchor
    relative_parts = candidate.parts[1:]
    pattern = PurePosixPath(*relative_parts).as_posix() if relative_parts else "*"
    return root_text, pattern


def _glob_files(pattern: str, workspace: Path) -> list[Path]:
    candidate = Path(pattern)
    if not has_magic(pattern):
        base = candidate if candidate.is_absolute() else workspace / candidate
        return [base] if base.is_file() else []
    try:
        if candidate.is_absolute():
            root_text, relative = glob_root_and_pattern(candidate)
            matches = Path(root_text).glob(relative)
        else:
            matches = workspace.glob(pattern)
        return sorted({path for path in matches if path.is_file()})
    except ValueError as exc:
        message = f"Invalid package-json pattern '{pattern}': {exc}"
        raise ConfigurationError(message) from exc


def find_manifest(pattern: str, workspace: Path) -> Path:
    """Return the single manifest matching ``pattern`` beneath ``workspace``.

    Parameters
    ----------
    pattern : str
        Glob pattern, relative to ``workspace`` unless absolute.
    workspace : Path
        Checkout root used to anchor relative patterns.

    Raises
    ------
    ConfigurationError
        If the pattern is malformed, or no file or more than one file matches.
    """
    matches = _glob_files(pattern, workspace)
    if not matches:
        message = (
            "No package.json file found in the working directory or its "
            f"subdirectories (pattern '{pattern}')"
        )
        raise ConfigurationError(message)
    if len(matches) > 1:
        listed = ", ".join(str(path) for path in matches)
        message = (
            "Multiple package.json files found in the working directory or its "
            "subdirectories. Please ensure there is only one package.json "
            f"file. Matches: {listed}"
        )
        raise ConfigurationError(message)
    return matches[0]


def _require_string(data: dict[str, object], field: str, path: Path) -> str:
    value = data.get(field)
    if not isinstance(value, str) or not value.strip():
        message = f"package.json field '{field}' is missing or empty in {path}"
        raise ConfigurationError(message)
    return value.strip()


def read_package_identity(path: Path) -> PackageIdentity:
    """Return the package name and version declared in ``path``.

    Raises
    ------
    ConfigurationError
        If the file is missing, unreadable, not a JSON object, or lacks a
        ``name`` or ``version``.
    """
    if not path.is_file():
        message = f"package.json file not found or is not readable: {path}"
        raise ConfigurationError(message)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        message = f"package.json file not found or is not readable: {path}"
        raise ConfigurationError(message) from exc
    except ValueError as exc:
        message = f"package.json is not valid JSON: {path}: {exc}"
        raise ConfigurationError(message) from exc
    if not isinstance(data, dict):
        message = f"package.json must contain a JSON object: {path}"
        raise ConfigurationError(message)
    return PackageIdentity(
        name=_require_string(data, "name", path),
        version=_require_string(data, "version", path),
    )
