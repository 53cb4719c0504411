"""Shared helpers for the release test suites."""

from __future__ import annotations

import dataclasses
import shutil
import subprocess
from collections.abc import Callable, Mapping
from pathlib import Path

from upm_release.errors import CommandError, GitHubApiError
from upm_release.github_api import PublishedRelease, PullRequest, UploadedAsset

__all__ = [
    "GIT_AVAILABLE",
    "RecordingPackager",
    "RecordingPublisher",
    "ScriptedGit",
    "decode_output_file",
    "git_subtree_available",
    "init_repository",
    "run_git",
    "write_executable",
    "write_manifest",
]

GIT_AVAILABLE = shutil.which("git") is not None

Response = str | Exception | Callable[[], str]


class ScriptedGit:
    """Stand-in for :class:`upm_release.git.Git` driven by canned output.

    ``responses`` maps argument tuples to the stdout to return, an exception
    to raise, or a callable producing stdout. Unknown commands return an empty
    string. Every call is recorded in :attr:`calls`.
    """

    def __init__(self, responses: Mapping[tuple[str, ...], Response] | None = None):
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, ...]] = []
        self.warned: list[tuple[str, ...]] = []

    def run(self, *args: str, warn_on_error: bool = False) -> str:
        self.calls.append(args)
        if warn_on_error:
            self.warned.append(args)
        response = self.responses.get(args, "")
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response()
        return response


@dataclasses.dataclass
class RecordingPublisher:
    """Publisher double recording every request it receives."""

    authors: dict[int, str | None] = dataclasses.field(default_factory=dict)
    fail_lookup: bool = False
    lookups: list[int] = dataclasses.field(default_factory=list)
    releases: list[dict[str, object]] = dataclasses.field(default_factory=list)
    uploads: list[Path] = dataclasses.field(default_factory=list)

    def get_pull_request(self, number: int) -> PullRequest:
        self.lookups.append(number)
        if self.fail_lookup:
            message = "HTTP 404: Not Found"
            raise GitHubApiError(message)
        return PullRequest(number=number, author=self.authors.get(number))

    def create_release(self, **kwargs: object) -> PublishedRelease:
        self.releases.append(kwargs)
        return PublishedRelease(
            id=7,
            html_url="https://github.com/owner/repo/releases/tag/untagged-1",
            upload_url="https://uploads.github.com/repos/owner/repo/releases/7/assets{?name,label}",
        )

    def upload_asset(self, release: PublishedRelease, path: Path) -> UploadedAsset:
        self.uploads.append(path)
        return UploadedAsset(
            name=path.name,
            browser_download_url=f"https://github.com/owner/repo/releases/download/x/{path.name}",
            size=path.stat().st_size,
        )

    @property
    def called(self) -> bool:
        return bool(self.lookups or self.releases or self.uploads)


@dataclasses.dataclass
class RecordingPackager:
    """Packager double that drops a fake archive in the output directory."""

    archive_name: str = "com.example.tools-1.2.0.tgz"
    calls: list[tuple[Path, Path]] = dataclasses.field(default_factory=list)

    def pack(self, package_dir: Path, output_dir: Path, credentials: object) -> Path:
        self.calls.append((package_dir, output_dir))
        output_dir.mkdir(parents=True, exist_ok=True)
        archive = output_dir / self.archive_name
        archive.write_bytes(b"archive")
        return archive


def write_manifest(directory: Path, name: str, version: str) -> Path:
    """Write a minimal UPM ``package.json`` into ``directory``."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "package.json"
    path.write_text(
        f'{{"name": "{name}", "version": "{version}", "unity": "2022.3"}}\n',
        encoding="utf-8",
    )
    return path


def write_executable(path: Path, body: str) -> Path:
    """Write a ``/bin/sh`` script to ``path`` and mark it executable."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
    path.chmod(0o755)
    return path


def run_git(repo: Path, *args: str) -> str:
    """Run git in ``repo`` and return stdout, failing loudly on errors."""
    completed = subprocess.run(  # noqa: S603  # Security: fixed git invocation in tests.
        ["git", "-C", str(repo), *args],  # noqa: S607
        capture_output=True,
        text=True,
        check=False,
    )
    if completed.returncode != 0:
        raise CommandError(completed.stderr, command=" ".join(args))
    return completed.stdout


def init_repository(path: Path) -> Path:
    """Create a repository at ``path`` with a deterministic identity."""
    path.mkdir(parents=True, exist_ok=True)
    run_git(path, "init", "--quiet", "--initial-branch=main")
    run_git(path, "config", "user.name", "Test User")
    run_git(path, "config", "user.email", "test@example.com")
    run_git(path, "config", "commit.gpgsign", "false")
    run_git(path, "config", "tag.gpgsign", "false")
    return path


def git_subtree_available() -> bool:
    """Return ``True`` when the ``git subtree`` contrib command is installed."""
    if not GIT_AVAILABLE:
        return False
    completed = subprocess.run(  # noqa: S603
        ["git", "subtree", "-h"],  # noqa: S607
        capture_output=True,
        text=True,
        check=False,
    )
    return "git subtree" in completed.stdout + completed.stderr


def decode_output_file(path: Path) -> dict[str, str]:
    """Parse GitHub output records written with ``write_github_output``."""
    lines = path.read_text(encoding="utf-8").splitlines()
    values: dict[str, str] = {}
    index = 0
    while index < len(lines):
        key, delimiter = lines[index].split("<<", 1)
        index += 1
        buffer: list[str] = []
        while index < len(lines) and lines[index] != delimiter:
            buffer.append(lines[index])
            index += 1
        values[key] = "\n".join(buffer)
        index += 1  # Skip the delimiter terminator.
    return values
