"""GitHub REST calls made through the ``gh`` CLI.

All requests go through ``gh api`` with ``GH_TOKEN`` set in the command's
environment, so authentication, API host selection and pagination follow the
CLI's behaviour.
"""

from __future__ import annotations

import dataclasses
import json
import typing as typ
from pathlib import Path
from urllib.parse import quote

from plumbum import local
from plumbum.commands import CommandNotFound

from .errors import ConfigurationError, GitHubApiError

if typ.TYPE_CHECKING:
    from plumbum.commands.base import BaseCommand

__all__ = [
    "ASSET_CONTENT_TYPE",
    "GitHubClient",
    "PublishedRelease",
    "PullRequest",
    "UploadedAsset",
]

ASSET_CONTENT_TYPE = "application/tar+gzip"


@dataclasses.dataclass(frozen=True, slots=True)
class PullRequest:
    """Pull-request metadata used to credit a release.

    ``author`` is ``None`` when the API response carries no user login.
    """

    number: int
    author: str | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class PublishedRelease:
    """Draft release created on GitHub."""

    id: int
    html_url: str
    upload_url: str


@dataclasses.dataclass(frozen=True, slots=True)
class UploadedAsset:
    """Release asset uploaded to GitHub."""

    name: str
    browser_download_url: str
    size: int


def _upload_endpoint(upload_url: str, name: str) -> str:
    """Expand the ``{?name,label}`` URI template GitHub returns."""
    base = upload_url.split("{", 1)[0]
    return f"{base}?name={quote(name)}"


class GitHubClient:
    """Minimal GitHub client for one repository.

    Parameters
    ----------
    repository : str
        ``owner/repo`` slug.
    token : str
        Token exported to ``gh`` as ``GH_TOKEN``.
    gh : BaseCommand, optional
        Command used instead of ``local["gh"]``.
    """

    def __init__(
        self, repository: str, token: str, *, gh: BaseCommand | None = None
    ) -> None:
        if gh is None:
            try:
                gh = local["gh"]
            except CommandNotFound as exc:
                message = "gh executable not found on PATH"
                raise ConfigurationError(message) from exc
        self.repository = repository
        self._gh = gh.with_env(GH_TOKEN=token)

    def _api(self, *args: str) -> dict[str, typ.Any]:
        retcode, stdout, stderr = self._gh.run(["api", *args], retcode=None)
        if retcode != 0:
            message = stderr.strip() or f"gh api exited with status {retcode}"
            raise GitHubApiError(message)
        try:
            data = json.loads(stdout)
        except ValueError as exc:
            message = f"gh api returned invalid JSON: {exc}"
            raise GitHubApiError(message) from exc
        if not isinstance(data, dict):
            message = "gh api returned an unexpected response shape"
            raise GitHubApiError(message)
        return data

    def get_pull_request(self, number: int) -> PullRequest:
        """Return the pull request ``number`` of the repository."""
        data = self._api(f"repos/{self.repository}/pulls/{number}")
        user = data.get("user")
        login = user.get("login") if isinstance(user, dict) else None
        return PullRequest(
            number=number, author=login if isinstance(login, str) and login else None
        )

    def create_release(
        self,
        *,
        tag_name: str,
        name: str,
        body: str,
        target_commitish: str,
        prerelease: bool,
    ) -> PublishedRelease:
        """Create a draft release with the composed notes.

        GitHub's generated notes are disabled so ``body`` is used as-is.
        """
        data = self._api(
            "--method",
            "POST",
            f"repos/{self.repository}/releases",
            "-f",
            f"tag_name={tag_name}",
            "-f",
            f"name={name}",
            "-f",
            f"body={body}",
            "-f",
            f"target_commitish={target_commitish}",
            "-F",
            f"prerelease={str(prerelease).lower()}",
            "-F",
            "draft=true",
            "-F",
            "generate_release_notes=false",
        )
        try:
            return PublishedRelease(
                id=int(data["id"]),
                html_url=str(data.get("html_url", "")),
                upload_url=str(data["upload_url"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            message = f"Release response is missing {exc}"
            raise GitHubApiError(message) from exc

    def upload_asset(self, release: PublishedRelease, path: Path) -> UploadedAsset:
        """Upload ``path`` to ``release`` as a gzip tarball."""
        size = path.stat().st_size
        data = self._api(
            "--method",
            "POST",
            "-H",
            f"Content-Type: {ASSET_CONTENT_TYPE}",
            "-H",
            f"Content-Length: {size}",
            _upload_endpoint(release.upload_url, path.name),
            "--input",
            str(path),
        )
        return UploadedAsset(
            name=str(data.get("name", path.name)),
            browser_download_url=str(data.get("browser_download_url", "")),
            size=size,
        )
