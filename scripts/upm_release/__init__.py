"""Public interface for the UPM release helper package."""

from .changelog import compose_release_notes, extract_pull_request
from .commitish import CommitishResolution, resolve_commitish
from .config import ReleaseInputs
from .environment import ReleaseContext
from .errors import (
    ArtifactError,
    CommandError,
    ConfigurationError,
    GitHubApiError,
    ReleaseError,
)
from .git import Git
from .github_api import GitHubClient
from .manifest import PackageIdentity, find_manifest, read_package_identity
from .packaging import UnityPackager
from .pipeline import ReleaseOutcome, run_release
from .tags import list_release_tags, previous_tag

__all__ = [
    "ArtifactError",
    "CommandError",
    "CommitishResolution",
    "compose_release_notes",
    "ConfigurationError",
    "extract_pull_request",
    "find_manifest",
    "Git",
    "GitHubApiError",
    "GitHubClient",
    "list_release_tags",
    "PackageIdentity",
    "previous_tag",
    "read_package_identity",
    "ReleaseContext",
    "ReleaseError",
    "ReleaseInputs",
    "ReleaseOutcome",
    "resolve_commitish",
    "run_release",
    "UnityPackager",
]
