"""Resolve the commit a release is attached to.

Two modes exist. In split mode the package directory is extracted into its own
branch with ``git subtree split``, the branch is force-pushed, and the release
targets the branch tip; consumers can then depend on the package through the
branch as if it were a standalone repository. In direct mode the release
targets the commit that triggered the workflow.
"""

from __future__ import annotations

import dataclasses
import typing as typ
from pathlib import Path

from .errors import ConfigurationError
from .git import rev_parse

if typ.TYPE_CHECKING:
    from .git import GitRunner

__all__ = [
    "SPLIT_DISABLED",
    "CommitishResolution",
    "relative_package_path",
    "resolve_commitish",
    "split_enabled",
    "split_package_branch",
]

SPLIT_DISABLED = "none"


@dataclasses.dataclass(frozen=True, slots=True)
class CommitishResolution:
    """Target commit plus the package location valid at that commit.

    Attributes
    ----------
    commitish : str
        Commit hash the release will point at.
    package_dir : Path
        Directory to hand to the packaging step.
    manifest_path : Path
        Manifest location after resolution. In split mode the manifest sits at
        the workspace root because the split branch's root is the former
        package directory.
    split_branch : str | None
        Name of the pushed split branch, or ``None`` in direct mode.
    """

    commitish: str
    package_dir: Path
    manifest_path: Path
    split_branch: str | None = None


def split_enabled(branch: str | None) -> bool:
    """Return ``True`` unless ``branch`` is blank or ``none`` (any case)."""
    return bool(branch and branch.strip()) and (
        branch.strip().lower() != SPLIT_DISABLED
    )


def relative_package_path(package_dir: Path, workspace: Path) -> str:
    """Return ``package_dir`` relative to ``workspace`` with POSIX separators.

    Raises
    ------
    ConfigurationError
        If ``package_dir`` is outside ``workspace`` or is the workspace root.
    """
    package_root = package_dir.resolve()
    workspace_root = workspace.resolve()
    if not package_root.is_relative_to(workspace_root):
        message = (
            f"Package directory {package_dir} is not inside the workspace "
            f"{workspace}"
        )
        raise ConfigurationError(message)
    relative = package_root.relative_to(workspace_root)
    if relative == Path():
        message = (
            "Package directory is the workspace root; there is nothing to "
            "split. Set split-upm-branch to 'none'."
        )
        raise ConfigurationError(message)
    return relative.as_posix()


def split_package_branch(
    git: GitRunner, *, branch: str, package_dir: Path, workspace: Path
) -> str:
    """Split ``package_dir`` into ``branch``, publish it, and check it out.

    The commands run strictly in this order: subtree split, force push,
    resolve the branch tip, check out the tip. Re-running against the same
    history produces the same split commit, so the force push leaves the
    remote branch unchanged.

    Returns
    -------
    str
        Commit hash of the split branch tip.

    Raises
    ------
    CommandError
        If any git command fails, including a split of a prefix that never
        existed in history.
    """
    prefix = relative_package_path(package_dir, workspace)
    git.run("subtree", "split", "--prefix", prefix, "-b", branch)
    git.run("push", "-u", "origin", branch, "--force", warn_on_error=True)
    commitish = rev_parse(git, branch)
    git.run("checkout", commitish)
    return commitish


def resolve_commitish(
    git: GitRunner,
    *,
    split_branch: str | None,
    package_dir: Path,
    manifest_path: Path,
    workspace: Path,
    sha: str | None,
) -> CommitishResolution:
    """Return the release target for the configured mode.

    Parameters
    ----------
    git : GitRunner
        Accessor bound to the workspace checkout.
    split_branch : str | None
        Branch receiving the package subtree; ``none`` disables splitting.
    package_dir : Path
        Directory containing the package manifest.
    manifest_path : Path
        Manifest located before any split.
    workspace : Path
        Checkout root (``GITHUB_WORKSPACE``).
    sha : str | None
        Commit that triggered the workflow (``GITHUB_SHA``).
    """
    if split_enabled(split_branch):
        branch = typ.cast(str, split_branch).strip()
        commitish = split_package_branch(
            git, branch=branch, package_dir=package_dir, workspace=workspace
        )
        return CommitishResolution(
            commitish=commitish,
            package_dir=workspace,
            manifest_path=workspace / "package.json",
            split_branch=branch,
        )

    commitish = sha.strip() if sha and sha.strip() else rev_parse(git, "HEAD")
    return CommitishResolution(
        commitish=commitish,
        package_dir=package_dir,
        manifest_path=manifest_path,
    )
