"""Tests for commitish resolution and package branch splitting."""

from __future__ import annotations

from pathlib import Path

import pytest
from release_test_helpers import (
    ScriptedGit,
    git_subtree_available,
    init_repository,
    run_git,
    write_manifest,
)

from upm_release.commitish import (
    relative_package_path,
    resolve_commitish,
    split_enabled,
)
from upm_release.errors import CommandError, ConfigurationError
from upm_release.git import Git

SHA = "0123456789abcdef0123456789abcdef01234567"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("upm", True),
        ("release/upm", True),
        ("none", False),
        ("NONE", False),
        (" None ", False),
        ("", False),
        (None, False),
    ],
)
def test_split_enabled(value: str | None, expected: bool) -> None:
    """``none`` in any casing disables the split."""
    assert split_enabled(value) is expected


def test_relative_package_path_uses_posix_separators(workspace: Path) -> None:
    """Nested package directories are expressed relative to the workspace."""
    package_dir = workspace / "Packages" / "com.example.tools"
    package_dir.mkdir(parents=True)

    assert relative_package_path(package_dir, workspace) == (
        "Packages/com.example.tools"
    )


def test_relative_package_path_rejects_workspace_root(workspace: Path) -> None:
    """Splitting the whole workspace is a configuration error."""
    with pytest.raises(ConfigurationError, match="nothing to split"):
        relative_package_path(workspace, workspace)


def test_relative_package_path_rejects_outside_directory(
    workspace: Path, tmp_path: Path
) -> None:
    """Package directories outside the workspace are refused."""
    outside = tmp_path / "elsewhere"
    outside.mkdir()

    with pytest.raises(ConfigurationError, match="not inside the workspace"):
        relative_package_path(outside, workspace)


def test_direct_mode_uses_triggering_sha(workspace: Path) -> None:
    """Without a split the triggering commit is the target."""
    git = ScriptedGit()
    manifest = workspace / "Packages" / "pkg" / "package.json"

    resolution = resolve_commitish(
        git,
        split_branch="none",
        package_dir=manifest.parent,
        manifest_path=manifest,
        workspace=workspace,
        sha=SHA,
    )

    assert resolution.commitish == SHA
    assert resolution.package_dir == manifest.parent
    assert resolution.manifest_path == manifest
    assert resolution.split_branch is None
    assert git.calls == []


def test_direct_mode_falls_back_to_head(workspace: Path) -> None:
    """Missing context falls back to ``git rev-parse HEAD``."""
    git = ScriptedGit({("rev-parse", "HEAD"): f"{SHA}\n"})
    manifest = workspace / "package.json"

    resolution = resolve_commitish(
        git,
        split_branch="NONE",
        package_dir=workspace,
        manifest_path=manifest,
        workspace=workspace,
        sha=None,
    )

    assert resolution.commitish == SHA
    assert git.calls == [("rev-parse", "HEAD")]


def test_split_mode_runs_commands_in_order(workspace: Path) -> None:
    """Split, push, resolve and checkout happen strictly in sequence."""
    package_dir = workspace / "Packages" / "com.example.tools"
    package_dir.mkdir(parents=True)
    git = ScriptedGit({("rev-parse", "upm"): f"{SHA}\n"})

    resolution = resolve_commitish(
        git,
        split_branch="upm",
        package_dir=package_dir,
        manifest_path=package_dir / "package.json",
        workspace=workspace,
        sha="ignored",
    )

    assert git.calls == [
        ("subtree", "split", "--prefix", "Packages/com.example.tools", "-b", "upm"),
        ("push", "-u", "origin", "upm", "--force"),
        ("rev-parse", "upm"),
        ("checkout", SHA),
    ]
    assert git.warned == [("push", "-u", "origin", "upm", "--force")]
    assert resolution.commitish == SHA
    assert resolution.package_dir == workspace
    assert resolution.manifest_path == workspace / "package.json"
    assert resolution.split_branch == "upm"


def test_split_failure_is_fatal(workspace: Path) -> None:
    """A failing subtree split stops before anything is pushed."""
    package_dir = workspace / "Packages" / "missing"
    split_args = ("subtree", "split", "--prefix", "Packages/missing", "-b", "upm")
    git = ScriptedGit({split_args: CommandError("No new revisions were found")})

    with pytest.raises(CommandError, match="No new revisions"):
        resolve_commitish(
            git,
            split_branch="upm",
            package_dir=package_dir,
            manifest_path=package_dir / "package.json",
            workspace=workspace,
            sha=SHA,
        )

    assert git.calls == [split_args]


@pytest.mark.skipif(not git_subtree_available(), reason="git subtree unavailable")
def test_split_mode_is_idempotent(tmp_path: Path) -> None:
    """Splitting twice leaves the remote branch on the same commit."""
    remote = tmp_path / "remote.git"
    remote.mkdir()
    run_git(remote, "init", "--quiet", "--bare")

    repo = init_repository(tmp_path / "workspace")
    package_dir = repo / "Packages" / "com.example.tools"
    write_manifest(package_dir, "com.example.tools", "1.0.0")
    (repo / "README.md").write_text("root\n", encoding="utf-8")
    run_git(repo, "add", ".")
    run_git(repo, "commit", "--quiet", "-m", "Initial package")
    (repo / "README.md").write_text("root changed\n", encoding="utf-8")
    run_git(repo, "commit", "--quiet", "-am", "Unrelated change")
    run_git(repo, "remote", "add", "origin", str(remote))

    def split() -> str:
        run_git(repo, "checkout", "--quiet", "main")
        return resolve_commitish(
            Git(repo),
            split_branch="upm",
            package_dir=package_dir,
            manifest_path=package_dir / "package.json",
            workspace=repo,
            sha=None,
        ).commitish

    first = split()
    second = split()

    assert first == second
    assert run_git(remote, "rev-parse", "upm").strip() == first
    history = run_git(repo, "rev-list", "upm").split()
    assert history == [first], "only the package commit belongs to the split"
    assert (repo / "package.json").is_file(), "split branch is checked out"
