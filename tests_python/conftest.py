"""Shared fixtures for the release helper test suite."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parent.parent
SCRIPTS_DIR = REPO_ROOT / "scripts"

if str(SCRIPTS_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPTS_DIR))

from upm_release.environment import ReleaseContext  # noqa: E402

_GITHUB_ENV = (
    "GITHUB_ACTOR",
    "GITHUB_EVENT_PATH",
    "GITHUB_OUTPUT",
    "GITHUB_REPOSITORY",
    "GITHUB_SHA",
    "GITHUB_TOKEN",
    "GITHUB_WORKSPACE",
    "RUNNER_TEMP",
    "UNITY_EDITOR_PATH",
)


@pytest.fixture(autouse=True)
def clean_github_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the runner's own GitHub variables out of the tests."""
    for name in _GITHUB_ENV:
        monkeypatch.delenv(name, raising=False)
    for name in list(os.environ):
        if name.startswith("INPUT_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create an isolated workspace and set ``GITHUB_WORKSPACE`` accordingly."""
    root = tmp_path / "workspace"
    root.mkdir()
    monkeypatch.setenv("GITHUB_WORKSPACE", str(root))
    return root


@pytest.fixture
def release_context(workspace: Path, tmp_path: Path) -> ReleaseContext:
    """Context for ``owner/repo`` with a scratch output directory."""
    return ReleaseContext(
        token="ghs_test",
        workspace=workspace,
        repository="owner/repo",
        output_dir=tmp_path / "runner-temp",
        sha="0123456789abcdef0123456789abcdef01234567",
        actor="ci-actor",
    )
