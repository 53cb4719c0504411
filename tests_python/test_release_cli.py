"""Behavioural tests for the ``scripts/release.py`` entry point."""

from __future__ import annotations

import importlib.util
import sys
import typing as typ
from pathlib import Path

import pytest
from release_test_helpers import (
    RecordingPackager,
    RecordingPublisher,
    ScriptedGit,
    decode_output_file,
    write_manifest,
)

REPO_ROOT = Path(__file__).resolve().parent.parent
SCRIPT_PATH = REPO_ROOT / "scripts" / "release.py"

if typ.TYPE_CHECKING:
    from types import ModuleType
else:
    ModuleType = type(sys)


@pytest.fixture(scope="module")
def release_cli() -> typ.Iterator[ModuleType]:
    """Load the release entry script as a module."""
    spec = importlib.util.spec_from_file_location("release_cli", SCRIPT_PATH)
    if spec is None or spec.loader is None:
        message = "Unable to load the release entry script"
        raise RuntimeError(message)
    module = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = module
    try:
        spec.loader.exec_module(module)
        yield module
    finally:
        sys.modules.pop(spec.name, None)


@pytest.fixture
def runner_env(
    workspace: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Path:
    """Export the runner variables a release needs; return ``GITHUB_OUTPUT``."""
    output = tmp_path / "github_output"
    monkeypatch.setenv("GITHUB_REPOSITORY", "owner/repo")
    monkeypatch.setenv("GITHUB_SHA", "c0ffee")
    monkeypatch.setenv("GITHUB_ACTOR", "ci-actor")
    monkeypatch.setenv("RUNNER_TEMP", str(tmp_path / "runner-temp"))
    monkeypatch.setenv("GITHUB_OUTPUT", str(output))
    return output


def test_missing_token_reports_error(
    release_cli: ModuleType,
    runner_env: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Configuration failures print an error annotation and exit 1."""
    with pytest.raises(SystemExit) as exc:
        release_cli.main(
            username="builder",
            password="s3cret",
            organization_id="org-1",
            unity_editor="/opt/unity/Unity",
        )

    assert exc.value.code == 1
    assert "::error title=Release Failure::GitHub token is required" in (
        capsys.readouterr().err
    )
    assert not runner_env.exists(), "no outputs are written on failure"


def test_missing_inputs_report_error(
    release_cli: ModuleType, capsys: pytest.CaptureFixture[str]
) -> None:
    """Missing required inputs fail before touching the environment."""
    with pytest.raises(SystemExit) as exc:
        release_cli.main()

    assert exc.value.code == 1
    assert "Missing required input(s): username, password" in capsys.readouterr().err


def test_successful_run_writes_outputs(
    release_cli: ModuleType,
    workspace: Path,
    runner_env: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """A successful release exports its identifiers to ``GITHUB_OUTPUT``."""
    write_manifest(workspace / "Packages" / "tools", "com.example.tools", "1.2.0")
    git = ScriptedGit({("log", "-1", "--pretty=%B", "c0ffee"): "Initial release"})
    publisher = RecordingPublisher()
    packager = RecordingPackager()
    monkeypatch.setattr(release_cli, "Git", lambda cwd: git)
    monkeypatch.setattr(release_cli, "GitHubClient", lambda repo, token: publisher)
    monkeypatch.setattr(release_cli, "UnityPackager", lambda editor: packager)
    monkeypatch.setenv("GITHUB_TOKEN", "ghs_env")
    monkeypatch.setenv("INPUT_USERNAME", "builder")
    monkeypatch.setenv("INPUT_PASSWORD", "s3cret")
    monkeypatch.setenv("INPUT_ORGANIZATION_ID", "org-1")
    monkeypatch.setenv("INPUT_UNITY_EDITOR", "/opt/unity/Unity")
    monkeypatch.setenv("INPUT_SPLIT_UPM_BRANCH", "none")

    release_cli.app([])

    outputs = decode_output_file(runner_env)
    assert outputs["version"] == "1.2.0"
    assert outputs["commitish"] == "c0ffee"
    assert outputs["release-id"] == "7"
    assert outputs["asset-url"].endswith("com.example.tools-1.2.0.tgz")
    assert publisher.releases[0]["target_commitish"] == "c0ffee"
