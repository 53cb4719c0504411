# /// script
# requires-python = ">=3.11"
# dependencies = [
#   "cyclopts>=3.24.0,<4.0.0",
#   "plumbum>=1.8",
# ]
# ///

"""Command-line entry point for the UPM release helper.

Inputs declared in ``action.yml`` are forwarded as ``INPUT_*`` environment
variables; every parameter can also be passed as a flag.

Examples
--------
Run a release locally against a checkout::

    export GITHUB_WORKSPACE="$(pwd)" GITHUB_REPOSITORY="owner/repo"
    export RUNNER_TEMP="$(mktemp -d)" GITHUB_TOKEN="$(gh auth token)"
    uv run scripts/release.py --username me@example.com \
        --password "$UNITY_PASSWORD" --organization-id 1234 \
        --unity-editor /opt/unity/Editor/Unity
"""

from __future__ import annotations

import os
import sys
import typing as typ
from pathlib import Path

from cyclopts import App, Parameter

from upm_release import (
    Git,
    GitHubClient,
    ReleaseContext,
    ReleaseError,
    ReleaseInputs,
    UnityPackager,
    run_release,
)
from upm_release.workflow_commands import error, write_github_output

app = App(help="Publish a Unity package as a draft GitHub release.")


@app.default
def main(
    *,
    username: typ.Annotated[str | None, Parameter(env_var="INPUT_USERNAME")] = None,
    password: typ.Annotated[str | None, Parameter(env_var="INPUT_PASSWORD")] = None,
    organization_id: typ.Annotated[
        str | None, Parameter(env_var="INPUT_ORGANIZATION_ID")
    ] = None,
    unity_editor: typ.Annotated[
        str | None, Parameter(env_var="INPUT_UNITY_EDITOR")
    ] = None,
    github_token: typ.Annotated[
        str | None, Parameter(env_var="INPUT_GITHUB_TOKEN")
    ] = None,
    release_notes: typ.Annotated[
        str | None, Parameter(env_var="INPUT_RELEASE_NOTES")
    ] = None,
    package_json: typ.Annotated[
        str | None, Parameter(env_var="INPUT_PACKAGE_JSON")
    ] = None,
    split_upm_branch: typ.Annotated[
        str | None, Parameter(env_var="INPUT_SPLIT_UPM_BRANCH")
    ] = None,
    release_title: typ.Annotated[
        str | None, Parameter(env_var="INPUT_RELEASE_TITLE")
    ] = None,
) -> None:
    """Create a draft release for the package in ``GITHUB_WORKSPACE``.

    Parameters
    ----------
    username:
        Unity account user name.
    password:
        Unity account password.
    organization_id:
        Unity organisation used to sign the package.
    unity_editor:
        Unity editor executable. Defaults to ``UNITY_EDITOR_PATH``.
    github_token:
        Token for the GitHub API. Defaults to ``GITHUB_TOKEN``.
    release_notes:
        Notes to publish instead of the generated changelog.
    package_json:
        Glob locating the package manifest.
    split_upm_branch:
        Branch receiving the package subtree; ``none`` disables the split.
    release_title:
        Release name. Defaults to ``"<name> <version>"``.
    """
    try:
        inputs = ReleaseInputs.build(
            username=username,
            password=password,
            organization_id=organization_id,
            unity_editor=unity_editor,
            github_token=github_token,
            release_notes=release_notes,
            package_json=package_json,
            split_upm_branch=split_upm_branch,
            release_title=release_title,
        )
        context = ReleaseContext.from_environ(inputs.github_token)
        outcome = run_release(
            inputs,
            context,
            git=Git(context.workspace),
            publisher=GitHubClient(context.repository, context.token),
            packager=UnityPackager(inputs.unity_editor),
        )
    except ReleaseError as exc:
        error(str(exc), title="Release Failure")
        raise SystemExit(1) from exc

    if github_output := os.environ.get("GITHUB_OUTPUT"):
        write_github_output(
            Path(github_output),
            {
                "version": outcome.identity.version,
                "commitish": outcome.commitish,
                "release-id": outcome.release.id,
                "release-url": outcome.release.html_url,
                "asset-url": outcome.asset.browser_download_url,
            },
        )
    print(
        f"Published draft release {outcome.identity.version} "
        f"for {outcome.identity.name}.",
        file=sys.stderr,
    )


if __name__ == "__main__":
    app()
