"""Linear release flow.

:func:`run_release` performs every step of a release in a fixed order. Each
step either succeeds or raises :class:`~upm_release.errors.ReleaseError`; the
only recoverable failure is a pull-request lookup inside the changelog
composer. The version check runs before any GitHub API or packaging call.
"""

from __future__ import annotations

import dataclasses
import typing as typ
from pathlib import Path

from . import workflow_commands
from .changelog import PullRequestLookup, compose_release_notes
from .commitish import resolve_commitish
from .git import configure_identity, fetch_tags
from .manifest import PackageIdentity, find_manifest, read_package_identity
from .tags import ensure_version_untagged, list_release_tags, previous_tag

if typ.TYPE_CHECKING:
    from .config import ReleaseInputs
    from .environment import ReleaseContext
    from .git import GitRunner
    from .github_api import PublishedRelease, UploadedAsset
    from .packaging import PackagingCredentials

__all__ = ["Packager", "Publisher", "ReleaseOutcome", "run_release"]


class Publisher(PullRequestLookup, typ.Protocol):
    """Release platform operations used by the flow."""

    def create_release(
        self,
        *,
        tag_name: str,
        name: str,
        body: str,
        target_commitish: str,
        prerelease: bool,
    ) -> PublishedRelease: ...

    def upload_asset(self, release: PublishedRelease, path: Path) -> UploadedAsset: ...


class Packager(typ.Protocol):
    """Produces the signed archive for a package directory."""

    def pack(
        self,
        package_dir: Path,
        output_dir: Path,
        credentials: PackagingCredentials,
    ) -> Path: ...


@dataclasses.dataclass(frozen=True, slots=True)
class ReleaseOutcome:
    """Summary of a completed release run."""

    identity: PackageIdentity
    commitish: str
    notes: str
    archive: Path
    release: PublishedRelease
    asset: UploadedAsset


def run_release(
    inputs: ReleaseInputs,
    context: ReleaseContext,
    *,
    git: GitRunner,
    publisher: Publisher,
    packager: Packager,
) -> ReleaseOutcome:
    """Publish the package found in ``context.workspace`` as a draft release.

    Parameters
    ----------
    inputs : ReleaseInputs
        Normalised action inputs.
    context : ReleaseContext
        Runner-provided values (workspace, repository, triggering commit).
    git : GitRunner
        Accessor bound to the workspace checkout.
    publisher : Publisher
        GitHub client used for pull-request lookup and publishing.
    packager : Packager
        Unity packaging step.

    Returns
    -------
    ReleaseOutcome
        The created release and its uploaded asset.

    Raises
    ------
    ReleaseError
        On the first fatal condition encountered.
    """
    configure_identity(git)
    fetch_tags(git)

    manifest_path = find_manifest(inputs.package_json, context.workspace)
    package_dir = manifest_path.parent
    workflow_commands.info(f"Package directory: {package_dir}")
    identity = read_package_identity(manifest_path)

    catalog = list_release_tags(git)
    last_tag = previous_tag(catalog)
    ensure_version_untagged(catalog, identity)

    workflow_commands.info(
        f"Generating Release for {identity.name} {identity.version}..."
    )
    resolution = resolve_commitish(
        git,
        split_branch=inputs.split_upm_branch,
        package_dir=package_dir,
        manifest_path=manifest_path,
        workspace=context.workspace,
        sha=context.sha,
    )
    workflow_commands.info(
        f"Using target commit {resolution.commitish} for the release."
    )

    notes = compose_release_notes(
        identity,
        explicit_notes=inputs.release_notes,
        last_tag=last_tag,
        commitish=resolution.commitish,
        git=git,
        pull_requests=publisher,
        context=context,
    )
    with workflow_commands.group("----- Release Notes -----"):
        workflow_commands.info(notes)

    archive = packager.pack(
        resolution.package_dir, context.output_dir, inputs.credentials
    )
    workflow_commands.info(f"Signed package created at {archive}")

    release = publisher.create_release(
        tag_name=identity.version,
        name=inputs.title_for(identity),
        body=notes,
        target_commitish=resolution.commitish,
        prerelease=identity.is_prerelease,
    )
    workflow_commands.info(f"Release created: {release.html_url}")

    asset = publisher.upload_asset(release, archive)
    workflow_commands.info(f"Release asset uploaded: {asset.browser_download_url}")

    return ReleaseOutcome(
        identity=identity,
        commitish=resolution.commitish,
        notes=notes,
        archive=archive,
        release=release,
        asset=asset,
    )
