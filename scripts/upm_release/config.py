"""Action inputs for a release run.

Inputs arrive from ``action.yml`` as ``INPUT_*`` environment variables or as
command-line flags; :class:`ReleaseInputs` holds them after defaults have been
applied.
"""

from __future__ import annotations

import dataclasses
import os
import typing as typ

from .errors import ConfigurationError
from .manifest import DEFAULT_MANIFEST_GLOB, PackageIdentity
from .packaging import PackagingCredentials

__all__ = [
    "DEFAULT_SPLIT_BRANCH",
    "ReleaseInputs",
]

DEFAULT_SPLIT_BRANCH = "upm"


def _blank_to_none(value: str | None) -> str | None:
    return value if value and value.strip() else None


@dataclasses.dataclass(frozen=True, slots=True)
class ReleaseInputs:
    """Normalised action inputs.

    Attributes
    ----------
    username, password, organization_id : str
        Unity account details forwarded to the editor.
    unity_editor : str
        Path to the Unity editor executable.
    github_token : str | None
        Explicit token; ``GITHUB_TOKEN`` is used when absent.
    release_notes : str | None
        Notes that replace the generated changelog.
    package_json : str
        Glob locating the package manifest.
    split_upm_branch : str
        Branch receiving the package subtree, or ``none``.
    release_title : str | None
        Release name; defaults to ``"<name> <version>"``.
    """

    username: str
    password: str = dataclasses.field(repr=False)
    organization_id: str
    unity_editor: str
    github_token: str | None = dataclasses.field(default=None, repr=False)
    release_notes: str | None = None
    package_json: str = DEFAULT_MANIFEST_GLOB
    split_upm_branch: str = DEFAULT_SPLIT_BRANCH
    release_title: str | None = None

    @classmethod
    def build(
        cls,
        *,
        username: str | None,
        password: str | None,
        organization_id: str | None,
        unity_editor: str | None = None,
        github_token: str | None = None,
        release_notes: str | None = None,
        package_json: str | None = None,
        split_upm_branch: str | None = None,
        release_title: str | None = None,
        environ: typ.Mapping[str, str] | None = None,
    ) -> ReleaseInputs:
        """Apply defaults and validate required inputs.

        ``unity_editor`` falls back to ``UNITY_EDITOR_PATH`` from ``environ``.

        Raises
        ------
        ConfigurationError
            If a required input is missing.
        """
        source = os.environ if environ is None else environ
        editor = _blank_to_none(unity_editor) or _blank_to_none(
            source.get("UNITY_EDITOR_PATH")
        )
        missing = [
            label
            for label, present in (
                ("username", _blank_to_none(username)),
                ("password", _blank_to_none(password)),
                ("organization-id", _blank_to_none(organization_id)),
                ("unity-editor", editor),
            )
            if not present
        ]
        if missing:
            joined = ", ".join(missing)
            message = f"Missing required input(s): {joined}"
            raise ConfigurationError(message)

        return cls(
            username=typ.cast(str, username),
            password=typ.cast(str, password),
            organization_id=typ.cast(str, organization_id),
            unity_editor=typ.cast(str, editor),
            github_token=_blank_to_none(github_token),
            release_notes=_blank_to_none(release_notes),
            package_json=_blank_to_none(package_json) or DEFAULT_MANIFEST_GLOB,
            split_upm_branch=_blank_to_none(split_upm_branch) or DEFAULT_SPLIT_BRANCH,
            release_title=_blank_to_none(release_title),
        )

    @property
    def credentials(self) -> PackagingCredentials:
        """Credentials handed to the packaging step."""
        return PackagingCredentials(
            username=self.username,
            password=self.password,
            organization_id=self.organization_id,
        )

    def title_for(self, identity: PackageIdentity) -> str:
        """Return the release title for ``identity``."""
        return self.release_title or identity.title
