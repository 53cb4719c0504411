"""Release tag catalog."""

from __future__ import annotations

import re
import typing as typ

from .errors import ConfigurationError

if typ.TYPE_CHECKING:
    from .git import GitRunner
    from .manifest import PackageIdentity

__all__ = [
    "SEMVER_TAG",
    "ensure_version_untagged",
    "list_release_tags",
    "peel_tag",
    "previous_tag",
]

SEMVER_TAG = re.compile(r"^v?\d+\.\d+\.\d+$")


def peel_tag(git: GitRunner, tag: str) -> str:
    """Return the commit ``tag`` ultimately points to."""
    return git.run("rev-parse", "--verify", f"{tag}^{{}}").strip()


def list_release_tags(git: GitRunner) -> dict[str, str]:
    """Return release tags mapped to their peeled commit hashes.

    Tags come from ``git tag --sort=version:refname`` so the mapping is in
    ascending version order. Blank lines and tags that are not plain
    ``MAJOR.MINOR.PATCH`` versions (optionally ``v``-prefixed) are dropped.

    Examples
    --------
    >>> list_release_tags(Git(Path(".")))  # doctest: +SKIP
    {'1.0.0': '5d1e...', 'v1.1.0': '9ab2...'}
    """
    listing = git.run("tag", "--list", "--sort=version:refname")
    tags = [
        tag
        for tag in (line.strip() for line in listing.splitlines())
        if tag and SEMVER_TAG.match(tag)
    ]
    return {tag: peel_tag(git, tag) for tag in tags}


def previous_tag(catalog: typ.Mapping[str, str]) -> str | None:
    """Return the most recent release tag in ``catalog``, if any."""
    return next(reversed(list(catalog)), None)


def ensure_version_untagged(
    catalog: typ.Mapping[str, str], identity: PackageIdentity
) -> None:
    """Refuse to release a version that already has a tag."""
    if identity.version in catalog:
        message = (
            f"Tag for {identity.name} {identity.version} already exists. "
            "Please ensure the package version is updated for a new release."
        )
        raise ConfigurationError(message)
