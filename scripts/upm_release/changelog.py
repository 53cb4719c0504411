"""Compose release notes from the release commit.

When no explicit notes are given, the release commit's message drives the
notes. A squash-merge subject such as ``com.example.tools 1.2.0 (#42)``
identifies the pull request that produced the release; its author is credited
and the rest of the message becomes the body.

Examples
--------
>>> identity = PackageIdentity("MyPkg", "1.2.3")
>>> extract_pull_request("MyPkg v1.2.3 (#42)\\n\\nFixed a bug", identity)
ExtractedNotes(body='Fixed a bug', pull_request=42)
"""

from __future__ import annotations

import dataclasses
import re
import typing as typ

from . import workflow_commands
from .errors import GitHubApiError
from .git import commit_message
from .manifest import PackageIdentity

if typ.TYPE_CHECKING:
    from .environment import ReleaseContext
    from .git import GitRunner
    from .github_api import PullRequest

__all__ = [
    "HEADER",
    "ExtractedNotes",
    "PullRequestLookup",
    "changelog_url",
    "compose_release_notes",
    "extract_pull_request",
    "first_line_pattern",
    "format_body",
    "render_release_notes",
    "resolve_actor",
]

HEADER = "## What's Changed"
_BULLET = re.compile(r"^-\s+")


class PullRequestLookup(typ.Protocol):
    """Source of pull-request metadata."""

    def get_pull_request(self, number: int) -> PullRequest: ...


@dataclasses.dataclass(frozen=True, slots=True)
class ExtractedNotes:
    """Notes body left after removing a recognised release subject line."""

    body: str
    pull_request: int | None = None


def first_line_pattern(identity: PackageIdentity) -> re.Pattern[str]:
    """Return the pattern matching ``<name> v?<version> (#<n>)`` subjects.

    Name and version are matched literally. Parentheses around the pull
    request marker are optional.
    """
    name = re.escape(identity.name)
    version = re.escape(identity.version)
    return re.compile(rf"^{name}\s+v?{version}\s*\(?#(\d+)\)?$")


def extract_pull_request(message: str, identity: PackageIdentity) -> ExtractedNotes:
    """Split a release subject line off ``message`` when it names a PR.

    Without a matching first line the whole message is returned as the body
    and no pull request is captured.
    """
    message = message.strip()
    lines = message.split("\n")
    match = first_line_pattern(identity).match(lines[0])
    if match is None:
        return ExtractedNotes(body=message)
    return ExtractedNotes(
        body="\n".join(lines[1:]).strip(), pull_request=int(match.group(1))
    )


def resolve_actor(
    pull_request: PullRequest | None,
    *,
    event_actor: str | None,
    actor: str | None,
) -> str:
    """Return the login to credit: PR author, event sender, then actor."""
    if pull_request is not None and pull_request.author:
        return pull_request.author
    return event_actor or actor or ""


def format_body(body: str) -> str:
    """Indent ``body`` as a nested list under the release bullet."""
    formatted: list[str] = []
    for line in body.split("\n"):
        trimmed = line.rstrip()
        if not trimmed:
            formatted.append("")
        elif _BULLET.match(trimmed):
            formatted.append(f"  {trimmed}")
        else:
            formatted.append(f"  - {trimmed}")
    return "\n".join(formatted)


def changelog_url(repository: str, version: str, last_tag: str | None) -> str:
    """Return the compare URL from ``last_tag``, or the history at ``version``."""
    if last_tag:
        return f"https://github.com/{repository}/compare/{last_tag}...{version}"
    return f"https://github.com/{repository}/commits/{version}"


def render_release_notes(
    identity: PackageIdentity,
    *,
    actor: str,
    body: str,
    pull_request: int | None,
    repository: str,
    last_tag: str | None,
) -> str:
    """Assemble the final notes from already-resolved parts."""
    credit = f" by @{actor}" if actor else ""
    suffix = f" in #{pull_request}" if pull_request is not None else ""
    notes = f"{HEADER}\n- {identity.name} {identity.version}{credit}{suffix}"
    if body:
        notes += f"\n\n{format_body(body)}"
    url = changelog_url(repository, identity.version, last_tag)
    return f"{notes}\n\n**Full Changelog**: {url}"


def _lookup_pull_request(
    pull_requests: PullRequestLookup, number: int
) -> PullRequest | None:
    try:
        return pull_requests.get_pull_request(number)
    except GitHubApiError as exc:
        workflow_commands.warning(
            f"Failed to get PR #{number} details: {exc}", title="Release Notes"
        )
        return None


def compose_release_notes(
    identity: PackageIdentity,
    *,
    explicit_notes: str | None,
    last_tag: str | None,
    commitish: str,
    git: GitRunner,
    pull_requests: PullRequestLookup,
    context: ReleaseContext,
) -> str:
    """Return the release notes for ``identity``.

    Parameters
    ----------
    identity : PackageIdentity
        Package being released.
    explicit_notes : str | None
        Caller-supplied notes. When non-blank they are returned verbatim and
        no commit inspection happens.
    last_tag : str | None
        Most recent existing release tag, used for the compare link.
    commitish : str
        Release commit whose message seeds the notes.
    git : GitRunner
        Accessor used to read the commit message.
    pull_requests : PullRequestLookup
        Source of pull-request authors. Lookup failures are reported as
        warnings and never abort the run.
    context : ReleaseContext
        Supplies the repository slug and the fallback actors.

    Raises
    ------
    CommandError
        If the commit message cannot be read.
    """
    if explicit_notes and explicit_notes.strip():
        return explicit_notes

    extracted = extract_pull_request(commit_message(git, commitish), identity)
    pull_request = None
    if extracted.pull_request is not None:
        pull_request = _lookup_pull_request(pull_requests, extracted.pull_request)
    actor = resolve_actor(
        pull_request, event_actor=context.event_actor, actor=context.actor
    )
    return render_release_notes(
        identity,
        actor=actor,
        body=extracted.body,
        pull_request=extracted.pull_request,
        repository=context.repository,
        last_tag=last_tag,
    )
