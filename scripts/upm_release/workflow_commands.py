"""GitHub Actions workflow commands and step outputs.

Annotations (``::warning``, ``::error``) and log groups are written using the
runner's workflow-command syntax so they surface in the job summary. Progress
messages are ordinary ``print`` calls.

Examples
--------
>>> warning("PR lookup failed", title="Pull Request")  # doctest: +SKIP
::warning title=Pull Request::PR lookup failed
"""

from __future__ import annotations

import contextlib
import sys
import typing as typ
import uuid
from collections.abc import Iterator, Mapping
from pathlib import Path

__all__ = [
    "add_mask",
    "error",
    "escape_data",
    "escape_property",
    "group",
    "info",
    "warning",
    "write_github_output",
]


def escape_data(value: str) -> str:
    """Escape ``value`` for use as a workflow-command message."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def escape_property(value: str) -> str:
    """Escape ``value`` for use as a workflow-command property."""
    return escape_data(value).replace(":", "%3A").replace(",", "%2C")


def _issue(
    command: str, message: str, *, title: str | None, stream: typ.TextIO | None
) -> None:
    properties = f" title={escape_property(title)}" if title else ""
    print(
        f"::{command}{properties}::{escape_data(message)}",
        file=sys.stderr if stream is None else stream,
    )


def info(message: str) -> None:
    """Print a progress message to the job log."""
    print(message)


def warning(
    message: str, *, title: str | None = None, stream: typ.TextIO | None = None
) -> None:
    """Emit a ``::warning`` annotation."""
    _issue("warning", message, title=title, stream=stream)


def error(
    message: str, *, title: str | None = None, stream: typ.TextIO | None = None
) -> None:
    """Emit an ``::error`` annotation."""
    _issue("error", message, title=title, stream=stream)


def add_mask(value: str) -> None:
    """Ask the runner to redact ``value`` from subsequent log output."""
    if value:
        print(f"::add-mask::{escape_data(value)}")


@contextlib.contextmanager
def group(title: str) -> Iterator[None]:
    """Fold the output produced inside the block under ``title``."""
    print(f"::group::{escape_data(title)}")
    try:
        yield
    finally:
        print("::endgroup::")


def write_github_output(file: Path, values: Mapping[str, object]) -> None:
    """Append ``values`` to ``file`` using GitHub's multiline syntax.

    Parameters
    ----------
    file:
        Path to the GitHub Actions output file (typically ``GITHUB_OUTPUT``).
    values:
        Mapping of output keys to values. ``None`` values are skipped; other
        values are rendered with :class:`str`.
    """

    file.parent.mkdir(parents=True, exist_ok=True)
    with file.open("a", encoding="utf-8") as handle:
        for key, value in values.items():
            if value is None:
                continue
            delimiter = f"EOF_{uuid.uuid4().hex}"
            handle.write(f"{key}<<{delimiter}\n{value}\n{delimiter}\n")
