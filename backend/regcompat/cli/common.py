"""Shared helpers for CLI commands: inputs, output and exit codes."""

from collections.abc import Iterable
import os
from pathlib import Path
import sys
import tempfile
from typing import Any, NoReturn

import rich_click as click

from ..codec import read_versions_file
from ..core.exceptions import (
    CompatError,
    OrderingAmbiguity,
    OverlapInvariantViolation,
    ParseError,
)
from ..core.version import Version, ordered_versions

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_INPUT_ERROR = 2
EXIT_INTERNAL_ERROR = 4


def exit_code_for(error: Exception) -> int:
    """Map an engine error to the CLI exit code."""
    if isinstance(error, OverlapInvariantViolation):
        return EXIT_INVALID
    if isinstance(error, ParseError | OrderingAmbiguity | OSError):
        return EXIT_INPUT_ERROR
    return EXIT_INTERNAL_ERROR


def fail(error: Exception, verbose: bool = False) -> NoReturn:
    """Report ``error`` and exit with its code."""
    kind = type(error).__name__ if isinstance(error, CompatError) else "Error"
    click.echo(f"❌ {kind}: {error}")
    if verbose and error.__cause__ is not None:
        click.echo(f"   Caused by: {error.__cause__}")
    sys.exit(exit_code_for(error))


def parse_compat_entries(entries: Iterable[str]) -> dict[str, str]:
    """Split ``NAME=REQUIREMENT`` options into a mapping.

    Raises:
        ParseError: If an entry has no ``=`` or repeats a name
    """
    compat: dict[str, str] = {}
    for entry in entries:
        name, sep, requirement = entry.partition("=")
        name = name.strip()
        if not sep or not name:
            raise ParseError(
                f"Compat entry must look like NAME=REQUIREMENT: '{entry}'",
                clause=entry,
            )
        if name in compat:
            raise ParseError(f"Compat for '{name}' given twice", clause=entry)
        compat[name] = requirement.strip().strip("\"'")
    return compat


def load_registered_versions(
    registered: Iterable[str], versions_file: str | None
) -> list[Version]:
    """Collect registered versions from ``--registered`` and ``--versions-file``."""
    versions: list[Any] = list(registered)
    if versions_file:
        versions.extend(read_versions_file(versions_file))
    return ordered_versions(versions)


def read_document(path: str | Path) -> str:
    """Read a compat document; a missing file is an empty document."""
    file_path = Path(path)
    if not file_path.exists():
        return ""
    return file_path.read_text(encoding="utf-8")


def write_document_atomic(path: str | Path, text: str) -> None:
    """Replace ``path`` with ``text`` via a temporary file and rename."""
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
            handle.write(text)
        os.replace(tmp_name, file_path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


# Options shared by every command that needs the registered version list
registered_option = click.option(
    "--registered",
    "-r",
    multiple=True,
    metavar="VERSION",
    help="🔢 **Registered version** (repeatable)",
)
versions_file_option = click.option(
    "--versions-file",
    type=click.Path(exists=True, dir_okay=False),
    help="📁 **Versions.toml** listing registered versions as top-level keys",
)
