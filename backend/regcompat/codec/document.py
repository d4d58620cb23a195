"""Section-keyed compat document and its TOML text form.

A compat document is a list of sections. Each section is keyed by a version
window written in registry range notation and maps dependency names to the
range of that dependency's versions the package accepts inside the window::

    ["*"]
    DepB = "0.1"
    julia = "1.10-1"

    ["0 - 0.1.0-beta.1"]
    DepA = "0.1"

    ["0.1.0-beta.2 - *"]
    DepA = "0.1-0.2"

Encoding is canonical: the catch-all section comes first, the remaining
windows follow by ascending lower and then upper bound, and entries are
sorted by name. Re-encoding a decoded canonical document reproduces it
byte for byte.
"""

from dataclasses import dataclass, field
import re
import tomllib
from typing import Any

from ..config import is_valid_entry_name
from ..core.exceptions import DocumentError, ParseError
from ..core.ranges import Interval, RangeSet

_BARE_KEY = re.compile(r"^[A-Za-z0-9_-]+$")


@dataclass
class DocumentSection:
    """One version window and the entries it defines."""

    window: Interval
    entries: dict[str, RangeSet] = field(default_factory=dict)

    @property
    def key(self) -> str:
        """Window rendered as the section key."""
        return self.window.render()

    @property
    def is_catch_all(self) -> bool:
        return self.window.is_unbounded

    def sort_key(self) -> tuple:
        return (not self.is_catch_all, self.window.sort_key())


@dataclass
class CompatDocument:
    """Decoded compat document."""

    sections: list[DocumentSection] = field(default_factory=list)

    def ordered_sections(self) -> list[DocumentSection]:
        """Sections in canonical order."""
        return sorted(self.sections, key=DocumentSection.sort_key)

    def catch_all(self) -> DocumentSection | None:
        """The section covering every version, if present."""
        for section in self.sections:
            if section.is_catch_all:
                return section
        return None

    def sections_defining(self, name: str) -> list[DocumentSection]:
        """Sections holding an entry for ``name``, in canonical order."""
        return [s for s in self.ordered_sections() if name in s.entries]

    def entry_names(self) -> list[str]:
        """All entry names across sections, sorted."""
        return sorted({name for s in self.sections for name in s.entries})

    def to_dict(self) -> dict[str, dict[str, str | list[str]]]:
        """Plain mapping of section key to rendered entries."""
        return {
            section.key: {
                name: _plain_value(section.entries[name])
                for name in sorted(section.entries)
            }
            for section in self.ordered_sections()
        }


def _plain_value(ranges: RangeSet) -> str | list[str]:
    pieces = ranges.pieces()
    return pieces[0] if len(pieces) == 1 else pieces


def _toml_string(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _toml_key(key: str) -> str:
    return key if _BARE_KEY.match(key) else _toml_string(key)


def _toml_value(ranges: RangeSet) -> str:
    value = _plain_value(ranges)
    if isinstance(value, str):
        return _toml_string(value)
    return "[" + ", ".join(_toml_string(piece) for piece in value) + "]"


def encode_document(document: CompatDocument) -> str:
    """Render a document to canonical TOML text.

    Args:
        document: Document to encode

    Returns:
        TOML text, or the empty string for a document without sections
    """
    lines: list[str] = []
    for section in document.ordered_sections():
        if lines:
            lines.append("")
        lines.append(f"[{_toml_key(section.key)}]")
        for name in sorted(section.entries):
            lines.append(f"{_toml_key(name)} = {_toml_value(section.entries[name])}")

    return "\n".join(lines) + "\n" if lines else ""


def _decode_value(key: str, name: str, value: Any) -> RangeSet:
    if isinstance(value, str):
        return RangeSet.parse_registry(value)

    if isinstance(value, list) and value and all(isinstance(v, str) for v in value):
        ranges = RangeSet()
        for piece in value:
            ranges = ranges.union(RangeSet.parse_registry(piece))
        return ranges

    raise DocumentError(
        f"Entry '{name}' in section [{key}] must be a range string or a "
        f"list of range strings, got {value!r}",
        clause=name,
    )


def _decode_section(key: str, table: Any) -> list[DocumentSection]:
    if not isinstance(table, dict):
        raise DocumentError(
            f"Top-level key '{key}' must be a section table", clause=key
        )

    try:
        windows = RangeSet.parse_registry(key)
    except ParseError as e:
        raise DocumentError(
            f"Invalid section window [{key}]: {e}", clause=key, cause=e
        ) from e

    entries: dict[str, RangeSet] = {}
    for name, value in table.items():
        if not is_valid_entry_name(name):
            raise DocumentError(
                f"Invalid entry name '{name}' in section [{key}]", clause=name
            )
        try:
            entries[name] = _decode_value(key, name, value)
        except DocumentError:
            raise
        except ParseError as e:
            raise DocumentError(
                f"Invalid range for '{name}' in section [{key}]: {e}",
                clause=e.clause,
                cause=e,
            ) from e

    # A key listing several disjoint windows applies its entries to each
    return [
        DocumentSection(window=window, entries=dict(entries))
        for window in windows.intervals
    ]


def decode_document(data: str | bytes) -> CompatDocument:
    """Parse TOML text into a document.

    Args:
        data: Document text or UTF-8 bytes; empty input is an empty document

    Returns:
        Decoded document, sections in file order

    Raises:
        DocumentError: If the text is not valid TOML or has the wrong shape
    """
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DocumentError(f"Document is not valid UTF-8: {e}", cause=e) from e

    try:
        parsed = tomllib.loads(data)
    except tomllib.TOMLDecodeError as e:
        raise DocumentError(f"Document is not valid TOML: {e}", cause=e) from e

    document = CompatDocument()
    for key, table in parsed.items():
        document.sections.extend(_decode_section(key, table))
    return document
