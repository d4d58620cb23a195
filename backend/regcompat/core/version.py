"""Semantic version parsing and total ordering.

Versions order by (major, minor, patch) first and by pre-release identifiers
second, following semantic versioning precedence: a pre-release sorts before
its release, numeric identifiers compare numerically and sort before
alphanumeric ones, and a longer identifier list wins when all shared
identifiers are equal. Build metadata never takes part in ordering.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from functools import total_ordering
import re

from .exceptions import OrderingAmbiguity, ParseError

_IDENTIFIER = r"(?:0|[1-9][0-9]*|[0-9]*[a-zA-Z-][0-9a-zA-Z-]*)"

VERSION_PATTERN = re.compile(
    r"^v?(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)"
    rf"(?:-({_IDENTIFIER}(?:\.{_IDENTIFIER})*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)

# Sort ranks within one (major, minor, patch) triple
_RANK_FLOOR = 0
_RANK_PRERELEASE = 1
_RANK_RELEASE = 2


@total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """A semantic version.

    ``prerelease`` is ``None`` for a release and a tuple of identifiers for
    a pre-release. The empty tuple marks a *floor*: an internal bound that
    sorts before every pre-release of the same release and is never
    produced by :meth:`parse`.
    """

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] | None = None
    build: str | None = field(default=None)

    @classmethod
    def parse(cls, text: str) -> "Version":
        """Parse a version string such as ``0.1.0-beta.2`` or ``v1.2.3+sha``.

        Raises:
            ParseError: If the text is not a full semantic version
        """
        if not isinstance(text, str):
            raise ParseError(f"Invalid version: {text!r}", clause=str(text))

        match = VERSION_PATTERN.match(text.strip())
        if not match:
            raise ParseError(f"Invalid version: '{text}'", clause=text)

        major, minor, patch, prerelease, build = match.groups()
        return cls(
            major=int(major),
            minor=int(minor),
            patch=int(patch),
            prerelease=tuple(prerelease.split(".")) if prerelease else None,
            build=build,
        )

    @property
    def core(self) -> tuple[int, int, int]:
        """Return the (major, minor, patch) triple."""
        return (self.major, self.minor, self.patch)

    @property
    def is_prerelease(self) -> bool:
        """True for a real pre-release (floors excluded)."""
        return bool(self.prerelease)

    @property
    def is_floor(self) -> bool:
        """True for the internal floor bound of a release."""
        return self.prerelease == ()

    def floor(self) -> "Version":
        """Return the bound sorting just below every pre-release of this release."""
        return Version(self.major, self.minor, self.patch, prerelease=())

    def release(self) -> "Version":
        """Return the release this version belongs to."""
        return Version(self.major, self.minor, self.patch)

    def sort_key(self) -> tuple:
        """Key implementing semantic version precedence."""
        if self.prerelease is None:
            return (*self.core, _RANK_RELEASE, ())
        if not self.prerelease:
            return (*self.core, _RANK_FLOOR, ())

        identifiers = tuple(
            (0, int(part), "") if part.isdigit() else (1, 0, part)
            for part in self.prerelease
        )
        return (*self.core, _RANK_PRERELEASE, identifiers)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.sort_key() == other.sort_key()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __hash__(self) -> int:
        return hash(self.sort_key())

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += f"+{self.build}"
        return text

    def __repr__(self) -> str:
        if self.is_floor:
            return f"Version.floor({self.major}.{self.minor}.{self.patch})"
        return f"Version('{self}')"


def compare(a: Version, b: Version) -> int:
    """Compare two versions.

    Returns:
        -1 if ``a`` sorts before ``b``, 0 if they are equal, 1 otherwise
    """
    key_a = a.sort_key()
    key_b = b.sort_key()
    if key_a < key_b:
        return -1
    if key_a > key_b:
        return 1
    return 0


def as_version(value: "Version | str") -> Version:
    """Coerce a version string to a Version."""
    if isinstance(value, Version):
        return value
    return Version.parse(value)


def ordered_versions(versions: Iterable["Version | str"]) -> list[Version]:
    """Sort versions by precedence, collapsing exact duplicates.

    Raises:
        ParseError: If a version string is invalid
        OrderingAmbiguity: If two distinct version texts share a precedence
    """
    by_key: dict[tuple, Version] = {}
    for value in versions:
        version = as_version(value)
        key = version.sort_key()
        existing = by_key.get(key)
        if existing is not None and str(existing) != str(version):
            raise OrderingAmbiguity(str(existing), str(version))
        by_key[key] = version

    return [by_key[key] for key in sorted(by_key)]
