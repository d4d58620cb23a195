"""Version ranges and their two textual notations.

A :class:`RangeSet` is a normalized union of disjoint intervals over the
version order. Two notations are understood:

* *requirement* notation, written by package authors (``"0.1, 0.2"``,
  ``"^1.2"``, ``"~0.3"``, ``">= 1.6"``), where a bare bound is a caret range;
* *registry* notation, stored in compat documents (``"0.1-0.2"``,
  ``"1.10-1"``, ``"0.1.0-beta.2 - *"``), where a bare bound covers every
  version starting with it.

Rendering always produces canonical registry notation.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
import re

from .exceptions import ParseError
from .version import _IDENTIFIER, Version

_BOUND_PATTERN = re.compile(
    r"^([0-9]+)(?:\.([0-9]+))?(?:\.([0-9]+))?"
    rf"(?:-({_IDENTIFIER}(?:\.{_IDENTIFIER})*))?$"
)
_SPACED_HYPHEN = re.compile(r"^(\S+)\s+-\s+(\S+)$")
_COMPACT_HYPHEN = re.compile(
    r"^([0-9]+(?:\.[0-9]+){0,2})-([0-9]+(?:\.[0-9]+){0,2}|\*)$"
)

_ZERO_FLOOR = Version(0, 0, 0, prerelease=())


@dataclass(frozen=True)
class Bound:
    """A possibly truncated version bound such as ``0.1`` or ``1.2.3-rc.1``."""

    parts: tuple[int, ...]
    prerelease: tuple[str, ...] | None = None

    @classmethod
    def parse(cls, text: str) -> "Bound":
        match = _BOUND_PATTERN.match(text.strip())
        if not match:
            raise ParseError(f"Invalid version bound: '{text}'", clause=text)

        major, minor, patch, prerelease = match.groups()
        parts = tuple(int(p) for p in (major, minor, patch) if p is not None)
        if prerelease and len(parts) != 3:
            raise ParseError(
                f"Pre-release bound needs major.minor.patch: '{text}'", clause=text
            )
        return cls(parts, tuple(prerelease.split(".")) if prerelease else None)

    @property
    def padded(self) -> tuple[int, int, int]:
        major, minor, patch = (*self.parts, 0, 0)[:3]
        return (major, minor, patch)

    def lower(self) -> Version | None:
        """First version covered by this bound; None when unbounded below.

        Bounds without a pre-release start at a floor, so both ``0.2`` and
        ``0.8.11`` admit the pre-releases of the release they name, the way
        Pkg compares bounds on major.minor.patch only.
        """
        if self.prerelease:
            return Version(*self.padded, prerelease=self.prerelease)
        floor = Version(*self.padded, prerelease=())
        return None if floor == _ZERO_FLOOR else floor

    def upper(self) -> Version:
        """Upper end: inclusive for a pre-release, otherwise an exclusive floor."""
        if self.prerelease:
            return Version(*self.padded, prerelease=self.prerelease)
        major, minor, patch = self.padded
        if len(self.parts) == 1:
            return Version(major + 1, 0, 0, prerelease=())
        if len(self.parts) == 2:
            return Version(major, minor + 1, 0, prerelease=())
        return Version(major, minor, patch + 1, prerelease=())


def _lower_key(lo: Version | None) -> tuple:
    return (0,) if lo is None else (1, lo.sort_key())


def _upper_key(hi: Version | None) -> tuple:
    return (1,) if hi is None else (0, hi.sort_key())


def _starts_before_end(lo: Version | None, hi: Version | None) -> bool:
    """True when some version is >= ``lo`` and still below ``hi``."""
    if hi is not None and hi == _ZERO_FLOOR:
        return False
    if lo is None or hi is None:
        return True
    return lo < hi if hi.is_floor else lo <= hi


def _render_lower(lo: Version | None) -> str:
    if lo is None:
        return "0"
    if lo.is_prerelease:
        return str(lo.release()) + "-" + ".".join(lo.prerelease or ())
    if not lo.is_floor:
        # A bare release would read back as its floor
        raise ValueError(f"Release lower bound {lo!r} cannot be rendered")

    major, minor, patch = lo.core
    if patch > 0:
        return f"{major}.{minor}.{patch}"
    return f"{major}.{minor}" if minor else f"{major}"


def _render_upper(hi: Version | None) -> str:
    if hi is None:
        return "*"
    if hi.is_prerelease:
        return str(hi.release()) + "-" + ".".join(hi.prerelease or ())

    major, minor, patch = hi.core
    if patch > 0:
        return f"{major}.{minor}.{patch - 1}"
    if minor > 0:
        return f"{major}.{minor - 1}"
    if major > 0:
        return f"{major - 1}"
    raise ValueError("Upper bound below 0.0.0 cannot be rendered")


@dataclass(frozen=True)
class Interval:
    """Contiguous run of versions.

    ``lo`` is the first covered version (``None`` for unbounded below).
    ``hi`` is ``None`` for unbounded above, an exclusive floor, or an
    inclusive pre-release.
    """

    lo: Version | None
    hi: Version | None

    def contains(self, version: Version) -> bool:
        if self.lo is not None and version < self.lo:
            return False
        if self.hi is None:
            return True
        return version < self.hi if self.hi.is_floor else version <= self.hi

    def sort_key(self) -> tuple:
        """Order by lower end, then by upper end."""
        return (_lower_key(self.lo), _upper_key(self.hi))

    def intersects(self, other: "Interval") -> bool:
        return _starts_before_end(self.lo, other.hi) and _starts_before_end(
            other.lo, self.hi
        )

    @property
    def is_empty(self) -> bool:
        return not _starts_before_end(self.lo, self.hi)

    @property
    def is_unbounded(self) -> bool:
        return self.lo is None and self.hi is None

    def render(self) -> str:
        """Canonical registry notation for this interval."""
        if self.lo is None and self.hi is None:
            return "*"

        lower = _render_lower(self.lo)
        upper = _render_upper(self.hi)
        # "1.0.0-1" alone would read back as a hyphen range
        single = upper != "*" and not _COMPACT_HYPHEN.match(upper)
        if single and Bound.parse(upper).lower() == self.lo:
            return upper

        separator = " - " if "-" in lower or "-" in upper else "-"
        return f"{lower}{separator}{upper}"

    def __str__(self) -> str:
        return self.render()


def _interval(lo: Version | None, hi: Version | None, clause: str) -> Interval:
    interval = Interval(lo, hi)
    if interval.is_empty:
        raise ParseError(f"Range '{clause}' contains no versions", clause=clause)
    return interval


def _parse_hyphen(clause: str) -> Interval | None:
    match = _SPACED_HYPHEN.match(clause) or _COMPACT_HYPHEN.match(clause)
    if not match:
        return None

    first, second = match.groups()
    lo = None if first == "*" else Bound.parse(first).lower()
    hi = None if second == "*" else Bound.parse(second).upper()
    return _interval(lo, hi, clause)


def _parse_registry_clause(clause: str) -> Interval:
    if clause == "*":
        return Interval(None, None)

    interval = _parse_hyphen(clause)
    if interval is not None:
        return interval

    bound = Bound.parse(clause)
    return _interval(bound.lower(), bound.upper(), clause)


def _caret_upper(bound: Bound) -> Version:
    major, minor, patch = bound.padded
    if major > 0 or len(bound.parts) == 1:
        return Version(major + 1, 0, 0, prerelease=())
    if minor > 0 or len(bound.parts) == 2:
        return Version(0, minor + 1, 0, prerelease=())
    return Version(0, 0, patch + 1, prerelease=())


def _tilde_upper(bound: Bound) -> Version:
    major, minor, _patch = bound.padded
    if len(bound.parts) == 1:
        return Version(major + 1, 0, 0, prerelease=())
    return Version(major, minor + 1, 0, prerelease=())


def _parse_requirement_clause(clause: str) -> Interval:  # noqa: PLR0911
    if clause == "*":
        return Interval(None, None)

    interval = _parse_hyphen(clause)
    if interval is not None:
        return interval

    if clause.startswith((">=", "≥")):
        operand = clause[2:] if clause.startswith(">=") else clause[1:]
        return Interval(Bound.parse(operand).lower(), None)

    if clause.startswith("<"):
        bound = Bound.parse(clause[1:])
        if bound.prerelease:
            raise ParseError(
                f"Exclusive pre-release bound is not supported: '{clause}'",
                clause=clause,
            )
        return _interval(None, Version(*bound.padded, prerelease=()), clause)

    if clause.startswith("="):
        bound = Bound.parse(clause[1:])
        return _interval(bound.lower(), bound.upper(), clause)

    if clause.startswith("~"):
        bound = Bound.parse(clause[1:])
        return _interval(bound.lower(), _tilde_upper(bound), clause)

    bound = Bound.parse(clause[1:] if clause.startswith("^") else clause)
    return _interval(bound.lower(), _caret_upper(bound), clause)


def _split_clauses(text: str) -> list[str]:
    if not isinstance(text, str):
        raise ParseError(f"Range must be a string, got {text!r}", clause=str(text))

    clauses = [clause.strip() for clause in text.split(",")]
    for clause in clauses:
        if not clause:
            raise ParseError(f"Empty clause in range '{text}'", clause=text)
    return clauses


def _parse_clauses(
    text: str, parse_clause: Callable[[str], Interval]
) -> list[Interval]:
    intervals = []
    for clause in _split_clauses(text):
        try:
            intervals.append(parse_clause(clause))
        except ParseError as e:
            if e.clause == clause:
                raise
            raise ParseError(
                f"Invalid range clause '{clause}': {e}", clause=clause, cause=e
            ) from e
    return intervals


@dataclass(frozen=True)
class RangeSet:
    """Sorted union of disjoint, non-adjacent intervals."""

    intervals: tuple[Interval, ...] = ()

    @classmethod
    def from_intervals(cls, intervals: Iterable[Interval]) -> "RangeSet":
        """Build a normalized set: sorted, with overlapping and adjacent runs merged."""
        ordered = sorted(
            (i for i in intervals if not i.is_empty),
            key=Interval.sort_key,
        )

        merged: list[Interval] = []
        for interval in ordered:
            if merged:
                last = merged[-1]
                touching = (
                    last.hi is None
                    or interval.lo is None
                    or interval.lo <= last.hi
                )
                if touching:
                    hi = max(last.hi, interval.hi, key=_upper_key)
                    merged[-1] = Interval(last.lo, hi)
                    continue
            merged.append(interval)

        return cls(tuple(merged))

    @classmethod
    def parse(cls, requirement: str) -> "RangeSet":
        """Parse an author-written requirement such as ``"0.1, 0.2"``.

        Raises:
            ParseError: Naming the offending clause
        """
        return cls.from_intervals(
            _parse_clauses(requirement, _parse_requirement_clause)
        )

    @classmethod
    def parse_registry(cls, text: str) -> "RangeSet":
        """Parse registry notation such as ``"0.1-0.2"`` or ``"0.8.11-0"``.

        Raises:
            ParseError: Naming the offending clause
        """
        return cls.from_intervals(_parse_clauses(text, _parse_registry_clause))

    @classmethod
    def full(cls) -> "RangeSet":
        return cls((Interval(None, None),))

    @property
    def is_empty(self) -> bool:
        return not self.intervals

    def contains(self, version: Version) -> bool:
        return any(interval.contains(version) for interval in self.intervals)

    def union(self, other: "RangeSet") -> "RangeSet":
        return RangeSet.from_intervals(self.intervals + other.intervals)

    def equals(self, other: "RangeSet") -> bool:
        """Semantic equality; string forms of the inputs do not matter."""
        return self.intervals == other.intervals

    def pieces(self) -> list[str]:
        """Rendered intervals, one string per disjoint piece."""
        return [interval.render() for interval in self.intervals]

    def render(self) -> str:
        return ", ".join(self.pieces())

    def __str__(self) -> str:
        return self.render()
