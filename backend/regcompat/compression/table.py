"""In-memory compat table: per-version truth and its section partition.

The table records, for every registered version, the map of dependency name
to accepted range that applies to that version. Consecutive versions whose
maps are identical form one :class:`Section`; the sections partition the
version history with no gaps and no overlaps.

Section windows are computed against the full registered version list with
the exact version order, pre-release identifiers included. A window starts
at the coarsest bound that still excludes the previous registered version
and ends at the coarsest bound that still excludes the next one.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from ..codec.document import CompatDocument, DocumentSection
from ..config import is_valid_entry_name
from ..core.exceptions import DocumentError, OverlapInvariantViolation, ParseError
from ..core.logging import get_logger
from ..core.ranges import Bound, Interval, RangeSet
from ..core.version import Version, as_version, ordered_versions

logger = get_logger(__name__)

CompatMap = dict[str, RangeSet]


def window_lower(versions: list[Version], index: int) -> Version | None:
    """Coarsest lower end admitting ``versions[index]`` but not its predecessor."""
    if index == 0:
        return None

    version = versions[index]
    previous = versions[index - 1]
    for parts in (version.core[:1], version.core[:2], version.core):
        candidate = Bound(parts).lower()
        if candidate is not None and previous < candidate <= version:
            return candidate

    if version.is_prerelease:
        return Version(*version.core, prerelease=version.prerelease)

    # A release right after its own pre-release starts just past that
    # pre-release: "1.0.0-rc.1.0" is the least version above "1.0.0-rc.1"
    return Version(*previous.core, prerelease=(*(previous.prerelease or ()), "0"))


def window_upper(versions: list[Version], index: int) -> Version | None:
    """Coarsest upper end admitting ``versions[index]`` but not its successor."""
    if index == len(versions) - 1:
        return None

    version = versions[index]
    following = versions[index + 1]
    for parts in (version.core[:1], version.core[:2], version.core):
        candidate = Bound(parts).upper()
        if following >= candidate:
            return candidate

    return Version(*version.core, prerelease=version.prerelease)


def run_window(versions: list[Version], first: int, last: int) -> Interval:
    """Window covering exactly ``versions[first:last + 1]`` among registered ones."""
    return Interval(window_lower(versions, first), window_upper(versions, last))


def same_compat(a: Mapping[str, RangeSet], b: Mapping[str, RangeSet]) -> bool:
    """Semantic equality of two compat maps; absence differs from any range."""
    if a.keys() != b.keys():
        return False
    return all(a[name].equals(b[name]) for name in a)


def parse_compat(compat: Mapping[str, "RangeSet | str"]) -> CompatMap:
    """Normalize declared requirements into ranges.

    Raises:
        ParseError: On an invalid name or requirement
    """
    parsed: CompatMap = {}
    for name, requirement in compat.items():
        if not is_valid_entry_name(name):
            raise ParseError(f"Invalid dependency name: '{name}'", clause=str(name))
        if isinstance(requirement, RangeSet):
            parsed[name] = requirement
        else:
            parsed[name] = RangeSet.parse(requirement)
    return parsed


@dataclass
class Section:
    """Maximal run of consecutive versions sharing one compat map."""

    window: Interval
    first: Version
    last: Version
    compat: CompatMap

    @property
    def key(self) -> str:
        return self.window.render()


@dataclass
class CompatTable:
    """Registered versions in precedence order with their compat maps."""

    versions: list[Version] = field(default_factory=list)
    compat: dict[Version, CompatMap] = field(default_factory=dict)

    @classmethod
    def from_history(
        cls, history: Iterable[tuple["Version | str", Mapping[str, "RangeSet | str"]]]
    ) -> "CompatTable":
        """Build a table from (version, requirements) facts in any order."""
        table = cls()
        for version, compat in history:
            table = table.with_version(version, compat)
        return table

    @classmethod
    def from_document(
        cls,
        document: CompatDocument,
        versions: Iterable["Version | str"],
        strict: bool = True,
    ) -> "CompatTable":
        """Expand a document over the registered versions.

        Raises:
            OverlapInvariantViolation: In strict mode, when a dependency is
                defined twice for one version
        """
        table, _conflicts = expand_document(document, versions, strict=strict)
        return table

    def with_version(
        self, version: "Version | str", compat: Mapping[str, "RangeSet | str"]
    ) -> "CompatTable":
        """Return a new table with ``version`` registered (or replaced).

        Raises:
            ParseError: On an invalid version or requirement
            OrderingAmbiguity: If ``version`` ties with a distinct registered one
        """
        new_version = as_version(version)
        parsed = parse_compat(compat)
        versions = ordered_versions([*self.versions, new_version])

        updated = {v: dict(m) for v, m in self.compat.items()}
        updated[new_version] = parsed
        return CompatTable(versions=versions, compat=updated)

    def compat_for(self, version: "Version | str") -> CompatMap:
        """Declared compat of a registered version."""
        return dict(self.compat[as_version(version)])

    def dependency_names(self) -> list[str]:
        """Every name declared by any version, sorted."""
        return sorted({name for m in self.compat.values() for name in m})

    def runs(self, name: str) -> list[tuple[int, int, RangeSet]]:
        """Maximal runs of consecutive versions sharing one range for ``name``.

        Returns:
            (first index, last index, range) triples; versions that do not
            declare ``name`` belong to no run
        """
        runs: list[tuple[int, int, RangeSet]] = []
        for index, version in enumerate(self.versions):
            ranges = self.compat[version].get(name)
            if ranges is None:
                continue
            if runs:
                first, last, current = runs[-1]
                if last == index - 1 and current.equals(ranges):
                    runs[-1] = (first, index, current)
                    continue
            runs.append((index, index, ranges))
        return runs

    def sections(self) -> list[Section]:
        """Partition the history at every version where any entry changes."""
        boundaries: list[tuple[int, int]] = []
        for index, version in enumerate(self.versions):
            if boundaries and same_compat(
                self.compat[self.versions[index - 1]], self.compat[version]
            ):
                boundaries[-1] = (boundaries[-1][0], index)
            else:
                boundaries.append((index, index))

        return [
            Section(
                window=run_window(self.versions, first, last),
                first=self.versions[first],
                last=self.versions[last],
                compat=dict(self.compat[self.versions[first]]),
            )
            for first, last in boundaries
        ]

    def effective_compat(self, version: "Version | str") -> CompatMap:
        """Compat map of the single section whose window contains ``version``.

        Raises:
            KeyError: If no section covers ``version``
            OverlapInvariantViolation: If more than one section does
        """
        target = as_version(version)
        matches = [s for s in self.sections() if s.window.contains(target)]
        if len(matches) > 1:
            raise OverlapInvariantViolation(
                "<section>", str(target), matches[0].key, matches[1].key
            )
        if not matches:
            raise KeyError(f"No section covers version {target}")
        return dict(matches[0].compat)


@dataclass
class Conflict:
    """An entry of the old document that expansion could not keep.

    Either a dependency defined by two sections at one version, where the
    later window is kept, or an entry whose window covers no registered
    version at all, in which case ``version`` and ``kept_window`` are None.
    """

    dependency: str
    version: Version | None
    kept_window: str | None
    dropped_window: str

    def describe(self) -> str:
        if self.version is None:
            return (
                f"{self.dependency} in [{self.dropped_window}]: "
                "covers no registered version, dropped"
            )
        return (
            f"{self.dependency} at {self.version}: kept [{self.kept_window}], "
            f"dropped [{self.dropped_window}]"
        )


def _uncovered_entries(
    sections: list[DocumentSection],
    covering: set[tuple[int, str]],
    strict: bool,
) -> list[Conflict]:
    dropped: list[Conflict] = []
    for index, section in enumerate(sections):
        for name in sorted(section.entries):
            if (index, name) in covering:
                continue
            if strict:
                raise DocumentError(
                    f"Entry '{name}' in section [{section.key}] covers no "
                    "registered version",
                    clause=name,
                )
            logger.warning(
                "Dropped compat entry covering no registered version",
                dependency=name,
                window=section.key,
            )
            dropped.append(
                Conflict(
                    dependency=name,
                    version=None,
                    kept_window=None,
                    dropped_window=section.key,
                )
            )
    return dropped


def expand_document(
    document: CompatDocument,
    versions: Iterable["Version | str"],
    strict: bool = True,
    require_coverage: bool = False,
) -> tuple[CompatTable, list[Conflict]]:
    """Decompress a document into per-version compat maps.

    In strict mode a dependency defined twice for one version raises. Otherwise
    the section with the later window wins, since a version-specific window
    carries the newer fact than a stale catch-all entry.

    Args:
        document: Decoded document
        versions: Every registered version
        strict: Raise on conflicts instead of resolving them
        require_coverage: Treat an entry that covers no registered version
            as a conflict; a caller about to rewrite the document would
            otherwise lose it

    Returns:
        The table and the conflicts that were resolved

    Raises:
        OverlapInvariantViolation: In strict mode, on a doubly defined entry
        DocumentError: In strict mode with ``require_coverage``, on an entry
            that covers no registered version
    """
    ordered = ordered_versions(versions)
    sections = document.ordered_sections()
    compat: dict[Version, CompatMap] = {}
    conflicts: list[Conflict] = []
    covering: set[tuple[int, str]] = set()

    for version in ordered:
        chosen: dict[str, tuple[RangeSet, int]] = {}
        for index, section in enumerate(sections):
            if not section.window.contains(version):
                continue
            for name, ranges in section.entries.items():
                covering.add((index, name))
                previous = chosen.get(name)
                if previous is None:
                    chosen[name] = (ranges, index)
                    continue

                earlier = sections[previous[1]].key
                if strict:
                    raise OverlapInvariantViolation(
                        name, str(version), earlier, section.key
                    )

                # Sections are in canonical order, so this one starts later
                conflicts.append(
                    Conflict(
                        dependency=name,
                        version=version,
                        kept_window=section.key,
                        dropped_window=earlier,
                    )
                )
                logger.warning(
                    "Resolved overlapping compat entry",
                    dependency=name,
                    version=str(version),
                    kept=section.key,
                    dropped=earlier,
                )
                chosen[name] = (ranges, index)

        compat[version] = {name: value[0] for name, value in chosen.items()}

    if require_coverage:
        conflicts.extend(_uncovered_entries(sections, covering, strict))

    return CompatTable(versions=ordered, compat=compat), conflicts
