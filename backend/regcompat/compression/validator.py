"""Overlap validation for compat documents.

A dependency may be defined by several sections, but never by two sections
whose windows share a version. Consumers resolving compat for a version
union every section covering it and reject a name that appears twice.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from itertools import combinations

from ..codec.document import CompatDocument, DocumentSection
from ..core.exceptions import OverlapInvariantViolation
from ..core.version import Version, ordered_versions


@dataclass
class OverlapViolation:
    """One dependency defined by two intersecting windows."""

    dependency: str
    version: str
    first_window: str
    second_window: str

    def to_exception(self) -> OverlapInvariantViolation:
        return OverlapInvariantViolation(
            self.dependency, self.version, self.first_window, self.second_window
        )

    def __str__(self) -> str:
        return (
            f"{self.dependency}: [{self.first_window}] and "
            f"[{self.second_window}] both cover {self.version}"
        )


@dataclass
class OverlapCheckResult:
    """Result of overlap validation."""

    is_valid: bool
    violations: list[OverlapViolation] = field(default_factory=list)

    @property
    def violation_count(self) -> int:
        return len(self.violations)


class OverlapValidator:
    """Checks that no dependency is defined twice for any version."""

    def __init__(self, versions: Iterable["Version | str"] | None = None):
        """Initialize with the registered versions used for reporting.

        Args:
            versions: Registered versions; the first one inside an overlap is
                named in the violation. Without them the overlap start is used.
        """
        self.versions = ordered_versions(versions or [])

    def check(self, document: CompatDocument) -> OverlapCheckResult:
        """Validate every pair of sections defining the same dependency.

        Args:
            document: Document to validate

        Returns:
            OverlapCheckResult with is_valid flag and list of violations
        """
        violations: list[OverlapViolation] = []

        for name in document.entry_names():
            defining = document.sections_defining(name)
            for first, second in combinations(defining, 2):
                if first.window.intersects(second.window):
                    violations.append(
                        OverlapViolation(
                            dependency=name,
                            version=self._witness(first, second),
                            first_window=first.key,
                            second_window=second.key,
                        )
                    )

        return OverlapCheckResult(
            is_valid=len(violations) == 0,
            violations=violations,
        )

    def _witness(self, first: DocumentSection, second: DocumentSection) -> str:
        """Name a version covered by both windows."""
        for version in self.versions:
            if first.window.contains(version) and second.window.contains(version):
                return str(version)

        lows = [w.lo for w in (first.window, second.window) if w.lo is not None]
        return str(max(lows)) if lows else "0.0.0"


def validate_document(
    document: CompatDocument, versions: Iterable["Version | str"] | None = None
) -> None:
    """Raise on the first overlap in ``document``.

    Raises:
        OverlapInvariantViolation: Naming dependency, version and both windows
    """
    result = OverlapValidator(versions).check(document)
    if not result.is_valid:
        raise result.violations[0].to_exception()
