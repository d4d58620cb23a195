"""Compat table compression into a section-keyed document.

Every dependency is compressed on its own: each maximal run of consecutive
versions sharing one range becomes a single entry keyed by the run's
window. Entries of different dependencies that land on the same window
share a section, and a dependency constant over the whole history lands in
the catch-all section. A dependency is therefore never repeated in a
section where its range did not change, and no two of its entries cover
the same version.
"""

from ..codec.document import CompatDocument, DocumentSection
from ..core.logging import get_logger
from ..core.ranges import Interval, RangeSet
from .table import CompatTable, run_window
from .validator import validate_document

logger = get_logger(__name__)

CATCH_ALL = Interval(None, None)


def compress(table: CompatTable) -> CompatDocument:
    """Compute the minimal section document for a table.

    Args:
        table: Per-version compat facts

    Returns:
        Document whose expansion over ``table.versions`` reproduces the table;
        empty when no version is registered

    Raises:
        OverlapInvariantViolation: If the result defines a dependency twice
            for one version, which is a defect of this function
    """
    if not table.versions:
        return CompatDocument()

    grouped: dict[Interval, dict[str, RangeSet]] = {CATCH_ALL: {}}
    for name in table.dependency_names():
        runs = table.runs(name)
        for first, last, ranges in runs:
            window = run_window(table.versions, first, last)
            grouped.setdefault(window, {})[name] = ranges
        logger.debug("Compressed dependency", dependency=name, runs=len(runs))

    document = CompatDocument(
        sections=[
            DocumentSection(window=window, entries=entries)
            for window, entries in grouped.items()
        ]
    )
    validate_document(document, table.versions)
    return document
