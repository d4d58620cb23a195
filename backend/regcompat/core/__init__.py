"""Core functionality: versions, ranges, errors and logging."""

from .exceptions import (
    CompatError,
    DocumentError,
    OrderingAmbiguity,
    OverlapInvariantViolation,
    ParseError,
)
from .logging import (
    CompressionLogger,
    bound_context,
    configure_logging,
    get_logger,
)
from .ranges import Bound, Interval, RangeSet
from .version import Version, as_version, compare, ordered_versions

__all__ = [
    # Versions and ranges
    "Bound",
    "Interval",
    "RangeSet",
    "Version",
    "as_version",
    "compare",
    "ordered_versions",
    # Errors
    "CompatError",
    "DocumentError",
    "OrderingAmbiguity",
    "OverlapInvariantViolation",
    "ParseError",
    # Logging
    "CompressionLogger",
    "bound_context",
    "configure_logging",
    "get_logger",
]
