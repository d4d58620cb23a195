"""Compat table model and the compression algorithm."""

from .compressor import CATCH_ALL, compress
from .table import (
    CompatMap,
    CompatTable,
    Conflict,
    Section,
    expand_document,
    parse_compat,
    run_window,
    same_compat,
)
from .validator import (
    OverlapCheckResult,
    OverlapValidator,
    OverlapViolation,
    validate_document,
)

__all__ = [
    "CATCH_ALL",
    "CompatMap",
    "CompatTable",
    "Conflict",
    "OverlapCheckResult",
    "OverlapValidator",
    "OverlapViolation",
    "Section",
    "compress",
    "expand_document",
    "parse_compat",
    "run_window",
    "same_compat",
    "validate_document",
]
