"""Persisted document formats."""

from .document import (
    CompatDocument,
    DocumentSection,
    decode_document,
    encode_document,
)
from .versions import decode_versions, read_versions_file

__all__ = [
    "CompatDocument",
    "DocumentSection",
    "decode_document",
    "decode_versions",
    "encode_document",
    "read_versions_file",
]
