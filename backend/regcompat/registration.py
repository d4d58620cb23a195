"""Version registration: decode, merge, recompress, encode.

:func:`register_version` is a pure function from the existing document and
one new (version, compat) fact to the new document. It keeps no state
between calls, so a caller that loses a race on the persisted file can
simply rerun it against the fresh document. Persistence and locking belong
to the caller.
"""

from collections.abc import Iterable, Mapping

from pydantic import BaseModel, Field

from .codec.document import decode_document, encode_document
from .compression.compressor import compress
from .compression.table import CompatTable, expand_document
from .config import CompatConfig
from .core.exceptions import CompatError, DocumentError
from .core.logging import CompressionLogger, bound_context, get_logger
from .core.version import Version, as_version

logger = get_logger(__name__)


class RegistrationResult(BaseModel):
    """Outcome of registering one version."""

    package: str = Field(description="Package name or UUID")
    version: str = Field(description="Registered version")
    document: str = Field(description="New document text")
    changed: bool = Field(description="Whether the document text changed")
    versions: list[str] = Field(
        default_factory=list, description="All registered versions, ascending"
    )
    section_count: int = Field(ge=0, description="Sections in the new document")
    repaired: list[str] = Field(
        default_factory=list,
        description="Overlapping entries of the old document that were dropped",
    )


def _as_text(document: str | bytes | None) -> str:
    if document is None:
        return ""
    if isinstance(document, bytes):
        try:
            return document.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DocumentError(f"Document is not valid UTF-8: {e}", cause=e) from e
    return document


def plan_registration(
    package_id: str,
    new_version: Version | str,
    new_compat: Mapping[str, str],
    existing_document: str | bytes | None,
    registered_versions: Iterable[Version | str],
    config: CompatConfig | None = None,
) -> RegistrationResult:
    """Compute the document that results from registering ``new_version``.

    Args:
        package_id: Package name or UUID, used for log context
        new_version: Version being registered
        new_compat: Declared requirement per dependency name
        existing_document: Current document; empty or None for a new package
        registered_versions: Versions registered before this one
        config: Engine configuration; defaults are read from the environment

    Returns:
        RegistrationResult holding the new document text

    Raises:
        ParseError: On malformed versions, requirements or document text
        OrderingAmbiguity: If two distinct versions share a precedence
        OverlapInvariantViolation: If the old document overlaps (strict mode)
            or recompression produced an invalid document
        DocumentError: If the old document has entries but no registered
            versions are given, or (strict mode) an entry covers none of them
    """
    config = config or CompatConfig()
    version = as_version(new_version)
    old_text = _as_text(existing_document)
    registered = list(registered_versions)

    with bound_context(package=package_id, version=str(version)):
        if config.runtime_name not in new_compat:
            logger.info("No runtime constraint declared", runtime=config.runtime_name)

        with CompressionLogger(logger, "decode"):
            old_document = decode_document(old_text)
            if old_document.entry_names() and not registered:
                raise DocumentError(
                    "Existing compat document has entries but no registered "
                    "versions were given"
                )
            table, conflicts = expand_document(
                old_document,
                registered,
                strict=config.strict_decode,
                require_coverage=True,
            )

        with CompressionLogger(logger, "compress") as op:
            updated = table.with_version(version, new_compat)
            document = compress(updated)
            op.log_progress(
                "Recompressed history",
                versions=len(updated.versions),
                sections=len(document.sections),
            )

        with CompressionLogger(logger, "encode"):
            text = encode_document(document)
            _verify_round_trip(text, updated)

        logger.info(
            "Registered version",
            changed=text != old_text,
            sections=len(document.sections),
            repaired=len(conflicts),
        )

    return RegistrationResult(
        package=package_id,
        version=str(version),
        document=text,
        changed=text != old_text,
        versions=[str(v) for v in updated.versions],
        section_count=len(document.sections),
        repaired=[conflict.describe() for conflict in conflicts],
    )


def _verify_round_trip(text: str, table: CompatTable) -> None:
    """Check the encoded text expands back to exactly ``table``."""
    decoded = CompatTable.from_document(decode_document(text), table.versions)
    if decoded != table:
        raise CompatError(
            "Encoded compat document does not reproduce the registered history"
        )


def register_version(
    package_id: str,
    new_version: Version | str,
    new_compat: Mapping[str, str],
    existing_document: str | bytes | None,
    registered_versions: Iterable[Version | str],
    config: CompatConfig | None = None,
) -> bytes:
    """Register a version and return the new document bytes.

    See :func:`plan_registration` for arguments and errors.
    """
    result = plan_registration(
        package_id,
        new_version,
        new_compat,
        existing_document,
        registered_versions,
        config=config,
    )
    return result.document.encode("utf-8")
