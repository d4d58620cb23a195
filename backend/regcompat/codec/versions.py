"""Registered version lists read from a registry ``Versions.toml``.

Only the top-level keys matter here: each one is a registered version. The
per-version tables (tree hashes, yanked flags) belong to the registry and
are ignored.
"""

from pathlib import Path
import tomllib

from ..core.exceptions import DocumentError
from ..core.version import Version, ordered_versions


def decode_versions(data: str | bytes) -> list[Version]:
    """Parse a versions document into registered versions in precedence order.

    Raises:
        DocumentError: If the text is not valid TOML
        ParseError: If a key is not a version
        OrderingAmbiguity: If two keys have the same precedence
    """
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DocumentError(
                f"Versions file is not valid UTF-8: {e}", cause=e
            ) from e

    try:
        parsed = tomllib.loads(data)
    except tomllib.TOMLDecodeError as e:
        raise DocumentError(f"Versions file is not valid TOML: {e}", cause=e) from e

    return ordered_versions(parsed.keys())


def read_versions_file(path: str | Path) -> list[Version]:
    """Read registered versions from a ``Versions.toml`` file."""
    return decode_versions(Path(path).read_text(encoding="utf-8"))
