"""CLI register command implementation.

This module implements `regcompat register`, which records the compat of one
new version into an existing compat document and rewrites it in place.
"""

import json
from pathlib import Path
import sys
import traceback

import rich_click as click

from ..config import CompatConfig
from ..core.exceptions import CompatError
from ..registration import RegistrationResult, plan_registration
from .common import (
    EXIT_INTERNAL_ERROR,
    EXIT_OK,
    fail,
    load_registered_versions,
    parse_compat_entries,
    read_document,
    registered_option,
    versions_file_option,
    write_document_atomic,
)


def _output_text(result: RegistrationResult, compat_file: str, dry_run: bool) -> None:
    """Report a registration in human-readable form."""
    if dry_run:
        click.echo(result.document, nl=False)
        return

    if result.changed:
        click.echo(f"✅ Registered {result.package} {result.version}")
    else:
        click.echo(f"✅ {result.package} {result.version} already up to date")
    click.echo(f"File: {compat_file}")
    click.echo(f"Sections: {result.section_count}")

    for entry in result.repaired:
        click.echo(f"   🔧 Repaired: {entry}")


def _register_implementation(  # noqa: PLR0913
    compat_file: str,
    version: str,
    compat_entries: tuple[str, ...],
    registered: tuple[str, ...],
    versions_file: str | None,
    package: str | None,
    dry_run: bool,
    repair: bool,
    format: str,
    verbose: bool,
) -> None:
    config = CompatConfig()
    if repair:
        config = config.model_copy(update={"strict_decode": False})

    package_id = package or Path(compat_file).resolve().parent.name

    try:
        new_compat = parse_compat_entries(compat_entries)
        versions = load_registered_versions(registered, versions_file)
        existing = read_document(compat_file)
        if existing.strip() and not (registered or versions_file):
            raise click.UsageError(
                "COMPAT_FILE already has entries; pass the registered versions "
                "with --registered or --versions-file"
            )

        result = plan_registration(
            package_id,
            version,
            new_compat,
            existing,
            versions,
            config=config,
        )

        if not dry_run and result.changed:
            write_document_atomic(compat_file, result.document)

        if format == "json":
            click.echo(json.dumps(result.model_dump(), indent=2))
        else:
            _output_text(result, compat_file, dry_run)

        sys.exit(EXIT_OK)

    except click.UsageError:
        raise
    except (CompatError, OSError) as e:
        fail(e, verbose)
    except Exception as e:
        click.echo(f"❌ Internal error: {e}")
        if verbose:
            click.echo("\nFull traceback:")
            click.echo(traceback.format_exc())
        sys.exit(EXIT_INTERNAL_ERROR)


@click.command("register")
@click.argument(
    "compat_file",
    type=click.Path(dir_okay=False),
    help="**Compat document** to update (created if missing)",
)
@click.argument("version", help="**Version** being registered")
@click.option(
    "--compat",
    "-c",
    "compat_entries",
    multiple=True,
    metavar="NAME=REQUIREMENT",
    help="📦 **Declared compat** of the new version (repeatable)",
)
@registered_option
@versions_file_option
@click.option(
    "--package",
    "-p",
    help="🏷️ **Package name** for log context (default: parent directory name)",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="👀 **Print the new document** instead of writing it",
)
@click.option(
    "--repair",
    is_flag=True,
    help="🔧 **Repair overlaps** in the existing document (later window wins)",
)
@click.option(
    "--format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="📋 **Output format**",
    show_default=True,
)
@click.option("--verbose", "-v", is_flag=True, help="🔍 **Show error causes**")
def register_command(  # noqa: PLR0913
    compat_file: str,
    version: str,
    compat_entries: tuple[str, ...],
    registered: tuple[str, ...],
    versions_file: str | None,
    package: str | None,
    dry_run: bool,
    repair: bool,
    format: str,
    verbose: bool,
) -> None:
    """📝 **Register a version in a compat document**

    Merges the declared compat of VERSION into COMPAT_FILE and rewrites the
    document so that no dependency is defined twice for any version,
    pre-releases included.

    **Examples:**

    ```bash
    regcompat register C/CTFlows/Compat.toml 0.8.11-beta \\
        -c CTBase=0.16-0.17 -c CTModels=0.6.1 --versions-file Versions.toml
    regcompat register Compat.toml 0.2.0 -c DepA=0.2 -r 0.1.0 --dry-run
    ```

    **Exit Codes:**
    - `0`: Document updated ✅
    - `1`: Existing document has overlapping entries ❌
    - `2`: Malformed version, requirement or document 📁⚠️
    - `4`: Internal error 💥
    """
    _register_implementation(
        compat_file,
        version,
        compat_entries,
        registered,
        versions_file,
        package,
        dry_run,
        repair,
        format,
        verbose,
    )
