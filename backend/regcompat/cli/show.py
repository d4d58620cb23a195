"""CLI show and check commands.

`regcompat show` expands a compat document over the registered versions and
prints what each version accepts. `regcompat check` looks for dependencies
defined twice for one version, the defect older registry tools produced
around pre-releases.
"""

import json
import sys
import traceback
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table
import rich_click as click
import yaml

from ..codec import decode_document
from ..compression import CompatTable, OverlapCheckResult, OverlapValidator
from ..core.exceptions import CompatError
from .common import (
    EXIT_INTERNAL_ERROR,
    EXIT_INVALID,
    EXIT_OK,
    fail,
    load_registered_versions,
    read_document,
    registered_option,
    versions_file_option,
)

console = Console()


def _should_use_rich_formatting(force_colors: bool = False) -> bool:
    """Determine if we should use rich formatting based on environment."""
    return force_colors or console.is_terminal


def _internal_error(e: Exception, verbose: bool) -> None:
    click.echo(f"❌ Internal error: {e}")
    if verbose:
        click.echo("\nFull traceback:")
        click.echo(traceback.format_exc())
    sys.exit(EXIT_INTERNAL_ERROR)


def _effective_rows(table: CompatTable) -> list[tuple[str, str, dict[str, str]]]:
    """(version, section window, rendered compat) for each registered version."""
    sections = table.sections()
    rows = []
    for version in table.versions:
        compat = table.effective_compat(version)
        window = next(s.key for s in sections if s.window.contains(version))
        rows.append(
            (
                str(version),
                window,
                {name: compat[name].render() for name in sorted(compat)},
            )
        )
    return rows


def _output_show_table(
    rows: list[tuple[str, str, dict[str, str]]], force_colors: bool
) -> None:
    if not rows:
        click.echo("No registered versions")
        return

    if _should_use_rich_formatting(force_colors):
        table = Table(title="Effective compat", show_lines=False)
        table.add_column("Version", style="bold cyan")
        table.add_column("Section", style="yellow")
        table.add_column("Compat", style="green")
        for version, window, compat in rows:
            entries = "\n".join(f"{name} = {value}" for name, value in compat.items())
            table.add_row(version, escape(window), entries or "[dim]-[/dim]")
        console.print(table)
        return

    for version, window, compat in rows:
        click.echo(f"{version}  [{window}]")
        for name, value in compat.items():
            click.echo(f"    {name} = {value}")


@click.command("show")
@click.argument(
    "compat_file",
    type=click.Path(exists=True, dir_okay=False),
    help="**Compat document** to expand",
)
@registered_option
@versions_file_option
@click.option(
    "--format",
    type=click.Choice(["table", "json", "yaml"]),
    default="table",
    help="📋 **Output format**",
    show_default=True,
)
@click.option(
    "--repair",
    is_flag=True,
    help="🔧 **Tolerate overlaps** (later window wins) instead of failing",
)
@click.option("--verbose", "-v", is_flag=True, help="🔍 **Show error causes**")
@click.option(
    "--force-colors",
    is_flag=True,
    hidden=True,
    help="🎨 **Force colored output**",
)
def show_command(
    compat_file: str,
    registered: tuple[str, ...],
    versions_file: str | None,
    format: str,
    repair: bool,
    verbose: bool,
    force_colors: bool,
) -> None:
    """📖 **Show the effective compat of every registered version**

    **Examples:**

    ```bash
    regcompat show Compat.toml --versions-file Versions.toml
    regcompat show Compat.toml -r 0.1.0 -r 0.2.0 --format json
    ```
    """
    try:
        versions = load_registered_versions(registered, versions_file)
        document = decode_document(read_document(compat_file))
        table = CompatTable.from_document(document, versions, strict=not repair)
        rows = _effective_rows(table)

        if format == "json":
            output = {version: compat for version, _window, compat in rows}
            click.echo(json.dumps(output, indent=2))
        elif format == "yaml":
            output = {version: compat for version, _window, compat in rows}
            click.echo(yaml.dump(output, default_flow_style=False, sort_keys=False))
        else:
            _output_show_table(rows, force_colors)

        sys.exit(EXIT_OK)

    except CompatError as e:
        fail(e, verbose)
    except Exception as e:
        _internal_error(e, verbose)


def _output_check_table(
    result: OverlapCheckResult, compat_file: str, force_colors: bool
) -> None:
    if result.is_valid:
        if _should_use_rich_formatting(force_colors):
            console.print("✅ [bold green]No overlapping entries[/bold green]")
        else:
            click.echo("✅ No overlapping entries")
        click.echo(f"File: {compat_file}")
        return

    if _should_use_rich_formatting(force_colors):
        console.print("❌ [bold red]Overlapping entries found[/bold red]")
        for violation in result.violations:
            name = escape(violation.dependency)
            first = escape("[" + violation.first_window + "]")
            second = escape("[" + violation.second_window + "]")
            console.print(
                f"  [red]❌[/red] [bold yellow]{name}[/bold yellow]: "
                f"[cyan]{first}[/cyan] and [cyan]{second}[/cyan] both cover "
                f"[bold]{violation.version}[/bold]",
                markup=True,
                highlight=False,
            )
    else:
        click.echo("❌ Overlapping entries found")
        for violation in result.violations:
            click.echo(f"  ❌ {violation}")
    click.echo(f"File: {compat_file}")
    click.echo(f"Errors found: {result.violation_count}")


def _check_json(result: OverlapCheckResult, compat_file: str) -> dict[str, Any]:
    return {
        "status": "valid" if result.is_valid else "invalid",
        "file": compat_file,
        "violation_count": result.violation_count,
        "violations": [
            {
                "dependency": v.dependency,
                "version": v.version,
                "first_window": v.first_window,
                "second_window": v.second_window,
            }
            for v in result.violations
        ],
    }


@click.command("check")
@click.argument(
    "compat_file",
    type=click.Path(exists=True, dir_okay=False),
    help="**Compat document** to check",
)
@registered_option
@versions_file_option
@click.option(
    "--format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="📋 **Output format**",
    show_default=True,
)
@click.option("--verbose", "-v", is_flag=True, help="🔍 **Show error causes**")
@click.option(
    "--force-colors",
    is_flag=True,
    hidden=True,
    help="🎨 **Force colored output**",
)
def check_command(
    compat_file: str,
    registered: tuple[str, ...],
    versions_file: str | None,
    format: str,
    verbose: bool,
    force_colors: bool,
) -> None:
    """🔍 **Check a compat document for overlapping entries**

    Reports every dependency that two sections define for a common version.
    Registered versions, when given, are used to name the affected version.

    **Exit Codes:**
    - `0`: No overlaps ✅
    - `1`: Overlapping entries found ❌
    - `2`: Malformed document or version list 📁⚠️
    - `4`: Internal error 💥
    """
    try:
        versions = load_registered_versions(registered, versions_file)
        document = decode_document(read_document(compat_file))
        result = OverlapValidator(versions).check(document)

        if format == "json":
            click.echo(json.dumps(_check_json(result, compat_file), indent=2))
        else:
            _output_check_table(result, compat_file, force_colors)

        sys.exit(EXIT_OK if result.is_valid else EXIT_INVALID)

    except CompatError as e:
        fail(e, verbose)
    except Exception as e:
        _internal_error(e, verbose)
