"""CLI replay command implementation.

`regcompat replay` feeds a YAML registration history through the engine one
version at a time, the way a registry would see it, and prints the final
compat document. History files look like::

    package: CTFlows
    registrations:
      - version: 0.8.10-beta
        compat:
          CTBase: "0.16-0.17"
          CTModels: "0.6"
      - version: 0.8.11-beta
        compat:
          CTBase: "0.16-0.17"
          CTModels: "0.6.1"

A bare list of registrations is accepted as well.
"""

from pathlib import Path
import sys
import traceback
from typing import Any

import rich_click as click
import yaml

from ..config import CompatConfig
from ..core.exceptions import CompatError, ParseError
from ..core.version import Version
from ..registration import plan_registration
from .common import EXIT_INTERNAL_ERROR, EXIT_OK, fail, write_document_atomic


def load_history(path: str | Path) -> tuple[str, list[tuple[str, dict[str, str]]]]:
    """Read a registration history file.

    Returns:
        Package name and the (version, compat) registrations in file order

    Raises:
        ParseError: If the file is not YAML or has the wrong shape
    """
    file_path = Path(path)
    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ParseError(f"History is not valid YAML: {e}", cause=e) from e

    package = file_path.stem
    if isinstance(data, dict):
        package = str(data.get("package", package))
        data = data.get("registrations")

    if not isinstance(data, list):
        raise ParseError("History must be a list of registrations")

    history: list[tuple[str, dict[str, str]]] = []
    for index, item in enumerate(data, 1):
        if not isinstance(item, dict) or "version" not in item:
            raise ParseError(f"Registration {index} must have a 'version' key")

        compat = item.get("compat") or {}
        if not isinstance(compat, dict):
            raise ParseError(f"Registration {index}: 'compat' must be a mapping")

        for name, value in compat.items():
            # An unquoted 1.10 loads as the float 1.1
            if not isinstance(value, str):
                raise ParseError(
                    f"Registration {index}: compat for '{name}' must be a quoted "
                    f"string, got {value!r}",
                    clause=str(name),
                )

        history.append(
            (
                str(item["version"]),
                {str(name): value for name, value in compat.items()},
            )
        )
    return package, history


def _replay_implementation(
    history_file: str, output: str | None, steps: bool, verbose: bool
) -> None:
    config = CompatConfig()

    try:
        package, history = load_history(history_file)

        document = ""
        registered: list[Version | str] = []
        for version, compat in history:
            result = plan_registration(
                package, version, compat, document, registered, config=config
            )
            document = result.document
            registered.append(version)

            if steps:
                click.echo(f"# after {result.version}")
                click.echo(document)

        if output:
            write_document_atomic(output, document)
            click.echo(f"✅ Replayed {len(history)} registrations into {output}")
        elif not steps:
            click.echo(document, nl=False)

        sys.exit(EXIT_OK)

    except (CompatError, OSError) as e:
        fail(e, verbose)
    except Exception as e:
        click.echo(f"❌ Internal error: {e}")
        if verbose:
            click.echo("\nFull traceback:")
            click.echo(traceback.format_exc())
        sys.exit(EXIT_INTERNAL_ERROR)


@click.command("replay")
@click.argument(
    "history_file",
    type=click.Path(exists=True, dir_okay=False),
    help="**YAML registration history** to replay",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="💾 **Write the final document** to this file instead of stdout",
)
@click.option(
    "--steps",
    is_flag=True,
    help="🪜 **Print the document after every registration**",
)
@click.option("--verbose", "-v", is_flag=True, help="🔍 **Show error causes**")
def replay_command(
    history_file: str, output: str | None, steps: bool, verbose: bool
) -> None:
    """🔁 **Replay a registration history**

    Registers each version of HISTORY_FILE in order, starting from an empty
    document, and prints the resulting compat document.

    **Examples:**

    ```bash
    regcompat replay ctflows.yaml
    regcompat replay ctflows.yaml --steps
    regcompat replay ctflows.yaml -o Compat.toml
    ```
    """
    _replay_implementation(history_file, output, steps, verbose)
