"""Command-line interface for the compat engine."""

import rich_click as click

from .. import __version__
from ..config import CompatConfig
from ..core.logging import configure_logging
from .register import register_command
from .replay import replay_command
from .show import check_command, show_command

# Configure rich-click styling
click.rich_click.TEXT_MARKUP = "rich"
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.STYLE_OPTION = "bold cyan"
click.rich_click.STYLE_ARGUMENT = "bold yellow"
click.rich_click.STYLE_COMMAND = "bold green"
click.rich_click.STYLE_SWITCH = "bold blue"


@click.group(name="regcompat")
@click.version_option(version=__version__, prog_name="regcompat")
def main() -> None:
    """📦 **Registry compat** - Overlap-free compat documents for package registries.

    Records the dependency compat of each registered version and keeps the
    section-keyed compat document free of overlapping ranges, pre-release
    versions included.
    """
    config = CompatConfig()
    configure_logging(
        environment=config.environment,
        log_level=config.log_level,
        json_logs=config.json_logs,
    )


# Add commands to the group
main.add_command(register_command)
main.add_command(show_command)
main.add_command(check_command)
main.add_command(replay_command)


if __name__ == "__main__":
    main()


__all__ = ["main"]
