"""toolbridge CLI entrypoint."""

from __future__ import annotations

import logging

import click
from rich.logging import RichHandler

from toolbridge import __version__


@click.group()
@click.version_option(version=__version__, prog_name="toolbridge")
@click.option("--verbose", "-v", is_flag=True, help="Log protocol and normalization details.")
@click.option("--telemetry", is_flag=True, help="Export OpenTelemetry spans to the console.")
def main(verbose: bool, telemetry: bool) -> None:
    """toolbridge — list, ping and invoke tools on MCP-style servers."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )
    if telemetry:
        from toolbridge.utils.telemetry import configure_telemetry

        configure_telemetry()


# Register subcommands
from toolbridge.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
