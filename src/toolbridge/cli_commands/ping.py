"""``toolbridge ping`` — check that a server answers."""

from __future__ import annotations

import asyncio
import sys
from typing import TYPE_CHECKING

import click

from toolbridge.cli_commands._connection import connection_options
from toolbridge.cli_commands._output import console, print_error
from toolbridge.protocols.errors import ToolBridgeError

if TYPE_CHECKING:
    from toolbridge.core.config import ConnectionConfig


@click.command()
@connection_options
def ping(connection: ConnectionConfig) -> None:
    """Send a JSON-RPC ping to the server."""
    from toolbridge.sdk import invoker

    try:
        alive = asyncio.run(invoker.ping(connection))
    except ToolBridgeError as exc:
        print_error("Unreachable", exc)
        sys.exit(1)

    if not alive:
        console.print(f"[yellow]{connection.url} did not acknowledge the ping.[/yellow]")
        sys.exit(1)
    console.print(f"[green]{connection.url} is reachable.[/green]")
