"""``toolbridge tools`` — discover and invoke tools on a server."""

from __future__ import annotations

import asyncio
import json
import sys
from typing import TYPE_CHECKING, Any

import click

from toolbridge.cli_commands._connection import connection_options
from toolbridge.cli_commands._output import (
    console,
    print_error,
    print_json,
    print_normalization_log,
    print_tools_table,
)
from toolbridge.core.normalization.errors import ArgumentValidationError
from toolbridge.protocols.errors import ToolBridgeError

if TYPE_CHECKING:
    from toolbridge.core.config import ConnectionConfig


@click.group()
def tools() -> None:
    """Discover and invoke tools."""


@tools.command("list")
@connection_options
@click.option("--json", "as_json", is_flag=True, help="Print the catalog as JSON.")
def list_cmd(connection: ConnectionConfig, as_json: bool) -> None:
    """List the tools a server exposes."""
    from toolbridge.sdk import invoker

    try:
        catalog = asyncio.run(invoker.list_tools(connection))
    except ToolBridgeError as exc:
        print_error("Discovery error", exc)
        sys.exit(1)

    if not catalog:
        console.print("[yellow]No tools discovered.[/yellow]")
        return

    if as_json:
        print_json(
            "Tools",
            [
                {
                    "name": tool.name,
                    "description": tool.description,
                    "inputSchema": tool.parameter_schema.to_json_schema(),
                }
                for tool in catalog
            ],
        )
        return
    print_tools_table(catalog)


@tools.command("invoke")
@connection_options
@click.argument("tool_name")
@click.option("--arg", "-a", "pairs", multiple=True, help="Argument as key=value (repeatable).")
@click.option("--json", "args_json", default=None, help="Arguments as a JSON object.")
def invoke_cmd(
    connection: ConnectionConfig,
    tool_name: str,
    pairs: tuple[str, ...],
    args_json: str | None,
) -> None:
    """Normalize arguments and invoke TOOL_NAME."""
    from toolbridge.sdk import invoker

    raw_arguments = _parse_arguments(pairs, args_json)

    try:
        outcome = asyncio.run(invoker.invoke(connection, tool_name, raw_arguments))
    except ArgumentValidationError as exc:
        print_normalization_log(exc.log)
        print_error("Validation error", exc)
        sys.exit(1)
    except ToolBridgeError as exc:
        print_error("Invocation error", exc)
        sys.exit(1)

    print_normalization_log(outcome.log)
    print_json("Arguments", outcome.normalized_arguments)
    print_json("Result", outcome.result)


def _parse_arguments(pairs: tuple[str, ...], args_json: str | None) -> dict[str, Any]:
    """Merge ``--json`` and ``--arg`` values; ``--arg`` wins on conflicts."""
    arguments: dict[str, Any] = {}
    if args_json is not None:
        try:
            parsed = json.loads(args_json)
        except ValueError as exc:
            raise click.BadParameter(f"invalid JSON: {exc}", param_hint="--json") from exc
        if not isinstance(parsed, dict):
            raise click.BadParameter("must be a JSON object", param_hint="--json")
        arguments.update(parsed)

    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {pair!r}", param_hint="--arg")
        arguments[key] = value
    return arguments
