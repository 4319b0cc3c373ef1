"""Shared CLI output formatters."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.table import Table

from toolbridge.protocols.errors import ProtocolError

if TYPE_CHECKING:
    from toolbridge.core.normalization.models import NormalizationDecision
    from toolbridge.protocols.mcp.models import ToolDefinition

console = Console()


def print_tools_table(tools: list[ToolDefinition]) -> None:
    """Pretty-print a tool catalog as a table."""
    table = Table(title="Discovered Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Parameters")

    for tool in tools:
        schema = tool.parameter_schema
        params = ", ".join(
            f"{name}*" if schema.is_required(name) else name for name in schema.properties
        )
        table.add_row(tool.name, _truncate(tool.description), params or "-")

    console.print(table)


def print_normalization_log(log: list[NormalizationDecision]) -> None:
    """Pretty-print the normalization decisions in order."""
    table = Table(title="Argument Normalization")
    table.add_column("Target", style="cyan")
    table.add_column("Source")
    table.add_column("Reason")

    for decision in log:
        table.add_row(decision.target_key, decision.source_key or "-", decision.detail)

    console.print(table)


def print_json(label: str, data: Any) -> None:
    """Print *data* as highlighted JSON under a bold label."""
    console.print(f"\n[bold]{label}:[/bold]")
    console.print_json(json.dumps(data, default=str))


def print_error(prefix: str, exc: Exception) -> None:
    """Print an error line, plus the server's body for protocol errors."""
    console.print(f"[red]{prefix}:[/red] {exc}")
    if isinstance(exc, ProtocolError) and exc.body is not None:
        print_json("Server response", exc.body)


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
