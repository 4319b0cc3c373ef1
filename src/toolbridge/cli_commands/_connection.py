"""Shared connection options for CLI commands."""

from __future__ import annotations

import functools
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError

from toolbridge.core.config import ConnectionConfig
from toolbridge.sdk.errors import ConfigError
from toolbridge.sdk.loader import ConnectionLoader

_OPTIONS = (
    click.option(
        "--url", envvar="TOOLBRIDGE_URL", help="Server URL (ws://, wss://, http://, https://)."
    ),
    click.option("--api-key", envvar="TOOLBRIDGE_API_KEY", help="Bearer token sent to the server."),
    click.option(
        "--transport",
        type=click.Choice(["websocket", "http"]),
        default=None,
        help="Transport type (inferred from the URL scheme by default).",
    ),
    click.option("--timeout", type=float, default=None, help="Per-call deadline in seconds."),
    click.option(
        "--config",
        "config_path",
        type=click.Path(exists=True, dir_okay=False),
        default=None,
        help="Connections YAML file.",
    ),
    click.option(
        "--connection",
        "connection_name",
        default="default",
        show_default=True,
        help="Connection name inside --config.",
    ),
)


def resolve_connection(
    *,
    url: str | None,
    api_key: str | None,
    transport: str | None,
    timeout: float | None,
    config_path: str | None,
    connection_name: str,
) -> ConnectionConfig:
    """Build a :class:`ConnectionConfig` from CLI flags or a connections file."""
    if config_path is not None:
        try:
            connection = ConnectionLoader(Path(config_path)).get(connection_name)
        except ConfigError as exc:
            raise click.UsageError(str(exc)) from exc
        if timeout is not None:
            connection = connection.model_copy(update={"timeout": timeout})
        return connection

    if not url:
        msg = "Provide --url (or TOOLBRIDGE_URL) or --config"
        raise click.UsageError(msg)

    settings: dict[str, Any] = {"url": url, "api_key": api_key, "transport": transport}
    if timeout is not None:
        settings["timeout"] = timeout
    try:
        return ConnectionConfig(**settings)
    except ValidationError as exc:
        raise click.BadParameter(str(exc), param_hint="--url") from exc


def connection_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add the connection flags to a command and pass ``connection=`` instead."""

    @functools.wraps(func)
    def wrapper(
        *args: Any,
        url: str | None,
        api_key: str | None,
        transport: str | None,
        timeout: float | None,
        config_path: str | None,
        connection_name: str,
        **kwargs: Any,
    ) -> Any:
        kwargs["connection"] = resolve_connection(
            url=url,
            api_key=api_key,
            transport=transport,
            timeout=timeout,
            config_path=config_path,
            connection_name=connection_name,
        )
        return func(*args, **kwargs)

    for option in reversed(_OPTIONS):
        wrapper = option(wrapper)
    return wrapper
