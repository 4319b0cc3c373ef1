"""Connection file loading for the toolbridge SDK and CLI."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from toolbridge.core.config import ConnectionConfig
from toolbridge.sdk.errors import ConfigError


class ConnectionLoader:
    """Load and validate a connections YAML file.

    Expected layout::

        connections:
          rube:
            url: https://rube.app/mcp
            api_key: ${RUBE_API_KEY}
          local:
            url: ws://localhost:8765
            timeout: 5
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    def load(self) -> dict[str, ConnectionConfig]:
        """Read YAML, interpolate env vars, and validate every entry.

        Environment variables in the form ``${VAR}`` or ``$VAR`` are expanded
        using :func:`os.path.expandvars` before YAML parsing.

        Raises:
            ConfigError: On read errors, YAML parse errors or validation failures.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read {self._path}: {exc}") from exc

        expanded = os.path.expandvars(raw)

        try:
            data: Any = yaml.safe_load(expanded)
        except yaml.YAMLError as exc:
            raise ConfigError(f"YAML parse error: {exc}") from exc

        if not isinstance(data, Mapping) or not isinstance(data.get("connections"), Mapping):
            raise ConfigError("Connections file must contain a 'connections' mapping")

        connections: dict[str, ConnectionConfig] = {}
        for name, settings in data["connections"].items():
            if not isinstance(settings, Mapping):
                raise ConfigError(f"Connection '{name}' must be a mapping")
            try:
                connections[str(name)] = ConnectionConfig.model_validate(
                    {**settings, "name": str(name)}
                )
            except ValidationError as exc:
                raise ConfigError(f"Connection '{name}': {exc}") from exc
        return connections

    def get(self, name: str) -> ConnectionConfig:
        """Load the file and return the connection called *name*."""
        connections = self.load()
        try:
            return connections[name]
        except KeyError:
            known = ", ".join(sorted(connections)) or "(none)"
            raise ConfigError(f"Unknown connection '{name}'; known: {known}") from None
