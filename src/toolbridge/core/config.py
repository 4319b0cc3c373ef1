"""Connection configuration — where a tool server lives and how to talk to it."""

from __future__ import annotations

from typing import Literal
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, model_validator

DEFAULT_MULTI_EXECUTE_TOOL = "RUBE_MULTI_EXECUTE_TOOL"

_SCHEME_TRANSPORTS: dict[str, Literal["websocket", "http"]] = {
    "ws": "websocket",
    "wss": "websocket",
    "http": "http",
    "https": "http",
}


class ConnectionConfig(BaseModel):
    """Settings for one remote tool server.

    ``transport`` is inferred from the URL scheme when left unset
    (``ws``/``wss`` → websocket, ``http``/``https`` → http).

    Example YAML entry::

        rube:
          url: https://rube.app/mcp
          api_key: ${RUBE_API_KEY}
          timeout: 60
    """

    name: str = "default"
    url: str
    api_key: str | None = None
    transport: Literal["websocket", "http"] | None = None
    timeout: float = Field(default=30.0, gt=0)
    execute_method: str = "tools/call"
    multi_execute_tool: str = DEFAULT_MULTI_EXECUTE_TOOL
    initialize: bool = False
    headers: dict[str, str] = {}

    @model_validator(mode="after")
    def _infer_transport(self) -> ConnectionConfig:
        if self.transport is None:
            scheme = urlsplit(self.url).scheme.lower()
            transport = _SCHEME_TRANSPORTS.get(scheme)
            if transport is None:
                msg = f"cannot infer transport from URL scheme {scheme!r}; set 'transport'"
                raise ValueError(msg)
            self.transport = transport
        return self

    def request_headers(self) -> dict[str, str]:
        """Static headers sent on every request, including the bearer token."""
        headers = dict(self.headers)
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers
