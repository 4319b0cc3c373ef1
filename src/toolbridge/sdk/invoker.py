"""Tool invocation — the surface the surrounding application calls.

Three coroutines cover the whole boundary::

    tools = await list_tools(connection)
    outcome = await invoke(connection, "send_email", {"to": "a@b.com"})
    alive = await ping(connection)

Each opens its own :class:`MCPClient` for the duration of the call.  For
several calls over one connection, use :class:`ToolInvoker` directly.
Nothing here persists catalogs, credentials or logs; that is the caller's job.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from toolbridge.core.normalization.errors import ArgumentValidationError
from toolbridge.core.normalization.matcher import ArgumentMatcher
from toolbridge.protocols.errors import CallTimeoutError, ProtocolError, ToolNotFoundError
from toolbridge.protocols.mcp.client import MCPClient
from toolbridge.protocols.mcp.unwrap import unwrap
from toolbridge.sdk.models import InvocationResult
from toolbridge.utils.telemetry import (
    ATTR_ARGS_MISSING,
    ATTR_ARGS_RAW,
    ATTR_TOOL_NAME,
    connection_attributes,
    get_tracer,
    traced,
)

if TYPE_CHECKING:
    from toolbridge.core.config import ConnectionConfig
    from toolbridge.core.normalization.models import NormalizationResult
    from toolbridge.protocols.mcp.models import ToolDefinition

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)


def prepare_arguments(
    tool: ToolDefinition,
    raw_arguments: Mapping[str, Any] | None,
    *,
    matcher: ArgumentMatcher | None = None,
) -> NormalizationResult:
    """Normalize *raw_arguments* for *tool*.

    Raises:
        ArgumentValidationError: If any required parameter stayed unresolved.
    """
    result = (matcher or ArgumentMatcher()).normalize(tool.parameter_schema, raw_arguments)
    missing = result.missing_required
    if missing:
        raise ArgumentValidationError(tool.name, missing, result.normalized, result.log)
    return result


class ToolInvoker:
    """Normalizes, dispatches and unwraps tool calls over one connected client.

    Usage::

        async with MCPClient(config) as client:
            invoker = ToolInvoker(client)
            outcome = await invoker.invoke("send_email", {"to": "a@b.com"})
    """

    def __init__(self, client: MCPClient, *, matcher: ArgumentMatcher | None = None) -> None:
        self._client = client
        self._matcher = matcher or ArgumentMatcher()

    async def list_tools(self) -> list[ToolDefinition]:
        """Fetch the server's tool catalog."""
        return await self._client.list_tools()

    async def ping(self) -> bool:
        """Return ``True`` if the server acknowledged a ping.

        A JSON-RPC error or a missed deadline counts as "not alive";
        connection failures propagate.
        """
        try:
            await self._client.ping()
        except (ProtocolError, CallTimeoutError) as exc:
            logger.warning("Ping to %s failed: %s", self._client.config.name, exc)
            return False
        return True

    async def invoke(
        self,
        tool_name: str,
        raw_arguments: Mapping[str, Any] | None,
        *,
        tool: ToolDefinition | None = None,
    ) -> InvocationResult:
        """Normalize *raw_arguments*, call the tool, and unwrap its result.

        When *tool* is omitted, the catalog is fetched (once per client) to
        find the tool's schema.
        """
        if tool is None:
            tool = await self._lookup(tool_name)
        prepared = prepare_arguments(tool, raw_arguments, matcher=self._matcher)
        return await self.execute(tool, prepared)

    async def execute(
        self, tool: ToolDefinition, prepared: NormalizationResult
    ) -> InvocationResult:
        """Dispatch already-normalized arguments and unwrap the reply."""
        attributes = {
            **connection_attributes(self._client.config),
            ATTR_TOOL_NAME: tool.name,
        }
        with traced(_tracer, "toolbridge.invoke", attributes):
            reply = await self._client.execute_tool_reply(tool.name, prepared.normalized)

        result = unwrap(tool.name, reply, multi_execute_tool=self._client.config.multi_execute_tool)
        return InvocationResult(
            tool_name=tool.name,
            normalized_arguments=prepared.normalized,
            log=prepared.log,
            result=result,
        )

    async def _lookup(self, tool_name: str) -> ToolDefinition:
        tools = self._client.tools
        if tools is None:
            await self._client.list_tools()
            tools = self._client.tools or {}
        try:
            return tools[tool_name]
        except KeyError:
            raise ToolNotFoundError(tool_name) from None


# ---------------------------------------------------------------------------
# One-shot helpers
# ---------------------------------------------------------------------------


async def list_tools(connection: ConnectionConfig) -> list[ToolDefinition]:
    """Fetch the tool catalog of *connection*."""
    async with MCPClient(connection) as client:
        return await ToolInvoker(client).list_tools()


async def invoke(
    connection: ConnectionConfig,
    tool_name: str,
    raw_arguments: Mapping[str, Any] | None,
    *,
    tool: ToolDefinition | None = None,
    matcher: ArgumentMatcher | None = None,
) -> InvocationResult:
    """Normalize and execute *tool_name* on *connection*.

    Pass the stored *tool* definition to skip catalog discovery; its
    arguments are then validated before any connection is opened.

    Raises:
        ArgumentValidationError: Required parameters could not be resolved.
        ToolNotFoundError: *tool* was omitted and the catalog lacks *tool_name*.
    """
    if tool is not None and tool.name != tool_name:
        msg = f"tool definition {tool.name!r} does not match {tool_name!r}"
        raise ValueError(msg)

    attributes = {ATTR_TOOL_NAME: tool_name, ATTR_ARGS_RAW: len(raw_arguments or {})}
    with traced(_tracer, "toolbridge.invoke.request", attributes) as span:
        try:
            prepared = (
                prepare_arguments(tool, raw_arguments, matcher=matcher)
                if tool is not None
                else None
            )
        except ArgumentValidationError as exc:
            span.set_attribute(ATTR_ARGS_MISSING, ",".join(exc.missing))
            raise

        async with MCPClient(connection) as client:
            invoker = ToolInvoker(client, matcher=matcher)
            if tool is not None and prepared is not None:
                return await invoker.execute(tool, prepared)
            return await invoker.invoke(tool_name, raw_arguments)


async def ping(connection: ConnectionConfig) -> bool:
    """Return ``True`` if *connection* answers a ping."""
    async with MCPClient(connection) as client:
        return await ToolInvoker(client).ping()
