"""toolbridge SDK — programmatic interface for listing, pinging and invoking tools."""

from toolbridge.sdk.errors import ConfigError
from toolbridge.sdk.invoker import ToolInvoker, invoke, list_tools, ping, prepare_arguments
from toolbridge.sdk.loader import ConnectionLoader
from toolbridge.sdk.models import InvocationResult

__all__ = [
    "ConfigError",
    "ConnectionLoader",
    "InvocationResult",
    "ToolInvoker",
    "invoke",
    "list_tools",
    "ping",
    "prepare_arguments",
]
