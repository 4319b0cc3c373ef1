"""Tests for ``toolbridge tools`` CLI command."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

from click.testing import CliRunner

from toolbridge.cli import main
from toolbridge.core.normalization.errors import ArgumentValidationError
from toolbridge.core.normalization.models import MatchReason, NormalizationDecision
from toolbridge.protocols.errors import ConnectionError, ProtocolError
from toolbridge.protocols.mcp.models import ToolDefinition
from toolbridge.sdk.models import InvocationResult

URL = ["--url", "https://tools.example.com/mcp"]

CATALOG = [
    ToolDefinition.from_raw({
        "name": "send_email",
        "description": "Send an email",
        "inputSchema": {
            "type": "object",
            "properties": {"recipient_email": {"type": "string"}, "subject": {}},
            "required": ["recipient_email"],
        },
    })
]


class TestToolsList:
    def test_list_tools(self) -> None:
        with patch("toolbridge.sdk.invoker.list_tools", AsyncMock(return_value=CATALOG)) as mock:
            result = CliRunner().invoke(main, ["tools", "list", *URL])

        assert result.exit_code == 0, result.output
        assert "send_email" in result.output
        assert "recipient_email*" in result.output
        connection = mock.await_args.args[0]
        assert connection.url == "https://tools.example.com/mcp"
        assert connection.transport == "http"

    def test_list_json(self) -> None:
        with patch("toolbridge.sdk.invoker.list_tools", AsyncMock(return_value=CATALOG)):
            result = CliRunner().invoke(main, ["tools", "list", "--json", *URL])

        assert result.exit_code == 0, result.output
        listed = json.loads(result.output.split("Tools:", 1)[1])
        assert listed == [
            {
                "name": "send_email",
                "description": "Send an email",
                "inputSchema": {
                    "type": "object",
                    "properties": {"recipient_email": {"type": "string"}, "subject": {}},
                    "required": ["recipient_email"],
                },
            }
        ]

    def test_list_no_tools(self) -> None:
        with patch("toolbridge.sdk.invoker.list_tools", AsyncMock(return_value=[])):
            result = CliRunner().invoke(main, ["tools", "list", *URL])

        assert result.exit_code == 0
        assert "No tools discovered" in result.output

    def test_list_error(self) -> None:
        error = ConnectionError("Cannot open wss://x: refused")
        with patch("toolbridge.sdk.invoker.list_tools", AsyncMock(side_effect=error)):
            result = CliRunner().invoke(main, ["tools", "list", *URL])

        assert result.exit_code == 1
        assert "Discovery error" in result.output

    def test_url_from_environment(self) -> None:
        runner = CliRunner(env={"TOOLBRIDGE_URL": "wss://env.example.com"})
        with patch("toolbridge.sdk.invoker.list_tools", AsyncMock(return_value=[])) as mock:
            result = runner.invoke(main, ["tools", "list"])

        assert result.exit_code == 0, result.output
        assert mock.await_args.args[0].transport == "websocket"

    def test_missing_url(self) -> None:
        result = CliRunner(env={"TOOLBRIDGE_URL": None}).invoke(main, ["tools", "list"])
        assert result.exit_code == 2
        assert "Provide --url" in result.output

    def test_bad_url_scheme(self) -> None:
        result = CliRunner().invoke(main, ["tools", "list", "--url", "ftp://x"])
        assert result.exit_code == 2

    def test_connection_from_config_file(self, tmp_path: Path) -> None:
        config = tmp_path / "connections.yaml"
        config.write_text(
            "connections:\n  local:\n    url: ws://localhost:8765\n    timeout: 5\n",
            encoding="utf-8",
        )
        with patch("toolbridge.sdk.invoker.list_tools", AsyncMock(return_value=[])) as mock:
            result = CliRunner().invoke(
                main,
                ["tools", "list", "--config", str(config), "--connection", "local", "--timeout", "2"],
            )

        assert result.exit_code == 0, result.output
        connection = mock.await_args.args[0]
        assert connection.name == "local"
        assert connection.timeout == 2.0

    def test_unknown_connection_in_config(self, tmp_path: Path) -> None:
        config = tmp_path / "connections.yaml"
        config.write_text("connections:\n  local:\n    url: ws://x\n", encoding="utf-8")
        result = CliRunner().invoke(main, ["tools", "list", "--config", str(config)])

        assert result.exit_code == 2
        assert "Unknown connection" in result.output


class TestToolsInvoke:
    def _outcome(self) -> InvocationResult:
        return InvocationResult(
            tool_name="send_email",
            normalized_arguments={"recipient_email": "a@b.com"},
            log=[
                NormalizationDecision(
                    target_key="recipient_email",
                    source_key="to",
                    reason=MatchReason.SYNONYM,
                    concept="recipient_email",
                )
            ],
            result={"status": "queued"},
        )

    def test_invoke_with_pairs(self) -> None:
        with patch("toolbridge.sdk.invoker.invoke", AsyncMock(return_value=self._outcome())) as mock:
            result = CliRunner().invoke(
                main, ["tools", "invoke", *URL, "send_email", "-a", "to=a@b.com"]
            )

        assert result.exit_code == 0, result.output
        _, tool_name, raw = mock.await_args.args
        assert tool_name == "send_email"
        assert raw == {"to": "a@b.com"}
        assert "synonym-match(recipient_email)" in result.output
        assert "queued" in result.output

    def test_pairs_override_json(self) -> None:
        with patch("toolbridge.sdk.invoker.invoke", AsyncMock(return_value=self._outcome())) as mock:
            result = CliRunner().invoke(
                main,
                [
                    "tools",
                    "invoke",
                    *URL,
                    "send_email",
                    "--json",
                    json.dumps({"to": "old@b.com", "retries": 2}),
                    "--arg",
                    "to=new@b.com",
                ],
            )

        assert result.exit_code == 0, result.output
        assert mock.await_args.args[2] == {"to": "new@b.com", "retries": 2}

    def test_bad_pair(self) -> None:
        result = CliRunner().invoke(main, ["tools", "invoke", *URL, "send_email", "-a", "oops"])
        assert result.exit_code == 2
        assert "key=value" in result.output

    def test_bad_json(self) -> None:
        result = CliRunner().invoke(main, ["tools", "invoke", *URL, "send_email", "--json", "[1]"])
        assert result.exit_code == 2
        assert "JSON object" in result.output

    def test_validation_error(self) -> None:
        error = ArgumentValidationError(
            "send_email",
            ["recipient_email"],
            {"recipient_email": None},
            [NormalizationDecision(target_key="recipient_email", reason=MatchReason.MISSING_REQUIRED)],
        )
        with patch("toolbridge.sdk.invoker.invoke", AsyncMock(side_effect=error)):
            result = CliRunner().invoke(main, ["tools", "invoke", *URL, "send_email"])

        assert result.exit_code == 1
        assert "Validation error" in result.output
        assert "missing-required" in result.output

    def test_protocol_error_shows_body(self) -> None:
        error = ProtocolError("HTTP 500", status_code=500, body={"detail": "upstream down"})
        with patch("toolbridge.sdk.invoker.invoke", AsyncMock(side_effect=error)):
            result = CliRunner().invoke(main, ["tools", "invoke", *URL, "send_email"])

        assert result.exit_code == 1
        assert "Invocation error" in result.output
        assert "upstream down" in result.output
