from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any

import pytest

pytest.importorskip("mcp")

from seqthink_mcp import server
from seqthink_mcp.processor import ThoughtProcessor


@pytest.fixture(autouse=True)
def _fresh_processor(monkeypatch: pytest.MonkeyPatch) -> ThoughtProcessor:
    processor = ThoughtProcessor(thought_logging=False)
    monkeypatch.setattr(server, "processor", processor)
    for key in (
        "SEQTHINK_MCP_TRANSPORT",
        "SEQTHINK_MCP_HOST",
        "SEQTHINK_MCP_PORT",
        "SEQTHINK_MCP_ALLOW_PUBLIC_HTTP",
        "DISABLE_THOUGHT_LOGGING",
    ):
        monkeypatch.delenv(key, raising=False)
    return processor


def _payload(result: Any) -> dict[str, Any]:
    return json.loads(result.content[0].text)


def test_tool_records_csm_flow() -> None:
    server.enhancedsequentialthinking(
        thought="1. parser 2. storage",
        nextThoughtNeeded=True,
        thoughtNumber=1,
        totalThoughts=4,
        branchId="state: DECOMPOSE",
    )
    server.enhancedsequentialthinking(
        thought="Investigate parser",
        nextThoughtNeeded=True,
        thoughtNumber=2,
        totalThoughts=4,
        branchFromThought=1,
        branchId="state: EXPLORE(parser)",
    )
    result = server.enhancedsequentialthinking(
        thought="Revised parser plan",
        nextThoughtNeeded=True,
        thoughtNumber=5,
        totalThoughts=4,
        isRevision=True,
        revisesThought=2,
        branchId="state: SYNTHESIZE",
    )

    assert result.isError is False
    assert _payload(result) == {
        "thoughtNumber": 5,
        "totalThoughts": 5,
        "nextThoughtNeeded": True,
        "branches": ["state: EXPLORE(parser)"],
        "thoughtHistoryLength": 3,
    }


def test_tool_returns_failed_envelope_for_wrong_types(
    _fresh_processor: ThoughtProcessor,
) -> None:
    result = server.enhancedsequentialthinking(
        thought="",
        nextThoughtNeeded=True,
        thoughtNumber=1,
        totalThoughts=1,
    )

    assert result.isError is True
    assert _payload(result) == {"error": "Invalid thought: must be a string", "status": "failed"}
    assert _fresh_processor.history.history_length() == 0


def test_tool_converts_unexpected_exceptions(
    monkeypatch: pytest.MonkeyPatch,
    _fresh_processor: ThoughtProcessor,
) -> None:
    def _explode(record: Any) -> Any:
        raise RuntimeError("boom")

    monkeypatch.setattr(_fresh_processor, "commit", _explode)

    result = server.enhancedsequentialthinking(
        thought="x",
        nextThoughtNeeded=False,
        thoughtNumber=1,
        totalThoughts=1,
    )

    assert result.isError is True
    assert _payload(result) == {"error": "boom", "status": "failed"}


@pytest.mark.parametrize("thought", ["null", '["a", "b"]', '{"k": 1}', "42", "true"])
def test_call_tool_keeps_json_looking_strings_verbatim(
    thought: str,
    _fresh_processor: ThoughtProcessor,
) -> None:
    result = asyncio.run(
        server.mcp.call_tool(
            "enhancedsequentialthinking",
            {
                "thought": thought,
                "nextThoughtNeeded": False,
                "thoughtNumber": 1,
                "totalThoughts": 1,
                "branchFromThought": 1,
                "branchId": '{"x": 1}',
            },
        )
    )

    assert result.isError is False
    assert _payload(result)["branches"] == ['{"x": 1}']
    stored = _fresh_processor.history.records()[-1]
    assert stored.thought == thought
    assert stored.branch_id == '{"x": 1}'


def test_call_tool_without_thought_returns_failed_envelope(
    _fresh_processor: ThoughtProcessor,
) -> None:
    result = asyncio.run(
        server.mcp.call_tool(
            "enhancedsequentialthinking",
            {"nextThoughtNeeded": True, "thoughtNumber": 1, "totalThoughts": 1},
        )
    )

    assert result.isError is True
    assert _payload(result) == {"error": "Invalid thought: must be a string", "status": "failed"}
    assert _fresh_processor.history.history_length() == 0


def test_call_tool_rejects_string_numbers(_fresh_processor: ThoughtProcessor) -> None:
    result = asyncio.run(
        server.mcp.call_tool(
            "enhancedsequentialthinking",
            {"thought": "x", "nextThoughtNeeded": True, "thoughtNumber": "1", "totalThoughts": 1},
        )
    )

    assert result.isError is True
    assert _payload(result) == {"error": "Invalid thoughtNumber: must be a number", "status": "failed"}
    assert _fresh_processor.history.history_length() == 0


def test_call_tool_delegates_unknown_names() -> None:
    from mcp.server.fastmcp.exceptions import ToolError

    with pytest.raises(ToolError, match="Unknown tool"):
        asyncio.run(server.mcp.call_tool("not-a-tool", {}))


def _phase_events(caplog: pytest.LogCaptureFixture) -> list[dict[str, Any]]:
    prefix = "mcp_tool_phase "
    return [
        json.loads(record.getMessage()[len(prefix):])
        for record in caplog.records
        if record.getMessage().startswith(prefix)
    ]


def test_rejected_call_logs_validation_phase(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="seqthink_mcp.server")

    server.enhancedsequentialthinking(
        thought="x",
        nextThoughtNeeded="yes",
        thoughtNumber=1,
        totalThoughts=1,
    )

    events = _phase_events(caplog)
    assert [event["phase"] for event in events] == ["validation", "total"]
    validation = events[0]
    assert validation["status"] == "invalid"
    assert validation["details"]["error_code"] == "INVALID_INPUT"
    assert validation["details"]["message"] == "Invalid nextThoughtNeeded: must be a boolean"
    assert events[1]["status"] == "error"
    assert events[0]["correlation_id"] == events[1]["correlation_id"]


def test_accepted_call_logs_every_phase(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="seqthink_mcp.server")

    server.enhancedsequentialthinking(
        thought="x",
        nextThoughtNeeded=False,
        thoughtNumber=1,
        totalThoughts=1,
    )

    events = _phase_events(caplog)
    assert [(event["phase"], event["status"]) for event in events] == [
        ("validation", "ok"),
        ("operation_execution", "ok"),
        ("total", "ok"),
    ]
    assert events[-1]["details"] == {
        "fields": ["nextThoughtNeeded", "thought", "thoughtNumber", "totalThoughts"]
    }


def test_tool_is_registered_with_schema() -> None:
    tools = asyncio.run(server.mcp.list_tools())
    tool = next(item for item in tools if item.name == "enhancedsequentialthinking")

    assert "Cognitive State Model" in (tool.description or "")
    properties = tool.inputSchema["properties"]
    assert properties["thought"]["type"] == "string"
    assert properties["thoughtNumber"]["type"] == "integer"
    assert properties["nextThoughtNeeded"]["type"] == "boolean"
    assert properties["branchId"]["type"] == "string"
    assert set(tool.inputSchema["required"]) == {
        "thought",
        "nextThoughtNeeded",
        "thoughtNumber",
        "totalThoughts",
    }


def test_build_fastmcp_drops_unsupported_optional_kwargs(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict[str, object]] = []

    class FakeFastMCP:
        def __init__(self, **kwargs: object) -> None:
            calls.append(dict(kwargs))
            if "version" in kwargs:
                raise TypeError("FastMCP.__init__() got an unexpected keyword argument 'version'")

    monkeypatch.setattr(server, "ThinkingFastMCP", FakeFastMCP)
    instance = server._build_fastmcp()

    assert isinstance(instance, FakeFastMCP)
    assert len(calls) == 2
    assert calls[0]["name"] == "enhanced-sequential-thinking-server"
    assert "version" not in calls[1]
    assert calls[1]["json_response"] is True


def test_build_fastmcp_re_raises_unrelated_type_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    class FakeFastMCP:
        def __init__(self, **kwargs: object) -> None:
            raise TypeError("boom")

    monkeypatch.setattr(server, "ThinkingFastMCP", FakeFastMCP)
    with pytest.raises(TypeError, match="boom"):
        server._build_fastmcp()


def test_main_check_config(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(sys, "argv", ["seqthink-mcp", "--check-config"])

    server.main()

    assert capsys.readouterr().out.strip() == "Configuration is valid."


def test_main_print_effective_config_honours_env_switch(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    _fresh_processor: ThoughtProcessor,
) -> None:
    monkeypatch.setenv("DISABLE_THOUGHT_LOGGING", "True")
    monkeypatch.setattr(sys, "argv", ["seqthink-mcp", "--print-effective-config"])

    server.main()

    payload = json.loads(capsys.readouterr().out)
    assert payload["transport"] == "stdio"
    assert payload["thought_logging"] is False
    assert payload["server"]["tool"] == "enhancedsequentialthinking"
    assert _fresh_processor.thought_logging is False


def test_main_rejects_public_http_without_opt_in(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        sys,
        "argv",
        ["seqthink-mcp", "--transport", "streamable-http", "--host", "0.0.0.0", "--check-config"],
    )

    with pytest.raises(SystemExit) as exc_info:
        server.main()

    assert exc_info.value.code == 2


def test_main_runs_stdio_transport(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict[str, object]] = []
    monkeypatch.setattr(server.mcp, "run", lambda **kwargs: calls.append(kwargs))
    monkeypatch.setattr(sys, "argv", ["seqthink-mcp"])

    server.main()

    assert calls == [{}]


def test_main_exits_non_zero_when_transport_fails(monkeypatch: pytest.MonkeyPatch) -> None:
    def _fail(**kwargs: object) -> None:
        raise OSError("stdin closed")

    monkeypatch.setattr(server.mcp, "run", _fail)
    monkeypatch.setattr(sys, "argv", ["seqthink-mcp"])

    with pytest.raises(SystemExit) as exc_info:
        server.main()

    assert exc_info.value.code == 1
