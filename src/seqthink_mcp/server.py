"""MCP server entrypoint and tool definition for enhanced sequential thinking."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
import uuid
from collections.abc import Mapping
from typing import Annotated, Any

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult, ToolAnnotations
from pydantic import WithJsonSchema

from .constants import SERVER_INSTRUCTIONS, SERVER_NAME, SERVER_VERSION, TOOL_NAME
from .descriptions import THOUGHT_ARGUMENT_SCHEMAS, TOOL_DESCRIPTION
from .errors import ErrorCode, SeqThinkError, ThoughtValidationError, TransportFatalError
from .processor import ThoughtProcessor, text_result
from .runtime import (
    TRANSPORTS,
    get_runtime_defaults,
    get_thought_logging_default,
    validate_port,
    validate_streamable_http_binding,
)
from .store import ThoughtHistory

logger = logging.getLogger(__name__)


class ThinkingFastMCP(FastMCP):
    """FastMCP server that routes thought calls around signature-based argument parsing.

    FastMCP coerces string arguments through ``json.loads`` and rejects
    missing fields before a tool runs. Thought arguments go to the
    validator exactly as the client sent them instead.
    """

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> Any:
        if name == TOOL_NAME:
            return _run_thought_tool(arguments)
        return await super().call_tool(name, arguments)


def _build_fastmcp() -> ThinkingFastMCP:
    """Instantiate FastMCP with compatibility fallbacks for older SDK versions."""
    kwargs: dict[str, Any] = {
        "name": SERVER_NAME,
        "instructions": SERVER_INSTRUCTIONS,
        "version": SERVER_VERSION,
        "json_response": True,
    }
    optional_keys = ("version", "json_response")

    while True:
        try:
            return ThinkingFastMCP(**kwargs)
        except TypeError as exc:
            message = str(exc).lower()
            if "unexpected keyword argument" not in message:
                raise

            removed_key = next((key for key in optional_keys if key in message and key in kwargs), None)
            if removed_key is None:
                raise
            kwargs.pop(removed_key, None)
            logger.debug(
                "FastMCP constructor does not support '%s'; using compatibility fallback.",
                removed_key,
            )


mcp = _build_fastmcp()

history = ThoughtHistory()
processor = ThoughtProcessor(history, thought_logging=get_thought_logging_default())

THOUGHT_TOOL_ANNOTATIONS = ToolAnnotations(
    title="Enhanced Sequential Thinking",
    readOnlyHint=False,
    idempotentHint=False,
    destructiveHint=False,
    openWorldHint=False,
)

# Typed schemas advertised to clients over an untyped signature.
ThoughtArg = Annotated[Any, WithJsonSchema(THOUGHT_ARGUMENT_SCHEMAS["thought"])]
NextThoughtNeededArg = Annotated[Any, WithJsonSchema(THOUGHT_ARGUMENT_SCHEMAS["nextThoughtNeeded"])]
ThoughtNumberArg = Annotated[Any, WithJsonSchema(THOUGHT_ARGUMENT_SCHEMAS["thoughtNumber"])]
TotalThoughtsArg = Annotated[Any, WithJsonSchema(THOUGHT_ARGUMENT_SCHEMAS["totalThoughts"])]
IsRevisionArg = Annotated[Any, WithJsonSchema(THOUGHT_ARGUMENT_SCHEMAS["isRevision"])]
RevisesThoughtArg = Annotated[Any, WithJsonSchema(THOUGHT_ARGUMENT_SCHEMAS["revisesThought"])]
BranchFromThoughtArg = Annotated[
    Any, WithJsonSchema(THOUGHT_ARGUMENT_SCHEMAS["branchFromThought"])
]
BranchIdArg = Annotated[Any, WithJsonSchema(THOUGHT_ARGUMENT_SCHEMAS["branchId"])]


def _build_correlation_id() -> str:
    """Generate short operation correlation IDs for diagnostics."""
    return uuid.uuid4().hex[:12]


def _log_tool_phase(
    *,
    correlation_id: str,
    tool_name: str,
    phase: str,
    status: str,
    elapsed_seconds: float,
    details: dict[str, Any] | None = None,
) -> None:
    """Emit structured phase-level diagnostics for tool execution."""
    payload: dict[str, Any] = {
        "event_type": "mcp_tool_phase",
        "correlation_id": correlation_id,
        "tool_name": tool_name,
        "phase": phase,
        "status": status,
        "elapsed_ms": round(elapsed_seconds * 1000, 3),
    }
    if details:
        payload["details"] = details
    logger.info("mcp_tool_phase %s", json.dumps(payload, ensure_ascii=True, sort_keys=True))


def _error_result_from_exception(exc: Exception) -> CallToolResult:
    """Convert unexpected exceptions into the failed tool envelope."""
    if isinstance(exc, SeqThinkError):
        return text_result(exc.to_tool_payload(), is_error=True)
    logger.exception("Unhandled server exception", exc_info=exc)
    return text_result(
        SeqThinkError(ErrorCode.INTERNAL_ERROR, str(exc) or exc.__class__.__name__).to_tool_payload(),
        is_error=True,
    )


def _run_thought_tool(arguments: Mapping[str, Any] | None) -> CallToolResult:
    """Validate and record one thought call, emitting phase diagnostics."""
    total_start = time.perf_counter()
    correlation_id = _build_correlation_id()
    raw_arguments: Any = {} if arguments is None else arguments
    supplied_fields = (
        sorted(str(key) for key, value in raw_arguments.items() if value is not None)
        if isinstance(raw_arguments, Mapping)
        else []
    )

    validation_start = time.perf_counter()
    try:
        record = processor.decode(raw_arguments)
    except ThoughtValidationError as exc:
        _log_tool_phase(
            correlation_id=correlation_id,
            tool_name=TOOL_NAME,
            phase="validation",
            status="invalid",
            elapsed_seconds=time.perf_counter() - validation_start,
            details=exc.to_payload(),
        )
        result = processor.reject(exc)
    else:
        _log_tool_phase(
            correlation_id=correlation_id,
            tool_name=TOOL_NAME,
            phase="validation",
            status="ok",
            elapsed_seconds=time.perf_counter() - validation_start,
        )
        operation_start = time.perf_counter()
        try:
            result = processor.commit(record)
        except Exception as exc:  # noqa: BLE001
            _log_tool_phase(
                correlation_id=correlation_id,
                tool_name=TOOL_NAME,
                phase="operation_execution",
                status="error",
                elapsed_seconds=time.perf_counter() - operation_start,
                details={"exception": exc.__class__.__name__},
            )
            result = _error_result_from_exception(exc)
        else:
            _log_tool_phase(
                correlation_id=correlation_id,
                tool_name=TOOL_NAME,
                phase="operation_execution",
                status="ok",
                elapsed_seconds=time.perf_counter() - operation_start,
            )

    _log_tool_phase(
        correlation_id=correlation_id,
        tool_name=TOOL_NAME,
        phase="total",
        status="error" if result.isError else "ok",
        elapsed_seconds=time.perf_counter() - total_start,
        details={"fields": supplied_fields},
    )
    return result


# Registered for the advertised schema; protocol calls are served by
# ThinkingFastMCP.call_tool with the client's raw arguments.
@mcp.tool(
    name=TOOL_NAME,
    description=TOOL_DESCRIPTION,
    annotations=THOUGHT_TOOL_ANNOTATIONS,
    structured_output=False,
)
def enhancedsequentialthinking(  # noqa: N803
    thought: ThoughtArg,
    nextThoughtNeeded: NextThoughtNeededArg,
    thoughtNumber: ThoughtNumberArg,
    totalThoughts: TotalThoughtsArg,
    isRevision: IsRevisionArg = None,
    revisesThought: RevisesThoughtArg = None,
    branchFromThought: BranchFromThoughtArg = None,
    branchId: BranchIdArg = None,
) -> CallToolResult:
    """Record one Cognitive State Model thought and report history counts."""
    return _run_thought_tool(
        {
            "thought": thought,
            "nextThoughtNeeded": nextThoughtNeeded,
            "thoughtNumber": thoughtNumber,
            "totalThoughts": totalThoughts,
            "isRevision": isRevision,
            "revisesThought": revisesThought,
            "branchFromThought": branchFromThought,
            "branchId": branchId,
        }
    )


def _effective_runtime_config_payload(
    *,
    transport: str,
    host: str,
    port: int,
    allow_public_http: bool,
    thought_logging: bool,
) -> dict[str, Any]:
    """Build runtime configuration output for preflight diagnostics."""
    return {
        "server": {"name": SERVER_NAME, "version": SERVER_VERSION, "tool": TOOL_NAME},
        "transport": transport,
        "host": host,
        "port": port,
        "allow_public_http": allow_public_http,
        "thought_logging": thought_logging,
    }


def _run_transport(transport: str) -> None:
    """Run the selected transport, raising ``TransportFatalError`` on failure."""
    logger.info(
        "Enhanced Sequential Thinking (CSM v2) MCP Server running on %s", transport
    )
    try:
        if transport == "stdio":
            mcp.run()
        else:
            mcp.run(transport="streamable-http")
    except (KeyboardInterrupt, SystemExit):
        raise
    except Exception as exc:  # noqa: BLE001
        raise TransportFatalError(transport, exc) from exc


def main() -> None:
    """Run the thinking MCP server in stdio or streamable HTTP mode."""
    parser = argparse.ArgumentParser(description="Enhanced sequential thinking MCP server")
    try:
        defaults = get_runtime_defaults()
    except ValueError as exc:
        parser.error(str(exc))
    parser.add_argument(
        "--transport",
        choices=list(TRANSPORTS),
        default=defaults.transport,
        help="Server transport mode (default: stdio).",
    )
    parser.add_argument(
        "--host",
        default=defaults.host,
        help="Host for streamable HTTP transport.",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=defaults.port,
        help="Port for streamable HTTP transport.",
    )
    parser.add_argument(
        "--allow-public-http",
        action=argparse.BooleanOptionalAction,
        default=defaults.allow_public_http,
        help=(
            "Allow non-loopback streamable-http host binding. "
            "Required for 0.0.0.0 or other public interface hosts."
        ),
    )
    parser.add_argument(
        "--thought-logging",
        action=argparse.BooleanOptionalAction,
        default=defaults.thought_logging,
        help=(
            "Render each thought as a box on stderr "
            "(default: enabled unless DISABLE_THOUGHT_LOGGING=true)."
        ),
    )
    parser.add_argument(
        "--check-config",
        action="store_true",
        help="Validate runtime settings and exit without starting server transport.",
    )
    parser.add_argument(
        "--print-effective-config",
        action="store_true",
        help="Print effective runtime configuration and exit.",
    )
    args = parser.parse_args()

    try:
        validate_port(int(args.port))
        validate_streamable_http_binding(
            transport=args.transport,
            host=args.host,
            allow_public_http=args.allow_public_http,
        )
    except ValueError as exc:
        parser.error(str(exc))

    processor.thought_logging = bool(args.thought_logging)
    mcp.settings.host = args.host
    mcp.settings.port = int(args.port)

    if args.print_effective_config:
        print(
            json.dumps(
                _effective_runtime_config_payload(
                    transport=str(args.transport),
                    host=str(args.host),
                    port=int(args.port),
                    allow_public_http=bool(args.allow_public_http),
                    thought_logging=bool(args.thought_logging),
                ),
                indent=2,
                sort_keys=True,
            )
        )

    if args.check_config or args.print_effective_config:
        if not args.print_effective_config:
            print("Configuration is valid.")
        return

    try:
        _run_transport(str(args.transport))
    except TransportFatalError as exc:
        logger.error("Fatal error running server: %s", exc.message, exc_info=exc.__cause__)
        sys.exit(1)


if __name__ == "__main__":
    main()
