"""Runtime configuration helpers."""

from __future__ import annotations

import ipaddress
import os
from collections.abc import Mapping
from dataclasses import dataclass

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}
TRANSPORTS = ("stdio", "streamable-http")


@dataclass(frozen=True)
class RuntimeDefaults:
    """Server settings sourced from environment variables."""

    transport: str
    host: str
    port: int
    allow_public_http: bool
    thought_logging: bool


def get_runtime_defaults(env: Mapping[str, str] | None = None) -> RuntimeDefaults:
    """Validate and return runtime defaults from environment variables."""
    source = os.environ if env is None else env

    transport = source.get("SEQTHINK_MCP_TRANSPORT", "stdio").strip() or "stdio"
    if transport not in TRANSPORTS:
        raise ValueError("SEQTHINK_MCP_TRANSPORT must be 'stdio' or 'streamable-http'.")

    host = source.get("SEQTHINK_MCP_HOST", "127.0.0.1")
    port = _parse_int_env(source=source, key="SEQTHINK_MCP_PORT", default=8000)
    try:
        validate_port(port)
    except ValueError as exc:
        raise ValueError("SEQTHINK_MCP_PORT must be between 1 and 65535.") from exc

    allow_public_http = _parse_bool_env(
        source=source,
        key="SEQTHINK_MCP_ALLOW_PUBLIC_HTTP",
        default=False,
    )
    validate_streamable_http_binding(
        transport=transport,
        host=host,
        allow_public_http=allow_public_http,
    )

    return RuntimeDefaults(
        transport=transport,
        host=host,
        port=port,
        allow_public_http=allow_public_http,
        thought_logging=get_thought_logging_default(source),
    )


def get_thought_logging_default(env: Mapping[str, str] | None = None) -> bool:
    """Return whether thoughts are rendered to stderr.

    Only a case-insensitive ``DISABLE_THOUGHT_LOGGING=true`` turns rendering
    off; any other value leaves it on.
    """
    source = os.environ if env is None else env
    return source.get("DISABLE_THOUGHT_LOGGING", "").strip().lower() != "true"


def validate_streamable_http_binding(transport: str, host: str, allow_public_http: bool) -> None:
    """Validate host exposure policy for streamable HTTP transport."""
    if transport != "streamable-http":
        return
    if not host.strip():
        raise ValueError("Host must not be empty when using streamable-http transport.")
    if not is_loopback_host(host) and not allow_public_http:
        raise ValueError(
            "Refusing non-loopback streamable-http binding without explicit opt-in. "
            "Set --allow-public-http or SEQTHINK_MCP_ALLOW_PUBLIC_HTTP=true."
        )


def validate_port(port: int) -> None:
    if not (1 <= port <= 65535):
        raise ValueError("port must be between 1 and 65535.")


def is_loopback_host(host: str) -> bool:
    """Return whether a host value maps to a loopback interface."""
    normalized = host.strip().lower().strip("[]")
    if normalized in {"localhost", "127.0.0.1", "::1"}:
        return True
    try:
        return ipaddress.ip_address(normalized).is_loopback
    except ValueError:
        return False


def _parse_bool_env(source: Mapping[str, str], key: str, default: bool) -> bool:
    raw = source.get(key)
    if raw is None or not str(raw).strip():
        return default
    normalized = str(raw).strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise ValueError(f"{key} must be a boolean value (true/false).")


def _parse_int_env(source: Mapping[str, str], key: str, default: int) -> int:
    raw = source.get(key)
    if raw is None or not str(raw).strip():
        return default
    try:
        return int(str(raw).strip())
    except ValueError as exc:
        raise ValueError(f"{key} must be an integer.") from exc
