"""Domain-specific error types for sequential thinking operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Supported error codes exposed by the thinking server."""

    INVALID_INPUT = "INVALID_INPUT"
    TRANSPORT_FAILED = "TRANSPORT_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


@dataclass
class SeqThinkError(Exception):
    """Structured exception carrying a stable error contract."""

    code: ErrorCode
    message: str
    suggestion: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message

    def to_payload(self) -> dict[str, Any]:
        return {
            "status": "error",
            "error_code": self.code.value,
            "message": self.message,
            "suggestion": self.suggestion or "",
            "details": self.details,
        }

    def to_tool_payload(self) -> dict[str, Any]:
        """Return the body sent back to the calling agent."""
        return {"error": self.message, "status": "failed"}


class ThoughtValidationError(SeqThinkError):
    """Raised when a tool argument bag does not decode into a thought record."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            ErrorCode.INVALID_INPUT,
            message,
            "Check the thought fields against the tool input schema.",
            details or {},
        )


class TransportFatalError(SeqThinkError):
    """Raised when the server transport cannot be started."""

    def __init__(self, transport: str, cause: BaseException) -> None:
        super().__init__(
            ErrorCode.TRANSPORT_FAILED,
            f"Failed to run '{transport}' transport: {cause}",
            "Check transport settings and retry.",
            {"transport": transport, "exception": cause.__class__.__name__},
        )
