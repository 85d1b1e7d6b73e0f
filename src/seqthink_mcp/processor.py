"""Thought processing pipeline: decode, store, render, summarize."""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.types import CallToolResult, TextContent
from rich.console import Console

from .errors import ThoughtValidationError
from .formatter import build_diagnostic_console, format_thought
from .models import ThoughtRecord, ThoughtSummary
from .store import HistorySnapshot, ThoughtHistory
from .validation import decode_thought

logger = logging.getLogger(__name__)


def text_result(payload: dict[str, Any], *, is_error: bool = False) -> CallToolResult:
    """Wrap a JSON payload into a single-text-item tool result."""
    return CallToolResult(
        content=[TextContent(type="text", text=json.dumps(payload, indent=2))],
        isError=is_error,
    )


class ThoughtProcessor:
    """Single entry point that mutates the thought history."""

    def __init__(
        self,
        history: ThoughtHistory | None = None,
        *,
        thought_logging: bool = True,
        console: Console | None = None,
    ) -> None:
        self.history = history if history is not None else ThoughtHistory()
        self.thought_logging = thought_logging
        self._console = console

    @property
    def console(self) -> Console:
        if self._console is None:
            self._console = build_diagnostic_console()
        return self._console

    def process_thought(self, raw: Any) -> CallToolResult:
        """Handle one tool invocation and build its result.

        Validation failures become ``isError`` results with a
        ``{"error", "status": "failed"}`` body and leave history untouched.
        """
        try:
            record = self.decode(raw)
        except ThoughtValidationError as exc:
            return self.reject(exc)
        return self.commit(record)

    def decode(self, raw: Any) -> ThoughtRecord:
        """Validate ``raw`` and apply the total-thoughts extension."""
        return decode_thought(raw).with_extended_total()

    def reject(self, exc: ThoughtValidationError) -> CallToolResult:
        logger.debug("Rejected thought arguments: %s", exc.to_payload())
        return text_result(exc.to_tool_payload(), is_error=True)

    def commit(self, record: ThoughtRecord) -> CallToolResult:
        """Store a decoded record, render it, and report history counts."""
        snapshot = self.history.record(record)
        if self.thought_logging:
            self._emit(record)
        return text_result(self.summary(record, snapshot))

    def summary(self, record: ThoughtRecord, snapshot: HistorySnapshot) -> dict[str, Any]:
        return ThoughtSummary(
            thought_number=record.thought_number,
            total_thoughts=record.total_thoughts,
            next_thought_needed=record.next_thought_needed,
            branches=list(snapshot.branch_names),
            thought_history_length=snapshot.history_length,
        ).model_dump(mode="json", by_alias=True)

    def _emit(self, record: ThoughtRecord) -> None:
        try:
            self.console.print(format_thought(record))
        except Exception:  # noqa: BLE001
            # Rendering must never change the tool outcome.
            logger.warning("Failed to write thought to diagnostic console.", exc_info=True)
