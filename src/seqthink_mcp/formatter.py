"""Human-readable rendering of thought records for the diagnostic console.

Rendering is cosmetic: nothing produced here is ever part of a tool
response. The boxed output goes to stderr so stdio transports keep a clean
protocol stream.
"""

from __future__ import annotations

from enum import Enum

from rich.cells import cell_len
from rich.console import Console
from rich.text import Text

from .models import ThoughtRecord


class CognitiveState(Enum):
    """Advisory CSM states recognized from a ``branchId`` prefix."""

    DECOMPOSE = ("state: DECOMPOSE", "🧩", "Decompose", "cyan")
    EXPLORE = ("state: EXPLORE", "🔍", "Explore", "blue")
    CHALLENGE = ("state: CHALLENGE", "🔥", "Challenge", "red")
    EXPAND = ("state: EXPAND", "🌌", "Expand", "magenta")
    SYNTHESIZE = ("state: SYNTHESIZE", "✨", "Synthesize", "yellow")
    EXECUTE = ("state: EXECUTE", "🚀", "Execute", "green")
    REFLECT = ("state: REFLECT", "🧘", "Reflect", "bright_black")
    THOUGHT = ("", "💭", "Thought", "blue")

    def __init__(self, prefix: str, icon: str, label: str, color: str) -> None:
        self.prefix = prefix
        self.icon = icon
        self.label = label
        self.color = color

    @classmethod
    def from_branch_id(cls, branch_id: str | None) -> CognitiveState:
        """Return the first state whose prefix starts ``branch_id``."""
        if branch_id:
            for state in cls:
                if state is not cls.THOUGHT and branch_id.startswith(state.prefix):
                    return state
        return cls.THOUGHT


def _context_suffix(record: ThoughtRecord) -> str:
    if record.is_revision and record.revises_thought:
        return f" (revising {record.revises_thought})"
    if record.branch_from_thought:
        return f" (from {record.branch_from_thought})"
    return ""


def format_header(record: ThoughtRecord) -> Text:
    state = CognitiveState.from_branch_id(record.branch_id)
    header = Text()
    header.append(f"{state.icon} {state.label}", style=state.color)
    header.append(f" {record.thought_number}/{record.total_thoughts}{_context_suffix(record)}")
    if record.branch_id:
        header.append(f" [{record.branch_id}]", style="dim")
    return header


def format_thought(record: ThoughtRecord) -> Text:
    """Render ``record`` as a bordered box; ``.plain`` gives the uncolored text."""
    header = format_header(record)
    body_lines = record.thought.splitlines() or [""]
    width = max(cell_len(header.plain), *(cell_len(line) for line in body_lines))
    border = "─" * (width + 2)

    box = Text()
    box.append(f"┌{border}┐\n")
    box.append("│ ")
    box.append_text(header)
    box.append(" " * (width - cell_len(header.plain)) + " │\n")
    box.append(f"├{border}┤\n")
    for line in body_lines:
        box.append(f"│ {line}{' ' * (width - cell_len(line))} │\n")
    box.append(f"└{border}┘")
    return box


def build_diagnostic_console() -> Console:
    """Create the stderr console used for thought rendering."""
    return Console(stderr=True, highlight=False, soft_wrap=True)
