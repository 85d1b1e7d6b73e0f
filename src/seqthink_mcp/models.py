"""Pydantic models for thought records and tool responses."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr

PositiveThoughtIndex = Annotated[StrictInt, Field(ge=1)]


class ThoughtRecord(BaseModel):
    """One reasoning step submitted by the calling agent."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    thought: StrictStr = Field(..., min_length=1)
    thought_number: PositiveThoughtIndex = Field(..., alias="thoughtNumber")
    total_thoughts: PositiveThoughtIndex = Field(..., alias="totalThoughts")
    next_thought_needed: StrictBool = Field(..., alias="nextThoughtNeeded")
    is_revision: StrictBool | None = Field(default=None, alias="isRevision")
    revises_thought: PositiveThoughtIndex | None = Field(default=None, alias="revisesThought")
    branch_from_thought: PositiveThoughtIndex | None = Field(
        default=None, alias="branchFromThought"
    )
    branch_id: StrictStr | None = Field(default=None, alias="branchId")

    @property
    def joins_branch(self) -> bool:
        """Return whether this record belongs in a branch sequence."""
        return bool(self.branch_from_thought) and bool(self.branch_id)

    def with_extended_total(self) -> ThoughtRecord:
        """Return a copy whose total covers this record's own position."""
        if self.thought_number <= self.total_thoughts:
            return self
        return self.model_copy(update={"total_thoughts": self.thought_number})


class ThoughtSummary(BaseModel):
    """Bookkeeping metadata echoed back after a thought is stored."""

    model_config = ConfigDict(populate_by_name=True)

    thought_number: int = Field(..., alias="thoughtNumber")
    total_thoughts: int = Field(..., alias="totalThoughts")
    next_thought_needed: bool = Field(..., alias="nextThoughtNeeded")
    branches: list[str] = Field(default_factory=list)
    thought_history_length: int = Field(..., alias="thoughtHistoryLength")
