"""Decode untyped tool arguments into validated thought records."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from .errors import ThoughtValidationError
from .models import ThoughtRecord

INDEX_FIELDS = ("thoughtNumber", "totalThoughts", "revisesThought", "branchFromThought")

FIELD_EXPECTATIONS = {
    "thought": "non-empty str",
    "thoughtNumber": "int >= 1",
    "totalThoughts": "int >= 1",
    "nextThoughtNeeded": "bool",
    "isRevision": "bool",
    "revisesThought": "int >= 1",
    "branchFromThought": "int >= 1",
    "branchId": "str",
}

OPTIONAL_FIELD_MESSAGES = {
    "isRevision": "must be a boolean",
    "revisesThought": "must be an integer >= 1",
    "branchFromThought": "must be an integer >= 1",
    "branchId": "must be a string",
}


def _is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _is_thought_index(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return value >= 1 and float(value).is_integer()


def _is_boolean(value: Any) -> bool:
    return isinstance(value, bool)


REQUIRED_FIELD_RULES: tuple[tuple[str, Callable[[Any], bool], str], ...] = (
    ("thought", _is_non_empty_string, "Invalid thought: must be a string"),
    ("thoughtNumber", _is_thought_index, "Invalid thoughtNumber: must be a number"),
    ("totalThoughts", _is_thought_index, "Invalid totalThoughts: must be a number"),
    ("nextThoughtNeeded", _is_boolean, "Invalid nextThoughtNeeded: must be a boolean"),
)


def decode_thought(raw: Any) -> ThoughtRecord:
    """Convert a raw tool argument bag into a trusted ``ThoughtRecord``.

    Required fields are checked in declaration order and the first failure
    is reported. Optional fields are type-checked by the pydantic model;
    ``None`` values are treated as absent and unknown keys are ignored.

    Raises:
        ThoughtValidationError: when the bag does not describe a thought.
    """
    if not isinstance(raw, Mapping):
        raise ThoughtValidationError(
            "Invalid arguments: must be an object",
            {"received_type": type(raw).__name__},
        )

    for field_name, is_valid, message in REQUIRED_FIELD_RULES:
        if not is_valid(raw.get(field_name)):
            raise ThoughtValidationError(message, {"field": field_name})

    normalized = {key: value for key, value in raw.items() if value is not None}
    for field_name in INDEX_FIELDS:
        value = normalized.get(field_name)
        # JSON clients may send 3.0 for 3.
        if isinstance(value, float) and value.is_integer():
            normalized[field_name] = int(value)

    try:
        return ThoughtRecord.model_validate(normalized)
    except ValidationError as exc:
        details = build_validation_error_details(exc)
        raise ThoughtValidationError(_message_for_first_error(exc), details) from exc


def build_validation_error_details(exc: ValidationError) -> dict[str, Any]:
    """Summarize pydantic errors into JSON-safe details with shape hints."""
    errors: list[dict[str, str]] = []
    hints: list[str] = []
    for error in exc.errors(include_url=False):
        field_name = ".".join(str(part) for part in error.get("loc", ()))
        errors.append(
            {
                "field": field_name,
                "message": str(error.get("msg", "")),
                "type": str(error.get("type", "")),
            }
        )
        expected = FIELD_EXPECTATIONS.get(field_name)
        if expected and "input" in error:
            received = type(error["input"]).__name__
            hints.append(f"Field '{field_name}' expects {expected}, got {received}.")
    return {"errors": errors, "hints": hints}


def _message_for_first_error(exc: ValidationError) -> str:
    errors = exc.errors(include_url=False)
    if not errors:
        return "Invalid thought arguments"
    loc = errors[0].get("loc", ())
    field_name = str(loc[0]) if loc else "arguments"
    reason = OPTIONAL_FIELD_MESSAGES.get(field_name, "has an invalid value")
    return f"Invalid {field_name}: {reason}"
