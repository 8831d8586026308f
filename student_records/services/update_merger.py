from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from student_records.core.errors import ValidationFailed
from student_records.models.student import FIELD_COLUMNS
from student_records.services.validation import OPTIONAL_FIELDS


@dataclass(frozen=True)
class FieldOps:
    assignments: dict[str, Any]
    removals: frozenset[str]

    def is_empty(self) -> bool:
        return not self.assignments and not self.removals


def merge_patch(values: dict[str, Any]) -> FieldOps:
    """Split validated patch values into assignments and removals.

    An optional field that is blank after trimming is cleared rather than
    stored as an empty string. Required fields are always assigned.
    """
    assignments: dict[str, Any] = {}
    removals: set[str] = set()

    for path, value in values.items():
        if path in OPTIONAL_FIELDS:
            text = (value or "").strip()
            if not text:
                removals.add(path)
                continue
            assignments[path] = text.lower() if path == "email" else text
        else:
            assignments[path] = value

    ops = FieldOps(assignments=assignments, removals=frozenset(removals))
    if ops.is_empty():
        raise ValidationFailed("No fields to update")
    return ops


def to_columns(ops: FieldOps) -> dict[str, Any]:
    columns = {FIELD_COLUMNS[path]: value for path, value in ops.assignments.items()}
    columns.update({FIELD_COLUMNS[path]: None for path in ops.removals})
    return columns
