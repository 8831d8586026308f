"""Field rules for student payloads.

Each dotted field path has a list of rules; a rule is a predicate plus the
message reported when it fails. ``validate_create`` checks a full record and
``validate_patch`` checks only the paths present in a partial payload. Both
walk the table once and keep the first failing message per path.
"""
from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, NamedTuple

from email_validator import EmailNotValidError, validate_email

from student_records.core.errors import ValidationFailed
from student_records.models.student import DISTRICTS, District
from student_records.utils.tz import today_utc_midnight, utc_midnight

ALPHA_RE = re.compile(r"^[A-Za-z]+$")
CONTACT_RE = re.compile(r"^\d{10}$")
ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

INVALID_DATA = "Invalid student data"


class Rule(NamedTuple):
    # called with the trimmed value and today's UTC midnight
    check: Callable[[str, datetime], bool]
    message: str


@dataclass(frozen=True)
class FieldSpec:
    rules: tuple[Rule, ...]
    required: bool = True
    trim: bool = True
    convert: Callable[[str], Any] | None = None


def _min_len(n: int, message: str) -> Rule:
    return Rule(lambda v, _: len(v) >= n, message)


def _max_len(n: int, message: str) -> Rule:
    return Rule(lambda v, _: len(v) <= n, message)


def _alpha() -> Rule:
    return Rule(lambda v, _: bool(ALPHA_RE.match(v)), "Alphabets only")


def parse_birth_date(value: str) -> datetime | None:
    """Interpret ``YYYY-MM-DD`` as midnight UTC; None when it does not parse."""
    if not ISO_DATE_RE.match(value):
        return None
    try:
        return utc_midnight(date.fromisoformat(value))
    except ValueError:
        return None


def _is_past(value: str, today: datetime) -> bool:
    parsed = parse_birth_date(value)
    return parsed is not None and parsed < today


def _is_email(value: str, _today: datetime) -> bool:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


FIELD_RULES: dict[str, FieldSpec] = {
    "name.first": FieldSpec(
        rules=(
            _min_len(2, "First name must be at least 2 characters"),
            _max_len(50, "First name must be at most 50 characters"),
            _alpha(),
        )
    ),
    "name.middle": FieldSpec(rules=(_alpha(),), required=False),
    "name.last": FieldSpec(
        rules=(
            _min_len(2, "Last name must be at least 2 characters"),
            _max_len(50, "Last name must be at most 50 characters"),
            _alpha(),
        )
    ),
    "birthDate": FieldSpec(
        rules=(
            Rule(lambda v, _: parse_birth_date(v) is not None, "Invalid birth date"),
            Rule(_is_past, "Birth date must be in the past"),
        ),
        trim=False,
        convert=parse_birth_date,
    ),
    "address.line1": FieldSpec(
        rules=(_min_len(5, "Address line 1 must be at least 5 characters"),)
    ),
    "address.line2": FieldSpec(
        rules=(_max_len(100, "Address line 2 is too long"),), required=False
    ),
    "address.city": FieldSpec(
        rules=(_min_len(2, "City must be at least 2 characters"), _alpha())
    ),
    "address.district": FieldSpec(
        rules=(
            Rule(lambda v, _: v in DISTRICTS, "District must be selected from the list"),
        ),
        trim=False,
        convert=District,
    ),
    "contactNumber": FieldSpec(
        rules=(
            Rule(
                lambda v, _: bool(CONTACT_RE.match(v)),
                "Contact number must be exactly 10 digits",
            ),
        )
    ),
    "email": FieldSpec(
        rules=(Rule(_is_email, "Invalid email"),),
        required=False,
        convert=str.lower,
    ),
}

OPTIONAL_FIELDS: frozenset[str] = frozenset(
    path for path, spec in FIELD_RULES.items() if not spec.required
)


def _run(
    payload: Any, *, partial: bool, today: datetime | None
) -> dict[str, Any]:
    if not isinstance(payload, Mapping):
        raise ValidationFailed(INVALID_DATA, {"root": "Expected object"})

    cutoff = today_utc_midnight(today)
    errors: dict[str, str] = {}
    values: dict[str, Any] = {}

    for path, spec in FIELD_RULES.items():
        parent, _, key = path.rpartition(".")
        container: Any = payload
        if parent:
            container = payload.get(parent)
            if container is None:
                if not partial:
                    errors.setdefault(parent, "Required")
                continue
            if not isinstance(container, Mapping):
                errors.setdefault(parent, "Expected object")
                continue

        raw = container.get(key)
        if raw is None:
            if spec.required and not partial:
                errors.setdefault(path, "Required")
            continue
        if not isinstance(raw, str):
            errors.setdefault(path, "Expected string")
            continue

        value = raw.strip() if spec.trim else raw
        if not spec.required and value == "":
            # empty optional: dropped on create, cleared on update
            values[path] = ""
            continue

        failed = next(
            (r.message for r in spec.rules if not r.check(value, cutoff)), None
        )
        if failed is not None:
            errors.setdefault(path, failed)
            continue

        values[path] = spec.convert(value) if spec.convert else value

    if errors:
        raise ValidationFailed(INVALID_DATA, errors)
    return values


def validate_create(payload: Any, *, today: datetime | None = None) -> dict[str, Any]:
    """Validate a full record and return normalized values by dotted path.

    Empty optional fields are left out of the result.
    """
    values = _run(payload, partial=False, today=today)
    return {path: v for path, v in values.items() if v != ""}


def validate_patch(payload: Any, *, today: datetime | None = None) -> dict[str, Any]:
    """Validate the fields present in a partial payload.

    Empty optional fields are kept as ``""`` so the merger can turn them into
    removals.
    """
    return _run(payload, partial=True, today=today)
