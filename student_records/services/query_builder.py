"""Turns listing parameters into filters, ordering and a page window."""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any

from sqlalchemy import or_

from student_records.core.errors import ValidationFailed
from student_records.models.student import District, Student

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 50
# offset (page - 1) * limit must fit a signed 64-bit column
MAX_PAGE = 1_000_000_000

SORT_ASC = "createdAt_asc"
SORT_DESC = "createdAt_desc"
DEFAULT_SORT = SORT_DESC

LIKE_ESCAPE = "\\"
_INT_PREFIX = re.compile(r"^[+-]?\d+")


@dataclass(frozen=True)
class ListQuery:
    filters: tuple[Any, ...]
    order_by: tuple[Any, ...]
    page: int
    limit: int
    sort: str

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def escape_like(value: str) -> str:
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def _parse_int(raw: str | int | None, default: int) -> int:
    if raw is None:
        return default
    if isinstance(raw, int):
        return raw
    text = raw.strip()
    if not text:
        return default
    # "3abc" -> 3, como parseInt
    m = _INT_PREFIX.match(text)
    if not m:
        raise ValidationFailed(
            "Invalid pagination", {"page": "Page and limit must be numbers"}
        )
    return int(m.group(0))


def parse_district(raw: str | None) -> District | None:
    if not raw:
        return None
    try:
        return District(raw)
    except ValueError:
        raise ValidationFailed(
            "Invalid district",
            {"address.district": "District must be selected from the list"},
        ) from None


def search_filter(q: str):
    pattern = f"%{escape_like(q)}%"
    return or_(
        *(
            col.ilike(pattern, escape=LIKE_ESCAPE)
            for col in (
                Student.code,
                Student.first_name,
                Student.middle_name,
                Student.last_name,
                Student.city,
            )
        )
    )


def build_list_query(
    *,
    q: str | None = None,
    district: str | None = None,
    page: str | int | None = None,
    limit: str | int | None = None,
    sort: str | None = None,
    include_deleted: bool = False,
) -> ListQuery:
    district_value = parse_district(district)
    page_n = min(MAX_PAGE, max(1, _parse_int(page, DEFAULT_PAGE)))
    limit_n = min(MAX_LIMIT, max(1, _parse_int(limit, DEFAULT_LIMIT)))

    filters: list[Any] = []
    if not include_deleted:
        filters.append(Student.deleted_at.is_(None))
    if district_value is not None:
        filters.append(Student.district == district_value)
    term = (q or "").strip()
    if term:
        filters.append(search_filter(term))

    sort_key = sort if sort in (SORT_ASC, SORT_DESC) else DEFAULT_SORT
    if sort_key == SORT_ASC:
        order_by = (Student.created_at.asc(), Student.code.asc())
    else:
        order_by = (Student.created_at.desc(), Student.code.desc())

    return ListQuery(
        filters=tuple(filters),
        order_by=order_by,
        page=page_n,
        limit=limit_n,
        sort=sort_key,
    )


def total_pages(total: int, limit: int) -> int:
    return 0 if total == 0 else math.ceil(total / limit)
