"""Persistence for student records.

Reads skip soft-deleted rows unless asked otherwise. Update and delete are
single conditional UPDATE statements that only match active rows, and they
return the row as it is after the write.
"""
from __future__ import annotations

import uuid
from typing import Any, NoReturn

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from student_records.core.errors import Duplicate
from student_records.core.logging import get_logger
from student_records.models.student import FIELD_COLUMNS, Student
from student_records.services.query_builder import ListQuery
from student_records.services.update_merger import FieldOps, to_columns
from student_records.utils.tz import utcnow

UNIQUE_FIELDS = ("email", "code")


def normalize_id(raw: str) -> str | None:
    """Canonical UUID string, or None if ``raw`` is not a valid key."""
    try:
        return str(uuid.UUID(str(raw)))
    except (ValueError, TypeError, AttributeError):
        return None


def _duplicate_field(exc: IntegrityError) -> str | None:
    detail = str(exc.orig).lower()
    if "unique" not in detail and "duplicate" not in detail:
        return None
    for name in UNIQUE_FIELDS:
        if name in detail:
            return name
    return "email"


def _raise_duplicate(db: Session, exc: IntegrityError) -> NoReturn:
    db.rollback()
    field = _duplicate_field(exc)
    if field is None:
        raise exc
    get_logger().info("student.duplicate", field=field)
    raise Duplicate(field) from exc


def create(db: Session, *, code: str, values: dict[str, Any]) -> Student:
    st = Student(code=code, **{FIELD_COLUMNS[path]: v for path, v in values.items()})
    db.add(st)
    try:
        db.commit()
    except IntegrityError as exc:
        _raise_duplicate(db, exc)
    db.refresh(st)
    get_logger().info("student.created", student_id=st.id, code=st.code)
    return st


def find_by_id(
    db: Session, student_id: str, *, include_deleted: bool = False
) -> Student | None:
    key = normalize_id(student_id)
    if key is None:
        return None
    stmt = select(Student).where(Student.id == key)
    if not include_deleted:
        stmt = stmt.where(Student.deleted_at.is_(None))
    return db.scalars(stmt).first()


def find_active_by_id(db: Session, student_id: str) -> Student | None:
    return find_by_id(db, student_id, include_deleted=False)


def list_students(db: Session, query: ListQuery) -> tuple[list[Student], int]:
    total = db.scalar(
        select(func.count()).select_from(Student).where(*query.filters)
    ) or 0
    rows = db.scalars(
        select(Student)
        .where(*query.filters)
        .order_by(*query.order_by)
        .offset(query.offset)
        .limit(query.limit)
    ).all()
    return list(rows), int(total)


def _update_active(db: Session, student_id: str, columns: dict[str, Any]) -> Student | None:
    key = normalize_id(student_id)
    if key is None:
        return None
    stmt = (
        update(Student)
        .where(Student.id == key, Student.deleted_at.is_(None))
        .values(**columns)
        .returning(Student)
    )
    try:
        st = db.scalars(stmt).first()
        db.commit()
    except IntegrityError as exc:
        _raise_duplicate(db, exc)
    return st


def update_active(db: Session, student_id: str, ops: FieldOps) -> Student | None:
    columns = to_columns(ops)
    columns["updated_at"] = utcnow()
    st = _update_active(db, student_id, columns)
    if st is not None:
        get_logger().info(
            "student.updated",
            student_id=st.id,
            assigned=sorted(ops.assignments),
            removed=sorted(ops.removals),
        )
    return st


def soft_delete(db: Session, student_id: str) -> Student | None:
    now = utcnow()
    st = _update_active(db, student_id, {"deleted_at": now, "updated_at": now})
    if st is not None:
        get_logger().info("student.deleted", student_id=st.id, code=st.code)
    return st
