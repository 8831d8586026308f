# student_records/api/routes/students.py
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Request, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from student_records.core.errors import NotFound, ValidationFailed
from student_records.db import get_db, student_repo
from student_records.schemas.students import serialize_student
from student_records.services.query_builder import build_list_query, total_pages
from student_records.services.student_code import next_code
from student_records.services.update_merger import merge_patch
from student_records.services.validation import validate_create, validate_patch

router = APIRouter(prefix="/students", tags=["students"])

NOT_FOUND = "Student not found"


def _ok(**data: Any) -> dict[str, Any]:
    return {"ok": True, **data}


def _flag(raw: str | None) -> bool:
    # anything other than "true" reads as false
    return raw == "true"


def _invalid_body() -> ValidationFailed:
    return ValidationFailed("Invalid JSON body", {"root": "Expected a JSON object"})


async def _read_json(request: Request) -> dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        raise _invalid_body() from None
    if not isinstance(body, dict):
        raise _invalid_body()
    return body


@router.get("")
def list_students(
    db: Annotated[Session, Depends(get_db)],
    q: str | None = Query(None, description="Busca em código, nomes e cidade (contém)"),
    district: str | None = Query(None),
    page: str | None = Query(None),
    limit: str | None = Query(None),
    sort: str | None = Query(None, description="createdAt_asc | createdAt_desc"),
    include_deleted: str | None = Query(None, alias="includeDeleted"),
):
    query = build_list_query(
        q=q,
        district=district,
        page=page,
        limit=limit,
        sort=sort,
        include_deleted=_flag(include_deleted),
    )
    rows, total = student_repo.list_students(db, query)
    return _ok(
        items=[serialize_student(st) for st in rows],
        page=query.page,
        limit=query.limit,
        total=total,
        totalPages=total_pages(total, query.limit),
    )


@router.get("/{student_id}")
def get_student(
    student_id: str,
    db: Annotated[Session, Depends(get_db)],
    include_deleted: str | None = Query(None, alias="includeDeleted"),
):
    st = student_repo.find_by_id(
        db, student_id, include_deleted=_flag(include_deleted)
    )
    if st is None:
        raise NotFound(NOT_FOUND)
    return _ok(student=serialize_student(st))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_student(
    payload: Annotated[dict[str, Any], Body()],
    db: Annotated[Session, Depends(get_db)],
):
    values = validate_create(payload)
    code = next_code(db)
    st = student_repo.create(db, code=code, values=values)
    return _ok(student=serialize_student(st))


def _apply_patch(db: Session, student_id: str, payload: Any) -> dict[str, Any]:
    ops = merge_patch(validate_patch(payload))
    st = student_repo.update_active(db, student_id, ops)
    if st is None:
        raise NotFound(NOT_FOUND)
    return _ok(student=serialize_student(st))


@router.patch("/{student_id}")
async def update_student(
    student_id: str,
    request: Request,
    db: Annotated[Session, Depends(get_db)],
):
    # id is checked before the body is read
    if student_repo.normalize_id(student_id) is None:
        raise NotFound(NOT_FOUND)
    payload = await _read_json(request)
    return await run_in_threadpool(_apply_patch, db, student_id, payload)


@router.delete("/{student_id}")
def delete_student(
    student_id: str,
    db: Annotated[Session, Depends(get_db)],
):
    st = student_repo.soft_delete(db, student_id)
    if st is None:
        raise NotFound(NOT_FOUND)
    return _ok(student=serialize_student(st))
