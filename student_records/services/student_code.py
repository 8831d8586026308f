from __future__ import annotations

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from student_records.core.logging import get_logger
from student_records.models.counter import Counter

STUDENT_COUNTER = "student"
CODE_PREFIX = "STU_"

_UPSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def format_code(seq: int) -> str:
    # 4 dígitos mínimos; acima de 9999 o código só cresce
    return f"{CODE_PREFIX}{seq:04d}"


def code_number(code: str) -> int:
    return int(code.removeprefix(CODE_PREFIX))


def next_seq(db: Session, name: str = STUDENT_COUNTER) -> int:
    """
    Incrementa o contador em uma única instrução (upsert + RETURNING) e faz
    commit imediato. Se o insert do aluno falhar depois, o número fica
    queimado: códigos são únicos e crescentes, não contíguos.
    """
    dialect = db.get_bind().dialect.name
    try:
        insert = _UPSERTS[dialect]
    except KeyError:
        raise RuntimeError(f"atomic counter not supported on {dialect}") from None

    table = Counter.__table__
    stmt = (
        insert(table)
        .values(name=name, seq=1)
        .on_conflict_do_update(
            index_elements=[table.c.name], set_={"seq": table.c.seq + 1}
        )
        .returning(table.c.seq)
    )
    try:
        seq = db.execute(stmt).scalar_one()
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        get_logger().exception("counter.increment_failed", counter=name)
        raise
    return seq


def next_code(db: Session) -> str:
    return format_code(next_seq(db, STUDENT_COUNTER))
