from __future__ import annotations

import threading
from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from student_records.core.errors import DatabaseUnavailable
from student_records.core.logging import get_logger
from student_records.core.settings import settings


class Database:
    """Shared handle to the backing store.

    The engine is created on first use and reused for the life of the
    process. Concurrent first callers wait on the same lock, so only one
    connection attempt is made; a failed attempt is not cached and the next
    caller tries again.
    """

    def __init__(
        self,
        url: str,
        *,
        pool_pre_ping: bool = True,
        create_tables: bool = False,
        engine_kwargs: dict[str, Any] | None = None,
    ) -> None:
        self.url = url
        self._pool_pre_ping = pool_pre_ping
        self._create_tables = create_tables
        self._engine_kwargs = engine_kwargs or {}
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None
        self._lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self._engine is not None

    def _connect(self) -> Engine:
        kwargs: dict[str, Any] = {"pool_pre_ping": self._pool_pre_ping}
        if self.url.startswith("sqlite"):
            # sessions cross threads in FastAPI's threadpool
            kwargs["connect_args"] = {"check_same_thread": False}
        kwargs.update(self._engine_kwargs)

        engine = create_engine(self.url, **kwargs)
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            if self._create_tables:
                import student_records.db.base  # noqa: F401
                from student_records.db.base_class import Base

                Base.metadata.create_all(bind=engine)
        except SQLAlchemyError as exc:
            engine.dispose()
            get_logger().error("db.connect_failed", error=str(exc))
            raise DatabaseUnavailable("Database connection failed") from exc

        get_logger().info("db.connected", dialect=engine.dialect.name)
        return engine

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            with self._lock:
                if self._engine is None:
                    engine = self._connect()
                    self._session_factory = sessionmaker(
                        bind=engine, autoflush=False, autocommit=False
                    )
                    self._engine = engine
        return self._engine

    def session(self) -> Session:
        self.engine
        assert self._session_factory is not None
        return self._session_factory()

    def dispose(self) -> None:
        with self._lock:
            if self._engine is not None:
                self._engine.dispose()
            self._engine = None
            self._session_factory = None


database = Database(
    settings.DATABASE_URL,
    pool_pre_ping=settings.DB_POOL_PRE_PING,
    create_tables=settings.DB_CREATE_TABLES or settings.DATABASE_URL.startswith("sqlite"),
)


def get_db() -> Generator[Session, None, None]:
    """Dependency do FastAPI: abre uma sessão por request e fecha no final."""
    db = database.session()
    try:
        yield db
    finally:
        db.close()
