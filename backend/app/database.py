# SPDX-License-Identifier: Apache-2.0
"""DB connection and session management.

The engine is built explicitly and handed to the app (``create_app(engine=...)``);
request handlers receive a session bound to ``request.app.state.engine``.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.config import settings
from app.core.exceptions import StorageError
from app.models import (  # noqa: F401 – register all models with SQLModel.metadata
    Answer,
    Dataset,
    DatasetFile,
    Question,
    Submission,
    User,
)

_logger = logging.getLogger("labelhub.database")


def build_engine(url: str | None = None, timeout: float | None = None) -> Engine:
    """Create an engine with a bounded per-statement timeout.

    SQLite gets its busy timeout and foreign-key enforcement; PostgreSQL gets a
    server-side ``statement_timeout``. In-memory SQLite shares one connection.
    """
    url = url or settings.database_url
    timeout = timeout or settings.storage_timeout_seconds
    kwargs: dict = {"pool_pre_ping": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False, "timeout": timeout}
        if ":memory:" in url or url.rstrip("/") in ("sqlite:", "sqlite+pysqlite:"):
            kwargs["poolclass"] = StaticPool
    elif url.startswith("postgresql"):
        kwargs["connect_args"] = {"options": f"-c statement_timeout={int(timeout * 1000)}"}
    engine = create_engine(url, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_and_tables(engine: Engine) -> None:
    """Create all tables and indexes that do not exist yet."""
    SQLModel.metadata.create_all(engine)


def get_session(request: Request):
    """Yield a DB session bound to the app's engine (for FastAPI Depends)."""
    with Session(request.app.state.engine) as session:
        yield session


@contextmanager
def storage_errors(session: Session, action: str):
    """Roll back and re-raise any SQLAlchemy failure as StorageError."""
    try:
        yield
    except SQLAlchemyError as exc:
        session.rollback()
        _logger.error("Storage failure during %s: %s", action, exc)
        raise StorageError(f"Could not {action}") from exc
