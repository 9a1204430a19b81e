# SPDX-License-Identifier: Apache-2.0
"""Database, engine and storage error tests."""
from datetime import timezone

import pytest
from sqlalchemy import DateTime, inspect, text
from sqlalchemy.exc import OperationalError
from sqlmodel import SQLModel

from app.core.exceptions import StorageError
from app.core.timeutil import utcnow
from app.database import build_engine, create_db_and_tables, storage_errors
from app.models import User


def test_create_db_and_tables(engine):
    names = set(inspect(engine).get_table_names())
    assert {"users", "datasets", "questions", "dataset_files", "submissions", "answers"} <= names


def test_single_answer_key_is_a_partial_unique_index(engine):
    with engine.connect() as conn:
        row = conn.execute(
            text("SELECT sql FROM sqlite_master WHERE type='index' AND name='uq_answers_single_key'")
        ).fetchone()
    assert row is not None
    assert "UNIQUE" in row[0].upper()
    assert "submission_id IS NULL" in row[0]


def test_sqlite_foreign_keys_enforced(engine):
    with engine.connect() as conn:
        assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1


def test_in_memory_engine_shares_one_connection():
    engine = build_engine("sqlite://")
    create_db_and_tables(engine)
    with engine.connect() as conn:
        assert conn.execute(text("SELECT count(*) FROM users")).scalar() == 0


def test_storage_errors_converts_and_rolls_back(session):
    with pytest.raises(StorageError, match="Could not load things"):
        with storage_errors(session, "load things"):
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))


def test_storage_errors_passes_other_exceptions(session):
    with pytest.raises(KeyError):
        with storage_errors(session, "load things"):
            raise KeyError("x")


def test_timestamp_columns_store_timezone(engine):
    for table in SQLModel.metadata.sorted_tables:
        for column in table.columns:
            if isinstance(column.type, DateTime):
                assert column.type.timezone, f"{table.name}.{column.name}"


def test_utcnow_is_timezone_aware():
    assert utcnow().tzinfo is timezone.utc


def test_insert_with_default_timestamps(session):
    user = User(username="tz", email="tz@example.com", password_hash="x")
    session.add(user)
    session.commit()
    session.refresh(user)
    assert user.id is not None
    assert user.created_at is not None
