# SPDX-License-Identifier: Apache-2.0
"""Submission and Answer models.

An answer either stands alone (`submission_id` is NULL, written by the
single-answer upsert) or belongs to one submission (written by batch
ingestion). Only standalone answers are unique per
(user, dataset, question, file); the partial index below enforces it.
"""
from datetime import datetime

from sqlalchemy import Index, text
from sqlmodel import Field, SQLModel

from app.core.timeutil import timestamp_field

STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"
TERMINAL_STATUSES = frozenset({STATUS_COMPLETED, STATUS_FAILED})

NO_FILE = 0


class Submission(SQLModel, table=True):
    __tablename__ = "submissions"
    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", ondelete="CASCADE", index=True)
    dataset_id: int = Field(foreign_key="datasets.id", ondelete="CASCADE", index=True)
    status: str = STATUS_IN_PROGRESS
    started_at: datetime = timestamp_field()
    submitted_at: datetime | None = timestamp_field(nullable=True)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class Answer(SQLModel, table=True):
    __tablename__ = "answers"
    __table_args__ = (
        Index(
            "uq_answers_single_key",
            "user_id",
            "dataset_id",
            "question_id",
            "file_key",
            unique=True,
            sqlite_where=text("submission_id IS NULL"),
            postgresql_where=text("submission_id IS NULL"),
        ),
    )
    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", ondelete="CASCADE", index=True)
    dataset_id: int = Field(foreign_key="datasets.id", ondelete="CASCADE", index=True)
    question_id: int = Field(foreign_key="questions.id", ondelete="CASCADE", index=True)
    file_id: int | None = Field(default=None, foreign_key="dataset_files.id", ondelete="CASCADE")
    file_key: int = NO_FILE
    answer_value: str = ""
    submission_id: int | None = Field(default=None, foreign_key="submissions.id", ondelete="CASCADE", index=True)
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()

    @property
    def kind(self) -> str:
        """'single' for upserted answers, 'batch' for submission-scoped ones."""
        return "single" if self.submission_id is None else "batch"
