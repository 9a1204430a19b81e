# SPDX-License-Identifier: Apache-2.0
"""Dataset, Question, DatasetFile models."""
import json
from datetime import datetime

from sqlmodel import Field, SQLModel

from app.core.timeutil import timestamp_field


class Dataset(SQLModel, table=True):
    __tablename__ = "datasets"
    id: int | None = Field(default=None, primary_key=True)
    name: str
    description: str = ""
    file_type: str
    is_published: bool = False
    created_by: int | None = Field(default=None, foreign_key="users.id", ondelete="SET NULL")
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()


class Question(SQLModel, table=True):
    __tablename__ = "questions"
    id: int | None = Field(default=None, primary_key=True)
    dataset_id: int = Field(foreign_key="datasets.id", ondelete="CASCADE", index=True)
    question_text: str
    answer_type: str = "text"
    options: str | None = None
    created_at: datetime = timestamp_field()

    def option_list(self) -> list[str]:
        """Decoded `options`; empty when unset or malformed."""
        try:
            opts = json.loads(self.options or "[]")
        except (json.JSONDecodeError, TypeError):
            return []
        return [str(o) for o in opts] if isinstance(opts, list) else []


class DatasetFile(SQLModel, table=True):
    __tablename__ = "dataset_files"
    id: int | None = Field(default=None, primary_key=True)
    dataset_id: int = Field(foreign_key="datasets.id", ondelete="CASCADE", index=True)
    file_name: str
    file_path: str
    file_url: str
    file_type: str = "application/octet-stream"
    file_size: int = 0
    created_at: datetime = timestamp_field()
