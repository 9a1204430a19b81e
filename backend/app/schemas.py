# SPDX-License-Identifier: Apache-2.0
"""Pydantic request schemas."""
from typing import Any

from pydantic import BaseModel, ConfigDict, Field as PydanticField

from app.services.answer_types import AnswerType

AnswerValue = str | int | float | bool | list[str] | None


class RegisterRequest(BaseModel):
    username: str = PydanticField(..., min_length=1, max_length=100)
    email: str = PydanticField(..., min_length=3, max_length=254)
    password: str = PydanticField(..., min_length=1, max_length=72)
    role: str = "user"


class LoginRequest(BaseModel):
    email: str = PydanticField(..., max_length=254)
    password: str = PydanticField(..., max_length=72)


class QuestionDraft(BaseModel):
    """Initial question supplied with a new dataset; accepts `text`/`answerType` too."""

    model_config = ConfigDict(populate_by_name=True)

    question_text: str = PydanticField(..., min_length=1, alias="text")
    answer_type: AnswerType = PydanticField(..., alias="answerType")
    options: list[str] | None = None


class DatasetCreate(BaseModel):
    name: str = PydanticField(..., min_length=1, max_length=200)
    file_type: str = PydanticField(..., min_length=1, max_length=100)
    description: str = PydanticField("", max_length=2000)
    is_published: bool = False
    questions: list[QuestionDraft] = []


class DatasetUpdate(BaseModel):
    name: str | None = PydanticField(None, min_length=1, max_length=200)
    description: str | None = PydanticField(None, max_length=2000)
    file_type: str | None = PydanticField(None, min_length=1, max_length=100)
    is_published: bool | None = None


class QuestionCreate(BaseModel):
    dataset_id: int
    question_text: str = PydanticField(..., min_length=1, max_length=2000)
    answer_type: AnswerType
    options: list[str] | None = None


class QuestionUpdate(BaseModel):
    question_text: str | None = PydanticField(None, min_length=1, max_length=2000)
    answer_type: AnswerType | None = None
    options: list[str] | None = None


class AnswerSubmit(BaseModel):
    dataset_id: int
    question_id: int | None = None
    file_id: int | None = None
    answer_value: AnswerValue = None


class BatchSubmit(BaseModel):
    dataset_id: int | None = None
    answers: list[Any] | None = None
