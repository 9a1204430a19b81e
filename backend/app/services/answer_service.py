# SPDX-License-Identifier: Apache-2.0
"""Single-answer path: atomic upsert keyed by (user, dataset, question, file), listing, deletion."""
from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlmodel import Session, select

from app.core.exceptions import NotFoundError, StorageError, ValidationError
from app.core.timeutil import utcnow
from app.core.visibility import Capability, check
from app.database import storage_errors
from app.models import Answer, DatasetFile, Question
from app.models.submission import NO_FILE
from app.services.answer_types import canonical_answer

_UPSERT_INSERTS = {"sqlite": sqlite_insert, "postgresql": pg_insert}
_SINGLE_KEY = ["user_id", "dataset_id", "question_id", "file_key"]


def answer_to_dict(answer: Answer) -> dict:
    return {
        "id": answer.id,
        "kind": answer.kind,
        "user_id": answer.user_id,
        "dataset_id": answer.dataset_id,
        "question_id": answer.question_id,
        "file_id": answer.file_id,
        "submission_id": answer.submission_id,
        "answer_value": answer.answer_value,
        "created_at": answer.created_at.isoformat(),
        "updated_at": answer.updated_at.isoformat(),
    }


def resolve_question(session: Session, dataset_id: int, question_id: int, file_id: int | None) -> Question:
    """Return the question if it (and the optional file) belong to the dataset."""
    question = session.get(Question, question_id)
    if question is None or question.dataset_id != dataset_id:
        raise NotFoundError(f"Question {question_id} not found in dataset {dataset_id}")
    if file_id is not None:
        dataset_file = session.get(DatasetFile, file_id)
        if dataset_file is None or dataset_file.dataset_id != dataset_id:
            raise NotFoundError(f"File {file_id} not found in dataset {dataset_id}")
    return question


def upsert_answer(
    session: Session,
    user_id: int,
    dataset_id: int,
    question_id: int | None,
    file_id: int | None,
    answer_value,
) -> Answer:
    """Create or replace the caller's standalone answer for one question (and file).

    A single INSERT ... ON CONFLICT DO UPDATE against the partial unique index,
    so two concurrent calls for the same key converge on one row.
    """
    if not question_id:
        raise ValidationError("question_id is required")
    if answer_value is None:
        raise ValidationError("answer_value is required")
    question = resolve_question(session, dataset_id, question_id, file_id)
    stored_value = canonical_answer(question, answer_value)

    dialect = session.get_bind().dialect.name
    insert = _UPSERT_INSERTS.get(dialect)
    if insert is None:
        raise StorageError(f"Answer upsert is not supported on {dialect}")
    now = utcnow()
    stmt = insert(Answer.__table__).values(
        user_id=user_id,
        dataset_id=dataset_id,
        question_id=question_id,
        file_id=file_id,
        file_key=file_id or NO_FILE,
        answer_value=stored_value,
        submission_id=None,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=_SINGLE_KEY,
        index_where=text("submission_id IS NULL"),
        set_={"answer_value": stmt.excluded.answer_value, "updated_at": stmt.excluded.updated_at},
    ).returning(Answer.__table__.c.id)
    with storage_errors(session, "save answer"):
        answer_id = session.connection().execute(stmt).scalar_one()
        session.commit()
        answer = session.get(Answer, answer_id)
    return answer


def list_my_answers(session: Session, user_id: int, dataset_id: int) -> list[dict]:
    """The user's answers for a dataset, each with its question and file summary."""
    stmt = (
        select(Answer, Question, DatasetFile)
        .join(Question, Answer.question_id == Question.id)
        .outerjoin(DatasetFile, Answer.file_id == DatasetFile.id)
        .where(Answer.user_id == user_id, Answer.dataset_id == dataset_id)
        .order_by(Answer.created_at.desc(), Answer.id.desc())
    )
    out = []
    with storage_errors(session, "list answers"):
        rows = session.exec(stmt).all()
    for answer, question, dataset_file in rows:
        item = answer_to_dict(answer)
        item["question"] = {
            "question_text": question.question_text,
            "answer_type": question.answer_type,
            "options": question.option_list(),
        }
        item["file"] = (
            {"file_name": dataset_file.file_name, "file_url": dataset_file.file_url} if dataset_file else None
        )
        out.append(item)
    return out


def delete_answer(session: Session, requester, answer_id: int) -> None:
    """Delete one answer; only its owner or an admin may."""
    answer = session.get(Answer, answer_id)
    if answer is None:
        raise NotFoundError("Answer not found")
    check(Capability.OWNER, requester, answer)
    with storage_errors(session, "delete answer"):
        session.delete(answer)
        session.commit()
