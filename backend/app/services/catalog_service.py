# SPDX-License-Identifier: Apache-2.0
"""Datasets, questions and dataset files: CRUD with cascade deletion."""
from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import delete
from sqlmodel import Session, select

from app.config import settings
from app.core.exceptions import LabelHubError, NotFoundError, StorageError
from app.core.security import sanitize_text, secure_filename
from app.core.timeutil import utcnow
from app.core.visibility import Capability, can_read, check
from app.database import storage_errors
from app.models import Answer, Dataset, DatasetFile, Question, Submission, User
from app.services.blob_store import LocalBlobStore

_logger = logging.getLogger("labelhub.catalog")


@dataclass
class IncomingFile:
    filename: str
    content_type: str
    data: bytes


def user_summary(user: User | None) -> dict | None:
    if user is None:
        return None
    return {"id": user.id, "username": user.username, "email": user.email}


def question_to_dict(q: Question) -> dict:
    return {
        "id": q.id,
        "dataset_id": q.dataset_id,
        "question_text": q.question_text,
        "answer_type": q.answer_type,
        "options": q.option_list() if q.options is not None else None,
        "created_at": q.created_at.isoformat(),
    }


def file_to_dict(f: DatasetFile) -> dict:
    return {
        "id": f.id,
        "dataset_id": f.dataset_id,
        "file_name": f.file_name,
        "file_path": f.file_path,
        "file_url": f.file_url,
        "file_type": f.file_type,
        "file_size": f.file_size,
        "created_at": f.created_at.isoformat(),
    }


def dataset_to_dict(d: Dataset) -> dict:
    return {
        "id": d.id,
        "name": d.name,
        "description": d.description,
        "file_type": d.file_type,
        "is_published": d.is_published,
        "created_by": d.created_by,
        "created_at": d.created_at.isoformat(),
        "updated_at": d.updated_at.isoformat(),
    }


def _encode_options(options: list[str] | None) -> str | None:
    if options is None:
        return None
    return json.dumps([str(o) for o in options])


def _questions_for(session: Session, dataset_id: int) -> list[Question]:
    stmt = select(Question).where(Question.dataset_id == dataset_id).order_by(Question.created_at, Question.id)
    return list(session.exec(stmt).all())


def get_dataset(session: Session, dataset_id: int) -> Dataset:
    dataset = session.get(Dataset, dataset_id)
    if dataset is None:
        raise NotFoundError("Dataset not found")
    return dataset


def readable_dataset(session: Session, requester, dataset_id: int) -> Dataset:
    """Fetch a dataset and apply the reader check in one step."""
    dataset = get_dataset(session, dataset_id)
    check(Capability.READER, requester, dataset)
    return dataset


def list_datasets(session: Session, requester) -> list[dict]:
    """Newest first; non-admins only see published datasets."""
    with storage_errors(session, "list datasets"):
        rows = session.exec(select(Dataset).order_by(Dataset.created_at.desc(), Dataset.id.desc())).all()
        out = []
        for d in rows:
            if not can_read(requester, d):
                continue
            item = dataset_to_dict(d)
            item["creator"] = user_summary(session.get(User, d.created_by) if d.created_by else None)
            item["questions"] = [question_to_dict(q) for q in _questions_for(session, d.id)]
            out.append(item)
    return out


def dataset_detail(session: Session, requester, dataset_id: int) -> dict:
    dataset = readable_dataset(session, requester, dataset_id)
    item = dataset_to_dict(dataset)
    item["creator"] = user_summary(session.get(User, dataset.created_by) if dataset.created_by else None)
    item["questions"] = [question_to_dict(q) for q in _questions_for(session, dataset.id)]
    files = session.exec(
        select(DatasetFile).where(DatasetFile.dataset_id == dataset.id).order_by(DatasetFile.id)
    ).all()
    item["files"] = [file_to_dict(f) for f in files]
    return item


def create_dataset(
    session: Session,
    creator: User,
    name: str,
    file_type: str,
    description: str = "",
    is_published: bool = False,
    questions: list[dict] | None = None,
) -> Dataset:
    """Create the dataset and its initial questions in one transaction."""
    dataset = Dataset(
        name=sanitize_text(name, 200),
        description=sanitize_text(description or "", 2000),
        file_type=file_type,
        is_published=is_published,
        created_by=creator.id,
    )
    with storage_errors(session, "create dataset"):
        session.add(dataset)
        session.flush()
        for q in questions or []:
            session.add(
                Question(
                    dataset_id=dataset.id,
                    question_text=sanitize_text(q["question_text"], 2000),
                    answer_type=q["answer_type"],
                    options=_encode_options(q.get("options")),
                )
            )
        session.commit()
        session.refresh(dataset)
    return dataset


def update_dataset(session: Session, dataset_id: int, changes: dict) -> Dataset:
    """Partial update: only keys present in `changes` are written."""
    dataset = get_dataset(session, dataset_id)
    for key in ("name", "description", "file_type", "is_published"):
        if key not in changes:
            continue
        value = changes[key]
        if key == "name":
            value = sanitize_text(value, 200)
        elif key == "description":
            value = sanitize_text(value or "", 2000)
        setattr(dataset, key, value)
    dataset.updated_at = utcnow()
    with storage_errors(session, "update dataset"):
        session.add(dataset)
        session.commit()
        session.refresh(dataset)
    return dataset


def _remove_blobs(blob_store: LocalBlobStore, paths: list[str]) -> None:
    for path in paths:
        try:
            blob_store.remove(path)
        except LabelHubError as exc:
            _logger.warning("Could not remove blob %s: %s", path, exc.message)


def delete_dataset(session: Session, blob_store: LocalBlobStore, dataset_id: int) -> None:
    """Delete answers, submissions, questions and files of the dataset, then the dataset."""
    dataset = get_dataset(session, dataset_id)
    blob_paths = list(session.exec(select(DatasetFile.file_path).where(DatasetFile.dataset_id == dataset_id)).all())
    with storage_errors(session, "delete dataset"):
        conn = session.connection()
        for model in (Answer, Submission, Question, DatasetFile):
            conn.execute(delete(model.__table__).where(model.__table__.c.dataset_id == dataset_id))
        session.delete(dataset)
        session.commit()
    _remove_blobs(blob_store, blob_paths)
    _logger.info("Dataset %s deleted with %d file(s)", dataset_id, len(blob_paths))


def list_questions(session: Session, requester, dataset_id: int) -> list[dict]:
    readable_dataset(session, requester, dataset_id)
    return [question_to_dict(q) for q in _questions_for(session, dataset_id)]


def get_question(session: Session, question_id: int) -> Question:
    question = session.get(Question, question_id)
    if question is None:
        raise NotFoundError("Question not found")
    return question


def create_question(
    session: Session,
    dataset_id: int,
    question_text: str,
    answer_type: str,
    options: list[str] | None = None,
) -> Question:
    get_dataset(session, dataset_id)
    question = Question(
        dataset_id=dataset_id,
        question_text=sanitize_text(question_text, 2000),
        answer_type=answer_type,
        options=_encode_options(options),
    )
    with storage_errors(session, "create question"):
        session.add(question)
        session.commit()
        session.refresh(question)
    return question


def update_question(session: Session, question_id: int, changes: dict) -> Question:
    question = get_question(session, question_id)
    if "question_text" in changes:
        question.question_text = sanitize_text(changes["question_text"], 2000)
    if "answer_type" in changes:
        question.answer_type = changes["answer_type"]
    if "options" in changes:
        question.options = _encode_options(changes["options"])
    with storage_errors(session, "update question"):
        session.add(question)
        session.commit()
        session.refresh(question)
    return question


def delete_question(session: Session, question_id: int) -> None:
    """Delete a question together with every answer to it."""
    question = get_question(session, question_id)
    with storage_errors(session, "delete question"):
        session.connection().execute(delete(Answer.__table__).where(Answer.__table__.c.question_id == question_id))
        session.delete(question)
        session.commit()


def add_files(
    session: Session,
    blob_store: LocalBlobStore,
    dataset_id: int,
    uploads: list[IncomingFile],
) -> tuple[list[DatasetFile], list[dict]]:
    """Store each upload as a blob plus a record; one failure does not stop the rest."""
    get_dataset(session, dataset_id)
    stored: list[DatasetFile] = []
    errors: list[dict] = []
    for upload in uploads:
        if len(upload.data) > settings.max_upload_bytes:
            errors.append({"file": upload.filename, "error": f"File too large (max {settings.max_upload_size_mb} MB)"})
            continue
        path = f"datasets/{dataset_id}/{uuid.uuid4().hex[:12]}-{secure_filename(upload.filename)}"
        try:
            url = blob_store.upload(path, upload.data, upload.content_type)
        except LabelHubError as exc:
            _logger.error("Upload of %s failed: %s", upload.filename, exc.message)
            errors.append({"file": upload.filename, "error": exc.message})
            continue
        record = DatasetFile(
            dataset_id=dataset_id,
            file_name=upload.filename,
            file_path=path,
            file_url=url,
            file_type=upload.content_type or "application/octet-stream",
            file_size=len(upload.data),
        )
        try:
            with storage_errors(session, "save file record"):
                session.add(record)
                session.commit()
                session.refresh(record)
        except StorageError as exc:
            _remove_blobs(blob_store, [path])
            errors.append({"file": upload.filename, "error": exc.message})
            continue
        stored.append(record)
    _logger.info("Upload for dataset %s: %d/%d files stored", dataset_id, len(stored), len(uploads))
    return stored, errors


def delete_file(session: Session, blob_store: LocalBlobStore, dataset_id: int, file_id: int) -> None:
    """Delete the record and its answers, then the blob (failures only logged)."""
    record = session.get(DatasetFile, file_id)
    if record is None or record.dataset_id != dataset_id:
        raise NotFoundError("File not found")
    blob_path = record.file_path
    with storage_errors(session, "delete file"):
        session.connection().execute(delete(Answer.__table__).where(Answer.__table__.c.file_id == file_id))
        session.delete(record)
        session.commit()
    _remove_blobs(blob_store, [blob_path])
