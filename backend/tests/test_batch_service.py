# SPDX-License-Identifier: Apache-2.0
"""Batch ingestion pipeline: partial tolerance, skipping, finalization."""
import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from app.core.exceptions import StorageError, ValidationError
from app.models import Answer, Submission
from app.services import batch_service
from app.services.batch_service import ingest_batch


def _submission(session, submission_id):
    session.expire_all()
    return session.get(Submission, submission_id)


def test_invalid_items_are_skipped_not_reported(session, seed):
    items = [
        {"question_id": seed.question.id, "answer_value": "42"},
        {"question_id": "", "answer_value": "x"},
        {"question_id": seed.question.id, "answer_value": ""},
        {"question_id": seed.question.id},
        {"answer_value": "orphan"},
    ]
    result = ingest_batch(session, seed.user.id, seed.dataset.id, items)
    assert len(result.stored) == 1
    assert result.stored[0].answer_value == "42"
    assert result.errors == []
    assert result.skipped == 4
    assert _submission(session, result.submission_id).status == "completed"


def test_failing_items_reported_and_processing_continues(session, seed):
    items = [
        {"question_id": seed.question.id, "answer_value": "one"},
        {"question_id": 9999, "answer_value": "unknown question"},
        {"question_id": seed.other_question.id, "answer_value": "fish"},
        {"question_id": seed.other_question.id, "answer_value": "cat"},
        {"question_id": "abc", "answer_value": "bad id"},
    ]
    result = ingest_batch(session, seed.user.id, seed.dataset.id, items)
    assert [a.answer_value for a in result.stored] == ["one", "cat"]
    assert [e["answer"]["answer_value"] for e in result.errors] == ["unknown question", "fish", "bad id"]
    assert all(e["error"] for e in result.errors)
    stored = session.exec(select(Answer).where(Answer.submission_id == result.submission_id)).all()
    assert len(stored) == 2


def test_completed_even_when_every_item_fails_in_storage(session, seed, monkeypatch):
    def broken_attach(*args, **kwargs):
        raise StorageError("Could not save answer")

    monkeypatch.setattr(batch_service, "attach_answer", broken_attach)
    items = [{"question_id": seed.question.id, "answer_value": str(i)} for i in range(3)]
    result = ingest_batch(session, seed.user.id, seed.dataset.id, items)
    assert result.stored == []
    assert len(result.errors) == 3
    submission = _submission(session, result.submission_id)
    assert submission.status == "completed"
    assert submission.submitted_at is not None


def test_unexpected_error_marks_submission_failed(session, seed, monkeypatch):
    def exploding_attach(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(batch_service, "attach_answer", exploding_attach)
    with pytest.raises(RuntimeError):
        ingest_batch(session, seed.user.id, seed.dataset.id, [{"question_id": seed.question.id, "answer_value": "x"}])
    submissions = session.exec(select(Submission)).all()
    assert [s.status for s in submissions] == ["failed"]


def test_open_failure_aborts_whole_batch(session, seed, monkeypatch):
    def broken_open(*args, **kwargs):
        raise StorageError("Could not open submission")

    monkeypatch.setattr(batch_service, "open_submission", broken_open)
    with pytest.raises(StorageError):
        ingest_batch(session, seed.user.id, seed.dataset.id, [{"question_id": seed.question.id, "answer_value": "x"}])
    assert session.exec(select(Answer)).all() == []


def test_requires_dataset_and_items(session, seed):
    with pytest.raises(ValidationError):
        ingest_batch(session, seed.user.id, None, [{"question_id": seed.question.id, "answer_value": "x"}])
    with pytest.raises(ValidationError):
        ingest_batch(session, seed.user.id, seed.dataset.id, [])
    assert session.exec(select(Submission)).all() == []


def test_each_call_is_a_new_submission(session, seed):
    items = [{"question_id": seed.question.id, "answer_value": "same"}]
    first = ingest_batch(session, seed.user.id, seed.dataset.id, items)
    second = ingest_batch(session, seed.user.id, seed.dataset.id, items)
    assert first.submission_id != second.submission_id
    assert len(session.exec(select(Answer)).all()) == 2


def test_storage_failure_during_lookup_is_an_item_error(session, seed, monkeypatch):
    real_resolve = batch_service.resolve_question
    calls = {"n": 0}

    def locked_on_second(*args, **kwargs):
        calls["n"] += 1
        if calls["n"] == 2:
            raise OperationalError("SELECT questions", {}, Exception("database is locked"))
        return real_resolve(*args, **kwargs)

    monkeypatch.setattr(batch_service, "resolve_question", locked_on_second)
    items = [{"question_id": seed.question.id, "answer_value": v} for v in ("a", "b", "c")]
    result = ingest_batch(session, seed.user.id, seed.dataset.id, items)
    assert [a.answer_value for a in result.stored] == ["a", "c"]
    assert [e["answer"]["answer_value"] for e in result.errors] == ["b"]
    assert result.errors[0]["error"] == "Could not save answer"
    assert _submission(session, result.submission_id).status == "completed"
