# SPDX-License-Identifier: Apache-2.0
"""Batch ingestion: many answers under one new submission, tolerating per-item failure."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlmodel import Session

from app.core.exceptions import LabelHubError, ValidationError
from app.database import storage_errors
from app.models import Answer
from app.models.submission import STATUS_COMPLETED, STATUS_FAILED
from app.services.answer_service import resolve_question
from app.services.answer_types import canonical_answer
from app.services.submission_service import attach_answer, finalize_submission, open_submission

_logger = logging.getLogger("labelhub.batch")


@dataclass
class BatchResult:
    submission_id: int
    stored: list[Answer] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)
    skipped: int = 0


def _optional_id(raw, name: str) -> int | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, bool):
        raise ValidationError(f"{name} must be an integer id")
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer id")


def _should_skip(item) -> bool:
    if not isinstance(item, dict):
        return True
    value = item.get("answer_value")
    return not item.get("question_id") or value is None or value == ""


def ingest_batch(session: Session, user_id: int, dataset_id: int, items: list) -> BatchResult:
    """Store every usable item under a fresh submission and finalize it.

    Items without a question_id or with an absent/empty answer_value are
    skipped, not reported. Any other per-item failure is captured in
    `errors` and the remaining items are still processed. The submission is
    finalized `completed` once the loop finishes, whatever the error count.
    """
    if not dataset_id:
        raise ValidationError("dataset_id is required")
    if not items:
        raise ValidationError("answers must be a non-empty list")

    submission = open_submission(session, user_id, dataset_id)
    result = BatchResult(submission_id=submission.id)
    _logger.info("Submission %s opened for user %s on dataset %s", submission.id, user_id, dataset_id)

    try:
        for item in items:
            if _should_skip(item):
                result.skipped += 1
                continue
            try:
                with storage_errors(session, "save answer"):
                    question_id = _optional_id(item.get("question_id"), "question_id")
                    file_id = _optional_id(item.get("file_id"), "file_id")
                    question = resolve_question(session, dataset_id, question_id, file_id)
                    value = canonical_answer(question, item["answer_value"])
                    result.stored.append(attach_answer(session, submission, question_id, file_id, value))
            except LabelHubError as exc:
                _logger.warning("Submission %s: answer rejected (%s): %s", submission.id, exc.kind, exc.message)
                result.errors.append({"answer": item, "error": exc.message})
    except Exception:
        _logger.exception("Batch ingestion aborted for submission %s", submission.id)
        finalize_submission(session, submission.id, STATUS_FAILED)
        raise

    finalize_submission(session, submission.id, STATUS_COMPLETED)
    _logger.info(
        "Saved %d/%d answers to submission %s (%d skipped, %d failed)",
        len(result.stored),
        len(items),
        submission.id,
        result.skipped,
        len(result.errors),
    )
    return result
