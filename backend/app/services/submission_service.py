# SPDX-License-Identifier: Apache-2.0
"""Submission lifecycle: in_progress -> completed | failed.

`finalize_submission` is a conditional update guarded by the current status,
so a retried call cannot move a submission out of its terminal state.
"""
from __future__ import annotations

from sqlalchemy import update
from sqlmodel import Session

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.timeutil import utcnow
from app.database import storage_errors
from app.models import Answer, Submission
from app.models.submission import NO_FILE, STATUS_IN_PROGRESS, TERMINAL_STATUSES


def submission_to_dict(submission: Submission) -> dict:
    return {
        "id": submission.id,
        "user_id": submission.user_id,
        "dataset_id": submission.dataset_id,
        "status": submission.status,
        "started_at": submission.started_at.isoformat(),
        "submitted_at": submission.submitted_at.isoformat() if submission.submitted_at else None,
    }


def open_submission(session: Session, user_id: int, dataset_id: int) -> Submission:
    """Always a fresh row; re-attempts never merge into an earlier submission."""
    submission = Submission(user_id=user_id, dataset_id=dataset_id, status=STATUS_IN_PROGRESS, started_at=utcnow())
    with storage_errors(session, "open submission"):
        session.add(submission)
        session.commit()
        session.refresh(submission)
    return submission


def finalize_submission(session: Session, submission_id: int, outcome: str) -> bool:
    """Move an in-progress submission to `outcome`. Returns False if it was already terminal."""
    if outcome not in TERMINAL_STATUSES:
        raise ValidationError(f"Not a terminal status: {outcome}")
    stmt = (
        update(Submission.__table__)
        .where(Submission.__table__.c.id == submission_id, Submission.__table__.c.status == STATUS_IN_PROGRESS)
        .values(status=outcome, submitted_at=utcnow())
    )
    with storage_errors(session, "finalize submission"):
        changed = session.connection().execute(stmt).rowcount
        session.commit()
    if not changed and session.get(Submission, submission_id) is None:
        raise NotFoundError("Submission not found")
    return bool(changed)


def attach_answer(
    session: Session,
    submission: Submission,
    question_id: int,
    file_id: int | None,
    answer_value: str,
) -> Answer:
    """Insert (never upsert) one answer scoped to the submission, in its own transaction."""
    if submission.is_terminal:
        raise ConflictError(f"Submission {submission.id} is already {submission.status}")
    answer = Answer(
        submission_id=submission.id,
        user_id=submission.user_id,
        dataset_id=submission.dataset_id,
        question_id=question_id,
        file_id=file_id,
        file_key=file_id or NO_FILE,
        answer_value=answer_value,
    )
    with storage_errors(session, "save answer"):
        session.add(answer)
        session.commit()
        session.refresh(answer)
    return answer
