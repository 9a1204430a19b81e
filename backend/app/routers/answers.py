# SPDX-License-Identifier: Apache-2.0
"""Single answer upsert, batch submission, own answers, delete."""
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.exceptions import ValidationError
from app.core.identity import get_current_user
from app.database import get_session
from app.models import User
from app.schemas import AnswerSubmit, BatchSubmit
from app.services import answer_service
from app.services.answer_service import answer_to_dict
from app.services.batch_service import ingest_batch
from app.services.catalog_service import readable_dataset

router = APIRouter(tags=["answers"])


@router.post("")
def answers_submit(body: AnswerSubmit, user: User = Depends(get_current_user), session: Session = Depends(get_session)):
    """Create or update the caller's answer for (dataset, question, file)."""
    readable_dataset(session, user, body.dataset_id)
    answer = answer_service.upsert_answer(
        session, user.id, body.dataset_id, body.question_id, body.file_id, body.answer_value
    )
    return {"message": "Answer saved", "answer": answer_to_dict(answer)}


@router.post("/batch")
def answers_batch(body: BatchSubmit, user: User = Depends(get_current_user), session: Session = Depends(get_session)):
    """One submission holding many answers. Partial failures come back in `errors`."""
    if not body.dataset_id:
        raise ValidationError("dataset_id is required")
    if not body.answers:
        raise ValidationError("answers must be a non-empty list")
    readable_dataset(session, user, body.dataset_id)
    result = ingest_batch(session, user.id, body.dataset_id, body.answers)
    out = {
        "message": f"Saved {len(result.stored)} answers",
        "submission_id": result.submission_id,
        "results": [answer_to_dict(a) for a in result.stored],
    }
    if result.errors:
        out["errors"] = result.errors
    return out


@router.get("/my-answers/{dataset_id}")
def answers_mine(dataset_id: int, user: User = Depends(get_current_user), session: Session = Depends(get_session)):
    return {"answers": answer_service.list_my_answers(session, user.id, dataset_id)}


@router.delete("/{answer_id}")
def answers_delete(answer_id: int, user: User = Depends(get_current_user), session: Session = Depends(get_session)):
    """Owner or admin only."""
    answer_service.delete_answer(session, user, answer_id)
    return {"message": "Answer deleted"}
