# SPDX-License-Identifier: Apache-2.0
"""Question list per dataset and admin CRUD."""
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.identity import get_current_user, require_admin
from app.database import get_session
from app.models import User
from app.schemas import QuestionCreate, QuestionUpdate
from app.services import catalog_service
from app.services.catalog_service import question_to_dict

router = APIRouter(tags=["questions"])


@router.get("/dataset/{dataset_id}")
def questions_for_dataset(dataset_id: int, user: User = Depends(get_current_user), session: Session = Depends(get_session)):
    """Questions of a readable dataset, oldest first."""
    return {"questions": catalog_service.list_questions(session, user, dataset_id)}


@router.post("", status_code=201)
def questions_create(body: QuestionCreate, admin: User = Depends(require_admin), session: Session = Depends(get_session)):
    question = catalog_service.create_question(
        session, body.dataset_id, body.question_text, body.answer_type.value, body.options
    )
    return {"message": "Question created", "question": question_to_dict(question)}


@router.put("/{question_id}")
def questions_update(
    question_id: int,
    body: QuestionUpdate,
    admin: User = Depends(require_admin),
    session: Session = Depends(get_session),
):
    changes = body.model_dump(mode="json", exclude_unset=True)
    changes = {k: v for k, v in changes.items() if v is not None or k == "options"}
    question = catalog_service.update_question(session, question_id, changes)
    return {"message": "Question updated", "question": question_to_dict(question)}


@router.delete("/{question_id}")
def questions_delete(question_id: int, admin: User = Depends(require_admin), session: Session = Depends(get_session)):
    """Deletes the question and all answers to it."""
    catalog_service.delete_question(session, question_id)
    return {"message": "Question deleted"}
