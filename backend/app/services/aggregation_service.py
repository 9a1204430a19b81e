# SPDX-License-Identifier: Apache-2.0
"""Admin view: submissions of a dataset, each with the answers it collected."""
from __future__ import annotations

from sqlmodel import Session, select

from app.database import storage_errors
from app.models import Answer, DatasetFile, Question, Submission, User
from app.services.answer_service import answer_to_dict
from app.services.catalog_service import get_dataset, user_summary
from app.services.submission_service import submission_to_dict


def list_submissions_with_answers(session: Session, dataset_id: int) -> dict:
    """Group the dataset's answers under their submission, most recent first.

    Standalone answers (no submission) belong to no group; they are counted in
    `total_answers` and reported separately as `unassigned_answers`.
    """
    get_dataset(session, dataset_id)
    with storage_errors(session, "load submissions"):
        submissions = session.exec(
            select(Submission, User)
            .outerjoin(User, Submission.user_id == User.id)
            .where(Submission.dataset_id == dataset_id)
            .order_by(Submission.started_at.desc(), Submission.id.desc())
        ).all()
        answers = session.exec(
            select(Answer, Question, DatasetFile)
            .outerjoin(Question, Answer.question_id == Question.id)
            .outerjoin(DatasetFile, Answer.file_id == DatasetFile.id)
            .where(Answer.dataset_id == dataset_id)
            .order_by(Answer.created_at.desc(), Answer.id.desc())
        ).all()

    by_submission: dict[int, list[dict]] = {}
    unassigned = 0
    for answer, question, dataset_file in answers:
        if answer.submission_id is None:
            unassigned += 1
            continue
        item = answer_to_dict(answer)
        item["question"] = (
            {
                "id": question.id,
                "question_text": question.question_text,
                "answer_type": question.answer_type,
                "options": question.option_list(),
            }
            if question
            else None
        )
        item["file"] = (
            {"id": dataset_file.id, "file_name": dataset_file.file_name, "file_url": dataset_file.file_url}
            if dataset_file
            else None
        )
        by_submission.setdefault(answer.submission_id, []).append(item)

    groups = []
    for submission, user in submissions:
        group = submission_to_dict(submission)
        group["user"] = user_summary(user)
        group["answers"] = by_submission.get(submission.id, [])
        groups.append(group)
    return {
        "submissions": groups,
        "total_submissions": len(groups),
        "total_answers": len(answers),
        "unassigned_answers": unassigned,
    }
