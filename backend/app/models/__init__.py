# SPDX-License-Identifier: Apache-2.0
"""SQLModel table definitions."""
from app.models.dataset import Dataset, DatasetFile, Question
from app.models.submission import Answer, Submission
from app.models.user import User

__all__ = [
    "Answer",
    "Dataset",
    "DatasetFile",
    "Question",
    "Submission",
    "User",
]
