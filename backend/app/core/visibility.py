# SPDX-License-Identifier: Apache-2.0
"""Visibility filter: who may read or write which dataset, and who may mutate an answer.

All role branching lives here. Route handlers ask for a capability once per
request instead of comparing roles inline.
"""
from __future__ import annotations

from enum import Enum
from typing import Protocol

from app.core.exceptions import AuthorizationError
from app.models.user import ROLE_ADMIN


class Requester(Protocol):
    id: int | None
    role: str


class Capability(str, Enum):
    READER = "reader"
    WRITER = "writer"
    OWNER = "owner"


def _is_admin(requester: Requester) -> bool:
    return requester.role == ROLE_ADMIN


def can_read(requester: Requester, dataset) -> bool:
    return _is_admin(requester) or bool(dataset.is_published)


def can_write(requester: Requester, dataset=None) -> bool:
    return _is_admin(requester)


def can_mutate_answer(requester: Requester, answer) -> bool:
    return _is_admin(requester) or (requester.id is not None and requester.id == answer.user_id)


_CHECKS = {
    Capability.READER: (can_read, "Dataset is not published"),
    Capability.WRITER: (can_write, "Admin role required"),
    Capability.OWNER: (can_mutate_answer, "Only the owner or an admin may modify this answer"),
}


def check(capability: Capability, requester: Requester, target=None) -> None:
    """Raise AuthorizationError unless `requester` holds `capability` on `target`."""
    predicate, message = _CHECKS[capability]
    if not predicate(requester, target):
        raise AuthorizationError(message)
