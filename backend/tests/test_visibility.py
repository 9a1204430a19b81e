# SPDX-License-Identifier: Apache-2.0
"""Visibility filter: read/write/owner capabilities."""
from types import SimpleNamespace

import pytest

from app.core.exceptions import AuthorizationError
from app.core.visibility import Capability, can_mutate_answer, can_read, can_write, check

ADMIN = SimpleNamespace(id=1, role="admin")
ALICE = SimpleNamespace(id=2, role="user")
BOB = SimpleNamespace(id=3, role="user")
DRAFT = SimpleNamespace(is_published=False)
PUBLISHED = SimpleNamespace(is_published=True)


def test_can_read():
    assert can_read(ADMIN, DRAFT)
    assert can_read(ADMIN, PUBLISHED)
    assert can_read(ALICE, PUBLISHED)
    assert not can_read(ALICE, DRAFT)


def test_can_write_is_admin_only():
    assert can_write(ADMIN, PUBLISHED)
    assert not can_write(ALICE, PUBLISHED)
    assert not can_write(ALICE)


def test_can_mutate_answer():
    answer = SimpleNamespace(user_id=ALICE.id)
    assert can_mutate_answer(ALICE, answer)
    assert can_mutate_answer(ADMIN, answer)
    assert not can_mutate_answer(BOB, answer)


@pytest.mark.parametrize(
    "capability,requester,target",
    [
        (Capability.READER, ALICE, DRAFT),
        (Capability.WRITER, ALICE, None),
        (Capability.OWNER, BOB, SimpleNamespace(user_id=ALICE.id)),
    ],
)
def test_check_raises_when_denied(capability, requester, target):
    with pytest.raises(AuthorizationError):
        check(capability, requester, target)


def test_check_passes_when_allowed():
    check(Capability.READER, ALICE, PUBLISHED)
    check(Capability.WRITER, ADMIN)
    check(Capability.OWNER, ALICE, SimpleNamespace(user_id=ALICE.id))
