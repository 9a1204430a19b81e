# SPDX-License-Identifier: Apache-2.0
"""Registration and credential checks."""
from __future__ import annotations

import logging

from sqlmodel import Session, select

from app.config import settings
from app.core.exceptions import AuthenticationError, AuthorizationError, ConflictError, ValidationError
from app.core.security import hash_password, verify_password
from app.database import storage_errors
from app.models import User
from app.models.user import ROLE_ADMIN, ROLE_USER

_logger = logging.getLogger("labelhub.users")


def user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "role": user.role,
        "created_at": user.created_at.isoformat(),
    }


def find_by_email(session: Session, email: str) -> User | None:
    return session.exec(select(User).where(User.email == email.strip().lower())).first()


def register_user(session: Session, username: str, email: str, password: str, role: str = ROLE_USER) -> User:
    username, email, password = username.strip(), email.strip().lower(), password.strip()
    if not username or not email or not password:
        raise ValidationError("username, email and password are required")
    if role == ROLE_ADMIN and not settings.allow_admin_registration:
        raise AuthorizationError("Admin registration is disabled")
    if find_by_email(session, email) is not None:
        raise ConflictError("Email is already registered")
    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        role=ROLE_ADMIN if role == ROLE_ADMIN else ROLE_USER,
    )
    with storage_errors(session, "create user"):
        session.add(user)
        session.commit()
        session.refresh(user)
    _logger.info("Registered user %s (%s)", user.id, user.role)
    return user


def authenticate(session: Session, email: str, password: str) -> User:
    """Return the user for valid credentials; the same error for unknown email and bad password."""
    user = find_by_email(session, email)
    if user is None or not verify_password(password.strip(), user.password_hash):
        raise AuthenticationError("Invalid email or password")
    return user
