# SPDX-License-Identifier: Apache-2.0
"""Resolve the bearer credential into the current user (FastAPI dependencies)."""
from __future__ import annotations

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from app.core.exceptions import AuthenticationError
from app.core.security import decode_access_token
from app.core.visibility import Capability, check
from app.database import get_session
from app.models import User

_bearer = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    session: Session = Depends(get_session),
) -> User:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Bearer token required")
    claims = decode_access_token(credentials.credentials)
    user = session.get(User, int(claims["sub"]))
    if user is None:
        raise AuthenticationError("Invalid token")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    check(Capability.WRITER, user)
    return user
