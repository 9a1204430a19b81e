# SPDX-License-Identifier: Apache-2.0
"""Register, login, current user."""
from fastapi import APIRouter, Depends, Request
from sqlmodel import Session

from app.config import settings
from app.core.identity import get_current_user
from app.core.security import create_access_token, rate_limit
from app.database import get_session
from app.models import User
from app.schemas import LoginRequest, RegisterRequest
from app.services.user_service import authenticate, register_user, user_to_dict

router = APIRouter(tags=["auth"])


@router.post("/register", status_code=201)
@rate_limit(settings.auth_rate_limit)
def auth_register(request: Request, body: RegisterRequest, session: Session = Depends(get_session)):
    """Create a user and return a bearer token."""
    user = register_user(session, body.username, body.email, body.password, body.role)
    return {
        "message": "Registration successful",
        "token": create_access_token(user.id, user.role),
        "user": user_to_dict(user),
    }


@router.post("/login")
@rate_limit(settings.auth_rate_limit)
def auth_login(request: Request, body: LoginRequest, session: Session = Depends(get_session)):
    user = authenticate(session, body.email, body.password)
    return {
        "message": "Login successful",
        "token": create_access_token(user.id, user.role),
        "user": user_to_dict(user),
    }


@router.get("/me")
def auth_me(user: User = Depends(get_current_user)):
    return {"user": user_to_dict(user)}
