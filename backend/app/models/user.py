# SPDX-License-Identifier: Apache-2.0
"""User model."""
from datetime import datetime

from sqlmodel import Field, SQLModel

from app.core.timeutil import timestamp_field

ROLE_USER = "user"
ROLE_ADMIN = "admin"


class User(SQLModel, table=True):
    __tablename__ = "users"
    id: int | None = Field(default=None, primary_key=True)
    username: str
    email: str = Field(unique=True, index=True)
    password_hash: str
    role: str = ROLE_USER
    created_at: datetime = timestamp_field()
