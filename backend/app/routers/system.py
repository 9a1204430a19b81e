# SPDX-License-Identifier: Apache-2.0
"""Health and readiness endpoints."""
import sys

import fastapi
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlmodel import Session

from app.database import get_session, storage_errors

router = APIRouter(tags=["system"])


@router.get("/health")
def health():
    """Liveness."""
    return {"status": "ok"}


@router.get("/ready")
def ready(session: Session = Depends(get_session)):
    """Readiness: the database answers a trivial query."""
    with storage_errors(session, "reach the database"):
        session.connection().execute(text("SELECT 1"))
    return {
        "status": "ok",
        "database": True,
        "fastapi_version": getattr(fastapi, "__version__", "unknown"),
        "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
    }
