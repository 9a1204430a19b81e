# SPDX-License-Identifier: Apache-2.0
"""Timezone-aware UTC timestamps for every table column."""
from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlmodel import Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def timestamp_field(nullable: bool = False):
    """A `timestamp with time zone` column, defaulting to now unless nullable."""
    if nullable:
        return Field(default=None, sa_type=DateTime(timezone=True))
    return Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
