# SPDX-License-Identifier: Apache-2.0
"""Custom exception classes. Each maps to one HTTP status and error kind."""
from __future__ import annotations


class LabelHubError(Exception):
    """Base exception for LabelHub."""

    status_code = 500
    kind = "internal_error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__doc__ or self.kind


class ValidationError(LabelHubError):
    """Input or schema validation failed."""

    status_code = 400
    kind = "validation_error"


class AuthenticationError(LabelHubError):
    """Missing, invalid or expired credentials."""

    status_code = 401
    kind = "authentication_error"


class AuthorizationError(LabelHubError):
    """Role or ownership check failed."""

    status_code = 403
    kind = "authorization_error"


class NotFoundError(LabelHubError):
    """Resource not found."""

    status_code = 404
    kind = "not_found"


class ConflictError(LabelHubError):
    """Uniqueness or state conflict."""

    status_code = 409
    kind = "conflict"


class StorageError(LabelHubError):
    """Underlying database or blob store failure."""

    status_code = 503
    kind = "storage_error"
