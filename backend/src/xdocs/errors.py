"""Domain error hierarchy.

Services raise these; the exception handlers registered in main.py are the
only place they are turned into HTTP responses. Each class carries the HTTP
status and the machine-readable code used in the response body.
"""

from typing import Optional


class XDocsError(Exception):
    """Base class for all errors surfaced to API clients."""

    status_code: int = 500
    code: str = "internal_error"
    default_message: str = "internal error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInputError(XDocsError):
    status_code = 400
    code = "invalid_input"
    default_message = "invalid input"


class AuthenticationError(XDocsError):
    """Missing, malformed or expired bearer token."""

    status_code = 401
    code = "unauthorized"
    default_message = "not authenticated"


class InvalidCredentialsError(XDocsError):
    status_code = 401
    code = "invalid_credentials"
    default_message = "invalid credentials"


class ForbiddenError(XDocsError):
    status_code = 403
    code = "forbidden"
    default_message = "forbidden"


class NotActiveError(ForbiddenError):
    code = "not_active"
    default_message = "account is not active"


class ApprovalRequiredError(ForbiddenError):
    code = "approval_required"
    default_message = "download requires an approved request"


class NotFoundError(XDocsError):
    status_code = 404
    code = "not_found"
    default_message = "not found"


class ConflictError(XDocsError):
    status_code = 409
    code = "conflict"
    default_message = "conflict"


class InternalError(XDocsError):
    pass


class StorageError(InternalError):
    code = "storage_error"
    default_message = "storage error"


class PasswordVerifierError(InternalError):
    default_message = "password verification failed"
