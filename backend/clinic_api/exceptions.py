"""
Clinic Tracker Backend — Custom Exception Hierarchy
====================================================

What:  Application-specific exceptions, one per error category.
How:   Each exception carries a user-facing message and a context dict.
       Global handlers registered in main.py turn them into the shared JSON
       error envelope with the right status code. Context is logged
       server-side and only returned to the client for 4xx errors.
Who:   Raised by services and middleware; caught by global handlers.

Exception Hierarchy:
    ClinicError (base)
    ├── ValidationError          → 400 Bad Request
    ├── ForbiddenError           → 403 Forbidden (record owned by someone else)
    ├── NotFoundError            → 404 Not Found
    ├── RateLimitExceededError   → 429 Too Many Requests
    ├── DatabaseError            → 500 Internal Server Error
    └── MailDeliveryError        → 500 Internal Server Error
"""

from typing import Any, Dict, List, Optional


class ClinicError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ClinicError):
    """
    Raised when client input breaks a business rule.

    When:    Duplicate email, empty update body, unknown formula name, malformed
             batch request. Schema-level failures (missing fields, wrong types)
             come from FastAPI's RequestValidationError, which main.py also
             maps to 400.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(ClinicError):
    """
    Raised when a requested resource does not exist.

    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id is not None:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        super().__init__(message=message, context=ctx)


class ForbiddenError(ClinicError):
    """
    Raised when a record exists but belongs to a different user.

    HTTP:    403 Forbidden

    Kept distinct from NotFoundError: callers are told that the id exists.
    `unauthorized_ids` is filled in by batch operations.
    """

    def __init__(
        self,
        resource: str = "resource",
        action: str = "access",
        unauthorized_ids: Optional[List[int]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if unauthorized_ids:
            message = f"You do not have permission to {action} some of the {resource} records"
        else:
            message = f"You do not have permission to {action} this {resource}"
        ctx = context or {}
        ctx["resource"] = resource
        if unauthorized_ids:
            ctx["unauthorized_ids"] = unauthorized_ids
        super().__init__(message=message, context=ctx)
        self.unauthorized_ids = unauthorized_ids or []


class DatabaseError(ClinicError):
    """
    Raised when a database operation fails unexpectedly.

    HTTP:    500 Internal Server Error

    The client always receives a generic message; the context (operation,
    original exception type) is logged only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class MailDeliveryError(ClinicError):
    """
    Raised when the outbound mail server rejects or drops a message.

    HTTP:    500 Internal Server Error

    Nothing is retried. Anything persisted before the send attempt (an
    issued verification code) stays committed.
    """

    def __init__(
        self,
        message: str = "The email could not be delivered. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(ClinicError):
    """
    Raised when a client exceeds the per-IP limit on the auth endpoints.

    HTTP:    429 Too Many Requests (with Retry-After header)
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
