"""
MediRate Admin Backend — Custom Exception Hierarchy
=====================================================

What:  Application-specific exceptions for each failure category.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the matching status code.
Who:   Raised by the auth layer and services; caught by global handlers.

Exception Hierarchy:
    MediRateError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── AuthenticationError      → 401 Unauthorized (no usable identity)
    ├── AuthorizationError       → 403 Forbidden (identity lacks admin rights)
    ├── NotFoundError            → 404 Not Found
    ├── MethodNotAllowedError    → 405 Method Not Allowed
    ├── RateLimitExceededError   → 429 Too Many Requests
    ├── DatabaseError            → 500 Internal Server Error
    ├── BlobStorageError         → 500 Internal Server Error
    ├── DriveServiceError        → 500 Internal Server Error
    ├── EmailDeliveryError       → 500 Internal Server Error
    └── UpstreamServiceError     → 500 Internal Server Error

    Downstream failures are terminal for the request: nothing here is retried.
    The 500-class messages are generic; the context dict is logged server-side
    and never returned to the client.
"""

from typing import Any, Dict, Optional


class MediRateError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client
                  for 500-class errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(MediRateError):
    """
    Raised when client input fails validation.

    When:    Missing required body field, value outside an allowed set.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Bill URL is required",
            "details": {"field": "url"}
        }
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


class AuthenticationError(MediRateError):
    """
    Raised when the request carries no usable identity.

    When:    Missing bearer token, bad signature, expired token, no email claim.
    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Unauthorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthorizationError(MediRateError):
    """
    Raised when an authenticated identity fails the admin policy.

    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "Admin access required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(MediRateError):
    """
    Raised when a requested resource does not exist.

    When:    Role lookup or role update for an email with no User row.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class MethodNotAllowedError(MediRateError):
    """
    Raised by handlers that accept any verb but only act on one.

    HTTP:    405 Method Not Allowed (with an Allow header)
    """

    def __init__(
        self,
        allowed: str = "POST",
        message: str = "Method not allowed.",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["allowed"] = allowed
        super().__init__(message=message, context=ctx)
        self.allowed = allowed


class RateLimitExceededError(MediRateError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests
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


class DatabaseError(MediRateError):
    """
    Raised when a statement against the hosted database fails.

    Security Note:
        The message returned to the client is always generic.
        Driver errors (SQL, constraint names) are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class BlobStorageError(MediRateError):
    """
    Raised when a blob store call (list, put, delete) fails.

    For folder deletes the context records how many objects were already
    removed, so a partial delete is visible in the logs.
    """

    def __init__(
        self,
        message: str = "Document storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DriveServiceError(MediRateError):
    """Raised when a Google Drive API call fails."""

    def __init__(
        self,
        message: str = "Document service operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class EmailDeliveryError(MediRateError):
    """Raised when the mail transport rejects or cannot deliver a message."""

    def __init__(
        self,
        message: str = "Failed to send email.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UpstreamServiceError(MediRateError):
    """Raised when a diagnostic call to another service (site API, Stripe) fails."""

    def __init__(
        self,
        message: str = "Upstream service call failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
