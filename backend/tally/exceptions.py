"""
Tally Backend - Custom Exception Hierarchy
===========================================

What:  Defines application-specific exceptions for different error scenarios.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return the failure envelope with the correct HTTP status code.
Who:   Raised by core helpers and services; caught by global handlers.
When:  During request processing when recoverable errors occur.

Exception Hierarchy:
    TallyError (base)
    ├── ValidationError       → 400 Bad Request (client can fix)
    ├── AuthenticationError   → 401 Unauthorized (no valid session)
    ├── NotFoundError         → 404 Not Found
    ├── ConflictError         → 409 Conflict
    └── DatabaseError         → 500 Internal Server Error

A PATCH that changes nothing is not an error; it is answered with 204 by
the route.
"""

from typing import Any, Dict, Optional, Sequence


class TallyError(Exception):
    """
    Base exception for all Tally application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional info; returned as `details` for client errors,
                  logged only for server errors
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(TallyError):
    """
    Raised when client input fails validation.

    When:    Missing required fields, explicit null on a NOT NULL field,
             PATCH without any field.
    HTTP:    400 Bad Request

    Example response:
        {
            "ok": false,
            "error": "validation_error",
            "message": "/records missing required fields: VariableId",
            "details": {"reason": "missing_fields", "fields": ["VariableId"]}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        fields: Optional[Sequence[str]] = None,
        reason: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if reason:
            ctx["reason"] = reason
        if field:
            ctx["field"] = field
        if fields:
            ctx["fields"] = list(fields)
        super().__init__(message=message, context=ctx)
        self.field = field
        self.fields = list(fields) if fields else ([field] if field else [])
        self.reason = reason


class AuthenticationError(TallyError):
    """
    Raised when a request has no valid session, or login credentials are wrong.

    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Login is required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(TallyError):
    """
    Raised when a requested or referenced resource does not exist.

    When:    GET/PATCH/DELETE of an unknown id, or a foreign key / list
             filter that points at a missing row.
    HTTP:    404 Not Found

    `field` names the foreign-key field that failed, when there is one.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        field: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id is not None:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = str(resource_id)
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id
        self.field = field


class ConflictError(TallyError):
    """
    Raised when a write would violate a uniqueness rule.

    When:    Joining with a username that is already taken.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        message: str = "The resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(TallyError):
    """
    Raised when database operations fail unexpectedly.

    When:    Connection lost mid-query, constraint violation, deadlock, etc.
    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; the context
    (operation, resource, original error type) is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
