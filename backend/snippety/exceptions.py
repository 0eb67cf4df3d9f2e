"""
Snippety — Custom Exception Hierarchy
=======================================

What:  Application-specific exceptions for the error kinds the app branches on.
Why:   Handlers need to tell "show a 404" apart from "something is broken"
       without inspecting driver exceptions.
How:   Each exception carries a message and optional context dict.
       Global exception handlers (registered in main.py) map them to
       HTTP responses.

Exception Hierarchy:
    SnippetyError (base)
    ├── ValidationError        → 422 (form re-rendered by the route)
    ├── NotFoundError          → 404 Not Found
    ├── DatabaseError          → 500 Internal Server Error
    ├── TemplateCacheError     → fatal at startup
    └── UnknownTemplateError   → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class SnippetyError(Exception):
    """
    Base exception for all Snippety application errors.

    Attributes:
        message:  User-facing error description
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SnippetyError):
    """
    Raised when submitted form data fails validation.

    `errors` maps field names to a message shown next to the field.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        errors: Optional[Dict[str, str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.errors = errors or {}


class NotFoundError(SnippetyError):
    """
    Raised when a requested resource does not exist.

    For snippets this also covers rows that exist but have expired; the
    caller cannot tell the two apart.
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
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(SnippetyError):
    """
    Raised when database operations fail unexpectedly.

    What:    Connection lost, malformed statement, constraint violation.
    HTTP:    500 Internal Server Error

    The response is always generic; the driver error is kept as __cause__
    and in `context` for the server-side log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class TemplateCacheError(SnippetyError):
    """
    Raised when the template cache cannot be built.

    Fatal to startup: the server must not serve traffic with a partial cache.
    """

    def __init__(
        self,
        message: str = "Could not build the template cache",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UnknownTemplateError(SnippetyError):
    """Raised when a handler asks the template cache for a page it does not hold."""

    def __init__(self, name: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["template"] = name
        super().__init__(message=f"The template {name!r} does not exist", context=ctx)
        self.name = name
