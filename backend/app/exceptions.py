"""
Product API — Custom Exception Hierarchy
==========================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Custom exceptions enable targeted error handling with appropriate HTTP
       status codes and user-friendly messages. They replace generic Python
       exceptions that would leak internal details to the client.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by config, database and services; caught by global handlers.

Exception Hierarchy:
    ProductAPIError (base)
    ├── ConfigurationError       → startup aborted (credentials missing)
    ├── DatabaseConnectionError  → startup aborted (database unreachable)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── NotFoundError            → 404 Not Found
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class ProductAPIError(Exception):
    """
    Base exception for all Product API errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for client errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ConfigurationError(ProductAPIError):
    """
    Raised when required configuration is missing or invalid.

    When:    DB_NAME or DB_PASSWORD is not set.
    Effect:  Startup is aborted; the server never accepts a request.
    """

    def __init__(
        self,
        message: str = "Configuration validation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseConnectionError(ProductAPIError):
    """
    Raised when the database cannot be reached during startup.

    The original driver error is kept in the context for the log line;
    the process does not serve traffic afterwards.
    """

    def __init__(
        self,
        message: str = "Connection to the database failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ValidationError(ProductAPIError):
    """
    Raised when client input fails validation.

    When:    The request body is not valid JSON or fails the schema
             (routes/products.validated_body).

    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Request body is missing required fields or contains invalid values",
            "details": {"errors": [{"field": "name", "message": "Field required", "type": "missing"}]}
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


class NotFoundError(ProductAPIError):
    """
    Raised when a requested resource does not exist.

    When:    GET/PUT/DELETE /api/products/{id} with an unknown or malformed id.
    HTTP:    404 Not Found

    SQLAlchemy returns None for missing rows (not an exception).
    The service layer converts None → NotFoundError.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(ProductAPIError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic.
        Detailed error info is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
