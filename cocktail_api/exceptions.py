"""
Cocktail Catalog Backend: Custom Exception Hierarchy
======================================================

What:  Application-specific exceptions for every failure the API reports.
Why:   Targeted handling with the right HTTP status and a user-safe message,
       instead of generic Python exceptions leaking internal details.
How:   Each exception carries a message and an optional context dict.
       Global handlers (main.py) turn them into JSON error responses.
Who:   Raised by services, dependencies and middleware; caught by global handlers.

Exception Hierarchy:
    CocktailCatalogError (base)
    ├── ConfigurationError           → fatal at startup
    ├── ValidationError              → 400 Bad Request
    ├── NotFoundError                → 404 Not Found
    ├── ConflictError                → 409 Conflict
    ├── AuthError                    → 401 / 403
    ├── RateLimitExceededError       → 429 Too Many Requests
    ├── StorageError                 → 500
    │   ├── FileStorageError
    │   │   └── ImageProcessingError
    │   ├── DatabaseError
    │   └── MalformedDigestError
    └── UpstreamDependencyError      → 500 (store unreachable)
"""

from typing import Any, Dict, Optional


class CocktailCatalogError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for 400-class errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ConfigurationError(CocktailCatalogError):
    """Required configuration is missing or invalid. Raised before the app is built."""


class ValidationError(CocktailCatalogError):
    """
    Raised when client input fails validation.

    When:    Missing required field, empty body, bad file type or size,
             comment too long.
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


class NotFoundError(CocktailCatalogError):
    """
    Raised when a referenced entity does not exist.

    SQLAlchemy returns None for missing rows; services convert that into
    NotFoundError so the route layer stays free of HTTP decisions.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource


class ConflictError(CocktailCatalogError):
    """
    Raised when a unique field would be duplicated.

    When:    Cocktail name already taken, email already registered,
             spirit already present.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        message: str = "Resource already exists",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthError(CocktailCatalogError):
    """
    Raised when a request cannot be authenticated or authorized.

    status_code:
        401 - no credentials were presented
        403 - credentials were presented but are invalid, expired,
              or lack the required access level

    The caller never learns *why* a token failed; the reason is kept in
    context for the server log.
    """

    def __init__(
        self,
        message: str = "Unauthorised",
        status_code: int = 403,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.status_code = status_code


class RateLimitExceededError(CocktailCatalogError):
    """Client exceeded the per-IP request budget. HTTP 429."""

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


class StorageError(CocktailCatalogError):
    """
    Base for I/O and persistence faults. HTTP 500.

    The client always receives a generic message; details stay in the log.
    """

    def __init__(
        self,
        message: str = "A storage error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(StorageError):
    """
    Raised when file system operations fail.

    When:    Disk full, permission denied, directory not writable, I/O error.
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ImageProcessingError(FileStorageError):
    """
    Raised when an uploaded original cannot be turned into a derivative.

    The original is left on disk when this is raised.
    """

    def __init__(
        self,
        message: str = "The uploaded image could not be processed.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(StorageError):
    """
    Raised when a database statement fails for a reason other than connectivity.

    Security Note:
        Detailed error info (SQL, constraint names) is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class MalformedDigestError(StorageError):
    """A stored password digest does not have the `salt$hash` shape."""

    def __init__(
        self,
        message: str = "Stored credential is malformed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UpstreamDependencyError(CocktailCatalogError):
    """
    Raised when the database cannot be reached at all.

    Fatal to the current request (HTTP 500), never to the process.
    """

    def __init__(
        self,
        message: str = "The data store is currently unavailable. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
