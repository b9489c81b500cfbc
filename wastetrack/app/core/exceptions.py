"""
Custom exceptions for consistent error reporting.

Provides standardized error codes for the collection core and a renderer
producing the payload shown by the surrounding UI layer.
"""

from typing import Any, Dict, Optional


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(message)


class InvalidTransitionError(AppException):
    """Raised when a status change is not allowed from the collection's current status."""

    def __init__(self, collection_id: str, current_status: str, attempted: str):
        super().__init__(
            message=f"Cannot {attempted} collection {collection_id} while it is {current_status}",
            error_code="ERR_TRANSITION_001",
            details={
                "collection_id": collection_id,
                "current_status": current_status,
                "attempted": attempted
            }
        )


class ValidationError(AppException):
    """Raised when a required input is missing or invalid."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="ERR_VALIDATION_001",
            details={"field": field} if field else {}
        )


class ResourceNotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND_001",
            details={"resource": resource, "id": resource_id}
        )


def error_payload(exc: Exception) -> Dict[str, Any]:
    """
    Render an exception as the error payload displayed to the user.

    App exceptions keep their code, message and details; anything else is
    reported as an internal error without leaking its message.
    """
    if isinstance(exc, AppException):
        return {
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details
        }

    return {
        "error_code": "ERR_INTERNAL",
        "message": "An internal error occurred",
        "details": {}
    }
