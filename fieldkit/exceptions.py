"""
Custom Exception Classes for Fieldkit

This module defines the exceptions raised by the fieldtype registry, the
central field store and the form service, so that every convention violation
surfaces with a consistent error response.
"""

import enum
from typing import Any

from fastapi import status


class ErrorCode(str, enum.Enum):
    """Machine-readable error codes returned in error responses."""

    # Generic
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    VALIDATION_DUPLICATE_RESOURCE = "VALIDATION_DUPLICATE_RESOURCE"

    # Registry / naming convention
    FIELDTYPE_NOT_FOUND = "FIELDTYPE_NOT_FOUND"
    FIELDTYPE_INVALID_HANDLE = "FIELDTYPE_INVALID_HANDLE"
    FIELDTYPE_MISSING_COMPONENT = "FIELDTYPE_MISSING_COMPONENT"
    FIELDTYPE_COMPONENT_NAME_MISMATCH = "FIELDTYPE_COMPONENT_NAME_MISMATCH"

    # Store / forms
    FIELD_NOT_FOUND = "FIELD_NOT_FOUND"
    FIELD_VALIDATION_FAILED = "FIELD_VALIDATION_FAILED"
    FIELD_PRELOAD_FAILED = "FIELD_PRELOAD_FAILED"
    FIELD_NOTHING_TO_UNDO = "FIELD_NOTHING_TO_UNDO"
    FORM_NOT_FOUND = "FORM_NOT_FOUND"


class FieldkitError(Exception):
    """Base exception class for all Fieldkit exceptions"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.error_code = error_code
        super().__init__(self.message)


# ============================================================================
# Registry & Naming Convention Exceptions
# ============================================================================


class FieldtypeNotFoundError(FieldkitError):
    """Raised when content references a handle with no registered fieldtype"""

    def __init__(self, handle: str):
        super().__init__(
            message=f"Fieldtype '{handle}' is not registered",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"handle": handle},
            error_code=ErrorCode.FIELDTYPE_NOT_FOUND,
        )


class InvalidHandleError(FieldkitError):
    """Raised when a handle is not lower-snake-case"""

    def __init__(self, handle: Any):
        super().__init__(
            message=f"Invalid fieldtype handle '{handle}': expected lower_snake_case",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"handle": handle},
            error_code=ErrorCode.FIELDTYPE_INVALID_HANDLE,
        )


class MissingComponentError(FieldkitError):
    """Raised when a fieldtype is registered but its UI component is not"""

    def __init__(self, handle: str, component_name: str):
        super().__init__(
            message=f"Missing UI component '{component_name}' for fieldtype '{handle}'",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details={"handle": handle, "component": component_name},
            error_code=ErrorCode.FIELDTYPE_MISSING_COMPONENT,
        )


class ComponentNameMismatchError(FieldkitError):
    """Raised when a component name does not follow `<handle>-fieldtype[-index]`"""

    def __init__(self, component_name: str, reason: str, expected: str | None = None):
        details: dict[str, Any] = {"component": component_name, "reason": reason}
        if expected:
            details["expected"] = expected
        super().__init__(
            message=f"Component name '{component_name}' does not match a registered fieldtype: {reason}",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
            error_code=ErrorCode.FIELDTYPE_COMPONENT_NAME_MISMATCH,
        )


# ============================================================================
# Store & Form Exceptions
# ============================================================================


class FieldNotFoundError(FieldkitError):
    """Raised when the store holds no field with the given id"""

    def __init__(self, field_id: str):
        super().__init__(
            message=f"Field '{field_id}' not found",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"field": field_id},
            error_code=ErrorCode.FIELD_NOT_FOUND,
        )


class DuplicateFieldError(FieldkitError):
    """Raised when a form declares the same field id more than once"""

    def __init__(self, field_ids: list[str]):
        super().__init__(
            message=f"Duplicate field id(s): {', '.join(field_ids)}",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"fields": field_ids},
            error_code=ErrorCode.VALIDATION_DUPLICATE_RESOURCE,
        )


class FormNotFoundError(FieldkitError):
    """Raised when a form session id is unknown"""

    def __init__(self, form_id: str):
        super().__init__(
            message=f"Form '{form_id}' not found",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"form_id": form_id},
            error_code=ErrorCode.FORM_NOT_FOUND,
        )


class NothingToUndoError(FieldkitError):
    """Raised when undo is requested for a field without recorded changes"""

    def __init__(self, field_id: str):
        super().__init__(
            message=f"Field '{field_id}' has no changes to undo",
            status_code=status.HTTP_409_CONFLICT,
            details={"field": field_id},
            error_code=ErrorCode.FIELD_NOTHING_TO_UNDO,
        )


class FieldValidationError(FieldkitError):
    """Raised when one or more submitted field values fail validation"""

    def __init__(self, errors: dict[str, list[str]]):
        super().__init__(
            message="Field validation failed",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details={"fields": errors},
            error_code=ErrorCode.FIELD_VALIDATION_FAILED,
        )
        self.errors = errors


class PreloadError(FieldkitError):
    """Wraps an exception raised by a fieldtype's preload()"""

    def __init__(self, field_id: str, handle: str, cause: BaseException):
        super().__init__(
            message=f"Preload failed for field '{field_id}' ({handle}): {cause}",
            status_code=status.HTTP_502_BAD_GATEWAY,
            details={"field": field_id, "handle": handle, "cause": type(cause).__name__},
            error_code=ErrorCode.FIELD_PRELOAD_FAILED,
        )
        self.cause = cause
