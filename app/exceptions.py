# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors should tell HOW to fix, not just WHAT failed.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class ComplianceAPIException(Exception):
    """
    Base exception for the compliance API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "COMPLIANCE_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Business Exceptions
# =============================================================================

class BusinessNotFoundError(ComplianceAPIException):
    """Raised when a business entity doesn't exist or isn't owned by the caller."""

    def __init__(self, business_id: str):
        super().__init__(
            message=f"Business not found: {business_id}",
            code="BUSINESS_NOT_FOUND",
            status_code=404,
            suggestion="Check that the business_id is correct and belongs to your account",
            details={"business_id": business_id}
        )


# =============================================================================
# Compliance Event Exceptions
# =============================================================================

class EventNotFoundError(ComplianceAPIException):
    """Raised when a compliance calendar event doesn't exist."""

    def __init__(self, event_id: str):
        super().__init__(
            message=f"Compliance event not found: {event_id}",
            code="EVENT_NOT_FOUND",
            status_code=404,
            suggestion="Check that the event_id is correct",
            details={"event_id": event_id}
        )


class EventAlreadyCompletedError(ComplianceAPIException):
    """Raised when completing an event that is already completed."""

    def __init__(self, event_id: str):
        super().__init__(
            message=f"Compliance event is already completed: {event_id}",
            code="EVENT_ALREADY_COMPLETED",
            status_code=409,
            suggestion="Reopen the event with PATCH /compliance/events/{id}/status first",
            details={"event_id": event_id}
        )


class InvalidStatusTransitionError(ComplianceAPIException):
    """Raised when a status change is not allowed."""

    def __init__(self, event_id: str, current: str, requested: str, allowed: list[str]):
        super().__init__(
            message=f"Cannot change event status from '{current}' to '{requested}'",
            code="INVALID_STATUS_TRANSITION",
            status_code=400,
            suggestion=(
                f"From '{current}' the status can become: {', '.join(allowed)}"
                if allowed else f"No status changes are allowed from '{current}'"
            ),
            details={"event_id": event_id, "current": current, "requested": requested}
        )


# =============================================================================
# Notification Exceptions
# =============================================================================

class NotificationNotFoundError(ComplianceAPIException):
    """Raised when an in-app notification doesn't exist for the caller."""

    def __init__(self, notification_id: str):
        super().__init__(
            message=f"Notification not found: {notification_id}",
            code="NOTIFICATION_NOT_FOUND",
            status_code=404,
            suggestion="Refresh your notification list",
            details={"notification_id": notification_id}
        )


# =============================================================================
# Upload Exceptions
# =============================================================================

class InvalidFileTypeError(ComplianceAPIException):
    """Raised when uploaded file type is not allowed."""

    def __init__(self, filename: str, allowed: list[str]):
        super().__init__(
            message=f"Invalid file type: {filename}",
            code="INVALID_FILE_TYPE",
            status_code=400,
            suggestion=f"Only these file types are supported: {', '.join(allowed)}",
            details={"filename": filename, "allowed_types": allowed}
        )


class FileTooLargeError(ComplianceAPIException):
    """Raised when uploaded file exceeds size limit."""

    def __init__(self, size_mb: float, max_mb: int):
        super().__init__(
            message=f"File too large: {size_mb:.1f}MB (max: {max_mb}MB)",
            code="FILE_TOO_LARGE",
            status_code=413,
            suggestion=f"Upload a file smaller than {max_mb}MB",
            details={"size_mb": size_mb, "max_mb": max_mb}
        )


class StorageUploadError(ComplianceAPIException):
    """Raised when file upload to storage fails."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Failed to upload file to storage: {error}",
            code="STORAGE_UPLOAD_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error}
        )


# =============================================================================
# Authorization Exceptions
# =============================================================================

class AdminRequiredError(ComplianceAPIException):
    """Raised when a non-admin calls an admin endpoint."""

    def __init__(self):
        super().__init__(
            message="Administrator access required",
            code="ADMIN_REQUIRED",
            status_code=403,
            suggestion="Sign in with an account that has the admin role",
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def compliance_exception_handler(
    request: Request,
    exc: ComplianceAPIException
) -> JSONResponse:
    """
    Convert ComplianceAPIException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Converts validation errors to user-friendly messages.
    """
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": str(exc)
        }
    )
