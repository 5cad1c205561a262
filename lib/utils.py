# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

from datetime import date, datetime
from typing import Any
from uuid import UUID


# =============================================================================
# Identifier Utilities
# =============================================================================

def normalize_id(value: str | int | UUID) -> str:
    """
    Normalize a row identifier to string format.

    Business and event IDs are serial integers in Postgres, user IDs are
    UUIDs; PostgREST filters accept both as strings.

    Example:
        normalize_id(42)        # "42"
        normalize_id(uuid_obj)  # "550e8400-..."
    """
    return value if isinstance(value, str) else str(value)


# =============================================================================
# Date Parsing
# =============================================================================

def parse_date(value: Any) -> date | None:
    """
    Parse a date from a Supabase row value.

    Timestamp columns come back as ISO strings ("2024-04-15T00:00:00+00:00"),
    date columns as "2024-04-15". Only the calendar date is kept.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value)
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return date.fromisoformat(text[:10])


def parse_datetime(value: Any) -> datetime | None:
    """Parse an ISO timestamp (Supabase style, possibly with a trailing Z)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def mask_email(email: str) -> str:
    """
    Mask an email address for logging.

    Example:
        mask_email("jane.doe@example.com")  # "j******e@example.com"
    """
    if not email or "@" not in email:
        return "***"
    local, domain = email.split("@", 1)
    if len(local) <= 2:
        return f"{local[0]}*@{domain}"
    return f"{local[0]}{'*' * (len(local) - 2)}{local[-1]}@{domain}"


# =============================================================================
# Base Error Class
# =============================================================================

class ApplicationError(Exception):
    """
    Base error class for application-specific errors.

    Provides actionable error messages following the principle:
    "Errors should tell HOW to fix, not just WHAT failed."

    Attributes:
        code: Error code for categorization
        message: Human-readable error message
        suggestion: Actionable suggestion for fixing the error
        details: Additional context for debugging

    Example:
        class MyServiceError(ApplicationError):
            def __init__(self, message: str, **kwargs):
                super().__init__(message, code="MY_SERVICE_ERROR", **kwargs)
    """

    def __init__(
        self,
        message: str,
        code: str = "APPLICATION_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f"\n  Suggestion: {self.suggestion}"
        return result

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for API responses."""
        return {
            "code": self.code,
            "message": self.message,
            "suggestion": self.suggestion,
            "details": self.details,
        }
