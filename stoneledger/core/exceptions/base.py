from typing import Any


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Resource not found."""

    def __init__(self, resource: str, identifier: Any = None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} with id={identifier} not found"
        super().__init__(message=message, status_code=404)


class ValidationError(AppException):
    """Validation error."""

    def __init__(self, message: str, field: str | None = None, status_code: int = 422):
        details = {"field": field} if field else {}
        super().__init__(message=message, status_code=status_code, details=details)


class InvalidFilterError(ValidationError):
    """Unrecognized date filter token."""

    def __init__(self, token: str, valid_tokens: list[str]):
        super().__init__(
            message=f"Invalid date filter type '{token}'. Valid types: {', '.join(valid_tokens)}",
            field="filter_type",
            status_code=400,
        )
        self.details["token"] = token


class MissingBoundsError(ValidationError):
    """Custom range without a usable start or end date."""

    def __init__(self, field: str, message: str | None = None):
        super().__init__(
            message=message or f"{field} is required for a custom date range (YYYY-MM-DD)",
            field=field,
            status_code=400,
        )


class InvertedRangeError(ValidationError):
    """End date before start date."""

    def __init__(self, start: Any, end: Any):
        super().__init__(
            message=f"End date {end} cannot be before start date {start}",
            field="end_date",
            status_code=400,
        )


class OrganizationNotFoundError(NotFoundError):
    """Organization lookup returned nothing."""

    def __init__(self, organization_id: Any):
        super().__init__("Organization", organization_id)
        self.details["field"] = "organization_id"


class RenderTimeoutError(AppException):
    """PDF engine exceeded its bound; retrying is preferable to a degraded file."""

    def __init__(self, timeout_seconds: float | None = None):
        message = (
            "PDF generation timed out. The report may be too large or the server is under "
            "heavy load. Please try again."
        )
        details = {"timeout_seconds": timeout_seconds} if timeout_seconds is not None else {}
        super().__init__(message=message, status_code=504, details=details)


class RenderEngineError(Exception):
    """Engine failed to start, crashed or returned unusable output. Handled inside the renderer."""
