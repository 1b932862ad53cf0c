"""Application errors raised by the domain layer and rendered by the API."""

from typing import Any, Dict, Optional

from fastapi import status


class AppError(Exception):
    """Base application error."""

    code = "app_error"
    http_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Create a standardized error payload."""
        error = {"code": self.code, "message": self.message}
        if self.field:
            error["field"] = self.field
        return {"error": error}


class ValidationError(AppError):
    """Caller-fixable input problem."""

    code = "validation_error"
    http_status = status.HTTP_400_BAD_REQUEST


class InvalidAmount(ValidationError):
    code = "invalid_amount"


class NegativeComponent(ValidationError):
    code = "negative_component"


class PrincipalExceedsOutstanding(ValidationError):
    code = "principal_exceeds_outstanding"


class BreakdownExceedsAmount(ValidationError):
    code = "breakdown_exceeds_amount"


class NotFoundError(AppError):
    """Referenced record does not exist or is inactive."""

    code = "not_found"
    http_status = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    """Uniqueness violation or concurrent modification."""

    code = "conflict"
    http_status = status.HTTP_409_CONFLICT
