"""Application-specific exception classes."""

from .base import ApplicationError


class ValidationError(ApplicationError):
    """Raised when input is rejected, locally before a request or by the API."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, "VALIDATION_ERROR", {"field": field} if field else None)
        self.field = field


class ActionInProgressError(ApplicationError):
    """Raised when the same action on the same incident is already in flight."""

    def __init__(self, action: str, incident_id: int | None) -> None:
        super().__init__(
            f"'{action}' is already in progress",
            "ACTION_IN_PROGRESS",
            {"action": action, "incident_id": incident_id},
        )
