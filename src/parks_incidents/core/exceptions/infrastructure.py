"""Infrastructure-specific exception classes."""

from typing import Any

from .base import InfrastructureError


class RequestError(InfrastructureError):
    """Raised when the incidents API answers with a non-2xx status."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code or "REQUEST_ERROR", details)
        self.status_code = status_code


class RemoteIncidentNotFoundError(RequestError):
    """Raised when the incidents API answers 404 for an incident or one of its records."""

    def __init__(self, message: str, error_code: str | None = None, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, status_code=404, error_code=error_code or "INCIDENT_NOT_FOUND", details=details)


class ResponseFormatError(RequestError):
    """Raised when a response body does not match the expected schema."""

    def __init__(self, message: str, status_code: int | None = None, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, status_code=status_code, error_code="RESPONSE_FORMAT_ERROR", details=details)


class NetworkError(InfrastructureError):
    """Raised when the request never produced a response (timeout, connection failure)."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message, "NETWORK_ERROR")
        self.original_error = original_error
