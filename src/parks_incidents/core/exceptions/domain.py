"""Domain-specific exception classes."""

from typing import Any

from .base import DomainError


class InvalidIncidentError(DomainError):
    """Raised when incident data breaks an entity invariant or names an unknown park or asset."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, "INVALID_INCIDENT", details)


class InvalidTransitionError(DomainError):
    """Raised when a lifecycle action is not allowed from the current status."""

    def __init__(self, message: str, current_status: str | None = None, action: str | None = None) -> None:
        details: dict[str, Any] = {}
        if current_status is not None:
            details["current_status"] = current_status
        if action is not None:
            details["action"] = action
        super().__init__(message, "INVALID_TRANSITION", details)
        self.current_status = current_status
        self.action = action


class IncidentNotFoundError(DomainError):
    """Raised when an incident id does not resolve to a stored incident."""

    def __init__(self, incident_id: int) -> None:
        super().__init__(f"Incident {incident_id} not found", "INCIDENT_NOT_FOUND", {"incident_id": incident_id})
        self.incident_id = incident_id


class AssignmentNotFoundError(DomainError):
    """Raised when an assignment id does not belong to the given incident."""

    def __init__(self, incident_id: int, assignment_id: int) -> None:
        super().__init__(
            f"Assignment {assignment_id} not found on incident {incident_id}",
            "ASSIGNMENT_NOT_FOUND",
            {"incident_id": incident_id, "assignment_id": assignment_id},
        )
