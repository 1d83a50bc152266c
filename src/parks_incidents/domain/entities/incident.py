"""Core incident entities for the domain layer"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from ...core.exceptions import InvalidIncidentError, InvalidTransitionError
from ..enums import AssignmentStatus, HistoryAction, IncidentCategory, IncidentSeverity, IncidentStatus, LifecycleAction
from ..lifecycle import available_actions, next_status


@dataclass(frozen=True)
class Incident:
    """A reported problem in a park, tracked through the four-status lifecycle.

    The entity is immutable: every lifecycle step returns a new instance, so a
    copy held by a cache or a view never changes under its holder.
    """

    id: int
    title: str
    description: str
    category: IncidentCategory
    severity: IncidentSeverity
    status: IncidentStatus
    park_id: int
    reporter_name: str
    created_at: datetime
    updated_at: datetime
    asset_id: int | None = None
    reporter_email: str | None = None
    assigned_to_id: int | None = None
    resolution_notes: str | None = None
    resolution_date: datetime | None = None
    location: str | None = None
    park_name: str | None = None
    asset_name: str | None = None

    def __post_init__(self) -> None:
        """Validate business rules on entity creation"""
        if not self.title or not self.title.strip():
            raise InvalidIncidentError("Incident title is required")
        if not self.description or not self.description.strip():
            raise InvalidIncidentError("Incident description is required")
        if not self.reporter_name or not self.reporter_name.strip():
            raise InvalidIncidentError("Reporter name is required")

        # notes and date travel together, and only on resolved incidents
        has_notes = self.resolution_notes is not None
        has_date = self.resolution_date is not None
        if has_notes != has_date:
            raise InvalidIncidentError("Resolution notes and resolution date must be set together")
        if has_notes and self.status is not IncidentStatus.RESOLVED:
            raise InvalidIncidentError(
                "Resolution details are only allowed on resolved incidents",
                details={"status": self.status.value},
            )

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def available_actions(self) -> frozenset[LifecycleAction]:
        """Actions that may be offered for this incident."""
        return available_actions(self.status)

    def with_status(self, action: LifecycleAction, at: datetime) -> Incident:
        """Return a copy moved along the lifecycle by a status-changing action.

        Raises:
            InvalidTransitionError: If the action is not allowed from the current status
        """
        return replace(self, status=next_status(self.status, action), updated_at=at)

    def with_assignee(self, user_id: int, at: datetime) -> Incident:
        """Return a copy assigned to ``user_id``; the status is unchanged."""
        next_status(self.status, LifecycleAction.ASSIGN)
        return replace(self, assigned_to_id=user_id, updated_at=at)

    def with_resolution(self, notes: str, at: datetime) -> Incident:
        """Return a resolved copy carrying the notes and resolution date.

        The assignee is kept as is.
        """
        status = next_status(self.status, LifecycleAction.RESOLVE)
        return replace(self, status=status, resolution_notes=notes, resolution_date=at, updated_at=at)

    def to_dict(self) -> dict[str, Any]:
        """Convert entity to dictionary representation for serialization"""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category.value,
            "severity": self.severity.value,
            "status": self.status.value,
            "park_id": self.park_id,
            "asset_id": self.asset_id,
            "reporter_name": self.reporter_name,
            "reporter_email": self.reporter_email,
            "assigned_to_id": self.assigned_to_id,
            "resolution_notes": self.resolution_notes,
            "resolution_date": self.resolution_date.isoformat() if self.resolution_date else None,
            "location": self.location,
            "park_name": self.park_name,
            "asset_name": self.asset_name,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass(frozen=True)
class Comment:
    """A note attached to an incident."""

    id: int
    incident_id: int
    content: str
    created_at: datetime
    user_id: int | None = None

    def __post_init__(self) -> None:
        if not self.content or not self.content.strip():
            raise InvalidIncidentError("Comment content is required")


@dataclass(frozen=True)
class HistoryEntry:
    """An append-only audit record of one action taken on an incident."""

    id: int
    incident_id: int
    action: HistoryAction
    details: str
    created_at: datetime
    user_id: int | None = None


@dataclass(frozen=True)
class Assignment:
    """A piece of work handed to one user and department for an incident.

    An incident keeps every assignment ever made; the latest one also sets the
    incident's assignee. Completed and cancelled assignments are closed.
    """

    id: int
    incident_id: int
    assigned_to_id: int
    department: str
    status: AssignmentStatus
    created_at: datetime
    updated_at: datetime
    assigned_by_id: int | None = None
    due_date: datetime | None = None
    notes: str | None = None

    def __post_init__(self) -> None:
        if not self.department or not self.department.strip():
            raise InvalidIncidentError("Assignment department is required", details={"field": "department"})

    def with_status(self, status: AssignmentStatus, notes: str | None, at: datetime) -> Assignment:
        """Return a copy moved to ``status``; notes are replaced only when given.

        Raises:
            InvalidTransitionError: If the assignment is already closed
        """
        if self.status.is_terminal:
            raise InvalidTransitionError(
                f"Cannot update an assignment that is {self.status.value}", current_status=self.status.value
            )
        return replace(self, status=status, notes=notes if notes is not None else self.notes, updated_at=at)
