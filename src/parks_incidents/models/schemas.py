"""Pydantic wire schemas for the incidents REST API.

Every payload crossing the HTTP boundary is parsed into one of these models, in
both directions: the reference API renders them and the client validates them on
receipt. Field names are camelCase on the wire.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..domain.entities.incident import Assignment, Comment, HistoryEntry, Incident
from ..domain.enums import AssignmentStatus, HistoryAction, IncidentCategory, IncidentSeverity, IncidentStatus


class WireModel(BaseModel):
    """Base for camelCase payloads that also accept snake_case field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class IncidentSchema(WireModel):
    """An incident as served by ``GET /api/incidents/{id}``."""

    id: int = Field(..., ge=1)
    title: str
    description: str
    category: IncidentCategory = IncidentCategory.OTHER
    severity: IncidentSeverity = Field(
        IncidentSeverity.MEDIUM,
        validation_alias=AliasChoices("severity", "priority"),
        description="Severity level; 'priority' is accepted on input",
    )
    status: IncidentStatus
    park_id: int
    asset_id: int | None = None
    reporter_name: str
    reporter_email: str | None = None
    assigned_to_id: int | None = None
    resolution_notes: str | None = None
    resolution_date: datetime | None = None
    location: str | None = None
    park_name: str | None = None
    asset_name: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, incident: Incident) -> IncidentSchema:
        return cls.model_validate(incident.to_dict())

    def to_entity(self) -> Incident:
        """Build the domain entity; raises ``InvalidIncidentError`` on broken invariants."""
        return Incident(
            id=self.id,
            title=self.title,
            description=self.description,
            category=self.category,
            severity=self.severity,
            status=self.status,
            park_id=self.park_id,
            asset_id=self.asset_id,
            reporter_name=self.reporter_name,
            reporter_email=self.reporter_email,
            assigned_to_id=self.assigned_to_id,
            resolution_notes=self.resolution_notes,
            resolution_date=self.resolution_date,
            location=self.location,
            park_name=self.park_name,
            asset_name=self.asset_name,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class CommentSchema(WireModel):
    id: int
    incident_id: int
    content: str
    user_id: int | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, comment: Comment) -> CommentSchema:
        return cls(
            id=comment.id,
            incident_id=comment.incident_id,
            content=comment.content,
            user_id=comment.user_id,
            created_at=comment.created_at,
        )

    def to_entity(self) -> Comment:
        return Comment(
            id=self.id,
            incident_id=self.incident_id,
            content=self.content,
            user_id=self.user_id,
            created_at=self.created_at,
        )


class HistoryEntrySchema(WireModel):
    id: int
    incident_id: int
    action: HistoryAction
    details: str
    user_id: int | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, entry: HistoryEntry) -> HistoryEntrySchema:
        return cls(
            id=entry.id,
            incident_id=entry.incident_id,
            action=entry.action,
            details=entry.details,
            user_id=entry.user_id,
            created_at=entry.created_at,
        )

    def to_entity(self) -> HistoryEntry:
        return HistoryEntry(
            id=self.id,
            incident_id=self.incident_id,
            action=self.action,
            details=self.details,
            user_id=self.user_id,
            created_at=self.created_at,
        )


class AssignmentSchema(WireModel):
    """One work assignment as listed by ``GET /api/incidents/{id}/assignments``."""

    id: int
    incident_id: int
    assigned_to_id: int
    assigned_by_id: int | None = None
    department: str
    status: AssignmentStatus
    due_date: datetime | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, assignment: Assignment) -> AssignmentSchema:
        return cls(
            id=assignment.id,
            incident_id=assignment.incident_id,
            assigned_to_id=assignment.assigned_to_id,
            assigned_by_id=assignment.assigned_by_id,
            department=assignment.department,
            status=assignment.status,
            due_date=assignment.due_date,
            notes=assignment.notes,
            created_at=assignment.created_at,
            updated_at=assignment.updated_at,
        )

    def to_entity(self) -> Assignment:
        return Assignment(
            id=self.id,
            incident_id=self.incident_id,
            assigned_to_id=self.assigned_to_id,
            assigned_by_id=self.assigned_by_id,
            department=self.department,
            status=self.status,
            due_date=self.due_date,
            notes=self.notes,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


# Request bodies


class CreateIncidentBody(WireModel):
    """Body of ``POST /api/incidents``."""

    title: str = Field(..., min_length=1, max_length=200, examples=["Broken swing"])
    description: str = Field(..., min_length=1, max_length=5000, examples=["Swing chain snapped"])
    severity: IncidentSeverity = Field(
        IncidentSeverity.MEDIUM,
        validation_alias=AliasChoices("severity", "priority"),
    )
    category: IncidentCategory = IncidentCategory.OTHER
    park_id: int = Field(..., gt=0, examples=[3])
    asset_id: int | None = Field(None, gt=0)
    reporter_name: str = Field(..., min_length=1, max_length=150)
    reporter_email: str | None = Field(None, max_length=254)
    location: str | None = Field(None, max_length=200)


class StatusChangeBody(WireModel):
    """Body of ``PUT /api/incidents/{id}/status``."""

    status: IncidentStatus


class AssignBody(WireModel):
    """Body of ``POST /api/incidents/{id}/assign``."""

    user_id: int = Field(..., gt=0)


class ResolveBody(WireModel):
    """Body of ``POST /api/incidents/{id}/resolve``."""

    resolution_notes: str = Field(..., min_length=1, max_length=5000)


class CommentBody(WireModel):
    """Body of ``POST /api/incidents/{id}/comments``."""

    content: str = Field(..., min_length=1, max_length=5000)
    user_id: int | None = Field(None, gt=0)


class AssignmentBody(WireModel):
    """Body of ``POST /api/incidents/{id}/assignments``."""

    assigned_to_id: int = Field(..., gt=0, validation_alias=AliasChoices("assignedToId", "assignedToUserId"))
    department: str = Field("General", min_length=1, max_length=100, examples=["Mantenimiento"])
    due_date: datetime | None = None
    notes: str | None = Field(None, max_length=2000)


class AssignmentUpdateBody(WireModel):
    """Body of ``PUT /api/incidents/{id}/assignments/{assignment_id}``."""

    status: AssignmentStatus
    notes: str | None = Field(None, max_length=2000)


# Aggregates


class StatsSchema(WireModel):
    """Dashboard counters served by ``GET /api/incidents/stats``."""

    total: int = Field(..., ge=0)
    by_status: dict[str, int] = Field(default_factory=dict)
    by_severity: dict[str, int] = Field(default_factory=dict)
    by_category: dict[str, int] = Field(default_factory=dict)
    by_park: dict[str, int] = Field(default_factory=dict, description="Counts keyed by park id")
    resolution_rate: float = Field(0.0, ge=0.0, le=1.0)
    average_resolution_days: float | None = Field(None, ge=0.0)
    recent: list[IncidentSchema] = Field(default_factory=list)


class HealthSchema(WireModel):
    status: str = Field(..., examples=["healthy"])
    version: str
    environment: str
    incident_count: int = Field(0, ge=0)
    timestamp: datetime
