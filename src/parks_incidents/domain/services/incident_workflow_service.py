"""Server-side incident workflow.

Applies lifecycle actions to stored incidents, enforces the transition table and
records exactly one history entry per transition, comment or assignment change.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

import structlog

from ...core.clock import now as default_clock
from ...core.exceptions import AssignmentNotFoundError, IncidentNotFoundError, InvalidIncidentError
from ..entities.incident import Assignment, Comment, HistoryEntry, Incident
from ..enums import AssignmentStatus, HistoryAction, IncidentCategory, IncidentSeverity, IncidentStatus, LifecycleAction
from ..lifecycle import HISTORY_ACTION, action_for_target, ensure_action_allowed
from ..repositories.incident_repository import IncidentRepository

logger = structlog.get_logger(__name__)

COMMENT_EXCERPT_LENGTH = 50
DEFAULT_DEPARTMENT = "General"


@dataclass(frozen=True)
class NewIncident:
    """Validated-on-write input for a report submission."""

    title: str
    description: str
    park_id: int
    reporter_name: str
    severity: IncidentSeverity = IncidentSeverity.MEDIUM
    category: IncidentCategory = IncidentCategory.OTHER
    asset_id: int | None = None
    reporter_email: str | None = None
    location: str | None = None


@dataclass(frozen=True)
class NewAssignment:
    assigned_to_id: int
    department: str = DEFAULT_DEPARTMENT
    due_date: datetime | None = None
    notes: str | None = None


class IncidentWorkflowService:
    """
    Authoritative incident state machine for the reference API.

    Mutations are serialised with a lock so the status write and its history
    entry are never interleaved with another mutation.
    """

    def __init__(self, repository: IncidentRepository, clock: Callable[[], datetime] | None = None) -> None:
        self._repository = repository
        self._clock = clock or default_clock
        self._lock = asyncio.Lock()

    async def report(self, data: NewIncident) -> Incident:
        """Create an incident in the ``pending`` status.

        Raises:
            InvalidIncidentError: If required fields are blank or the park/asset cannot be resolved
        """
        if not data.title.strip():
            raise InvalidIncidentError("Title is required", details={"field": "title"})
        if not data.description.strip():
            raise InvalidIncidentError("Description is required", details={"field": "description"})
        if not data.reporter_name.strip():
            raise InvalidIncidentError("Reporter name is required", details={"field": "reporterName"})

        park = await self._repository.find_park(data.park_id)
        if park is None:
            raise InvalidIncidentError(f"Park {data.park_id} does not exist", details={"field": "parkId"})

        asset_name = None
        if data.asset_id is not None:
            asset = await self._repository.find_asset(data.asset_id)
            if asset is None or asset.park_id != park.id:
                raise InvalidIncidentError(
                    f"Asset {data.asset_id} does not exist in park {park.id}", details={"field": "assetId"}
                )
            asset_name = asset.name

        async with self._lock:
            at = self._clock()
            incident = Incident(
                id=await self._repository.next_incident_id(),
                title=data.title.strip(),
                description=data.description.strip(),
                category=data.category,
                severity=data.severity,
                status=IncidentStatus.PENDING,
                park_id=park.id,
                asset_id=data.asset_id,
                reporter_name=data.reporter_name.strip(),
                reporter_email=data.reporter_email,
                location=data.location,
                park_name=park.name,
                asset_name=asset_name,
                created_at=at,
                updated_at=at,
            )
            stored = await self._repository.save(incident)

        logger.info("Incident reported", incident_id=stored.id, park_id=stored.park_id, severity=stored.severity.value)
        return stored

    async def get(self, incident_id: int) -> Incident:
        incident = await self._repository.find_by_id(incident_id)
        if incident is None:
            raise IncidentNotFoundError(incident_id)
        return incident

    async def list_incidents(self, park_id: int | None = None) -> list[Incident]:
        return await self._repository.find_all(park_id=park_id)

    async def comments(self, incident_id: int) -> list[Comment]:
        await self.get(incident_id)
        return await self._repository.list_comments(incident_id)

    async def history(self, incident_id: int) -> list[HistoryEntry]:
        await self.get(incident_id)
        return await self._repository.list_history(incident_id)

    async def change_status(self, incident_id: int, target: IncidentStatus, actor_id: int | None) -> Incident:
        """Move an incident to ``target`` through the start or reject action.

        Raises:
            InvalidTransitionError: If ``target`` is not reachable from the current status
        """
        async with self._lock:
            incident = await self.get(incident_id)
            action = action_for_target(incident.status, target)
            at = self._clock()
            updated = await self._repository.save(incident.with_status(action, at))
            await self._record(
                updated,
                action,
                f"Status changed from {incident.status.value} to {updated.status.value}",
                actor_id,
                at,
            )

        logger.info(
            "Incident status changed",
            incident_id=incident_id,
            from_status=incident.status.value,
            to_status=updated.status.value,
            actor_id=actor_id,
        )
        return updated

    async def assign(self, incident_id: int, user_id: int, actor_id: int | None) -> Incident:
        async with self._lock:
            incident = await self.get(incident_id)
            at = self._clock()
            updated = await self._repository.save(incident.with_assignee(user_id, at))
            await self._record(updated, LifecycleAction.ASSIGN, f"Assigned to user {user_id}", actor_id, at)

        logger.info("Incident assigned", incident_id=incident_id, assigned_to_id=user_id, actor_id=actor_id)
        return updated

    async def resolve(self, incident_id: int, notes: str, actor_id: int | None) -> Incident:
        if not notes or not notes.strip():
            raise InvalidIncidentError("Resolution notes are required", details={"field": "resolutionNotes"})

        async with self._lock:
            incident = await self.get(incident_id)
            at = self._clock()
            updated = await self._repository.save(incident.with_resolution(notes.strip(), at))
            await self._record(updated, LifecycleAction.RESOLVE, notes.strip(), actor_id, at)

        logger.info("Incident resolved", incident_id=incident_id, actor_id=actor_id)
        return updated

    async def add_comment(self, incident_id: int, content: str, actor_id: int | None) -> Comment:
        if not content or not content.strip():
            raise InvalidIncidentError("Comment cannot be empty", details={"field": "content"})

        async with self._lock:
            incident = await self.get(incident_id)
            ensure_action_allowed(incident.status, LifecycleAction.COMMENT)
            at = self._clock()
            text = content.strip()
            comment = await self._repository.add_comment(incident_id, text, actor_id, at)
            excerpt = text if len(text) <= COMMENT_EXCERPT_LENGTH else f"{text[:COMMENT_EXCERPT_LENGTH]}..."
            await self._record(incident, LifecycleAction.COMMENT, f"Comment added: {excerpt}", actor_id, at)

        logger.info("Comment added", incident_id=incident_id, comment_id=comment.id, actor_id=actor_id)
        return comment

    async def assignments(self, incident_id: int) -> list[Assignment]:
        await self.get(incident_id)
        return await self._repository.list_assignments(incident_id)

    async def add_assignment(self, incident_id: int, data: NewAssignment, actor_id: int | None) -> Assignment:
        """Hand an incident to a user and department.

        The incident's assignee becomes ``data.assigned_to_id``; its status is
        unchanged. One ``assignment_created`` history entry is written.

        Raises:
            InvalidIncidentError: If the department is blank
            InvalidTransitionError: If the incident is resolved or rejected
        """
        department = data.department.strip()
        if not department:
            raise InvalidIncidentError("Department is required", details={"field": "department"})
        notes = data.notes.strip() if data.notes and data.notes.strip() else None

        async with self._lock:
            incident = await self.get(incident_id)
            at = self._clock()
            await self._repository.save(incident.with_assignee(data.assigned_to_id, at))
            assignment = await self._repository.save_assignment(
                Assignment(
                    id=await self._repository.next_assignment_id(),
                    incident_id=incident_id,
                    assigned_to_id=data.assigned_to_id,
                    assigned_by_id=actor_id,
                    department=department,
                    status=AssignmentStatus.PENDING,
                    due_date=data.due_date,
                    notes=notes,
                    created_at=at,
                    updated_at=at,
                )
            )
            await self._repository.append_history(
                incident_id,
                HistoryAction.ASSIGNMENT_CREATED,
                notes or f"Assigned to user {data.assigned_to_id} ({department})",
                actor_id,
                at,
            )

        logger.info(
            "Assignment created",
            incident_id=incident_id,
            assignment_id=assignment.id,
            assigned_to_id=assignment.assigned_to_id,
            department=department,
            actor_id=actor_id,
        )
        return assignment

    async def update_assignment(
        self,
        incident_id: int,
        assignment_id: int,
        status: AssignmentStatus,
        notes: str | None,
        actor_id: int | None,
    ) -> Assignment:
        """Move an assignment to ``status``, keeping its notes unless new ones are given.

        Raises:
            AssignmentNotFoundError: If the assignment does not belong to the incident
            InvalidTransitionError: If the assignment is already completed or cancelled
        """
        notes = notes.strip() if notes and notes.strip() else None

        async with self._lock:
            await self.get(incident_id)
            assignment = await self._repository.find_assignment(incident_id, assignment_id)
            if assignment is None:
                raise AssignmentNotFoundError(incident_id, assignment_id)
            at = self._clock()
            updated = await self._repository.save_assignment(assignment.with_status(status, notes, at))
            await self._repository.append_history(
                incident_id,
                HistoryAction.ASSIGNMENT_UPDATED,
                notes or f"Assignment {assignment_id} status changed to {status.value}",
                actor_id,
                at,
            )

        logger.info(
            "Assignment updated",
            incident_id=incident_id,
            assignment_id=assignment_id,
            from_status=assignment.status.value,
            to_status=status.value,
            actor_id=actor_id,
        )
        return updated

    async def _record(
        self, incident: Incident, action: LifecycleAction, details: str, actor_id: int | None, at: datetime
    ) -> HistoryEntry:
        history_action: HistoryAction = HISTORY_ACTION[action]
        return await self._repository.append_history(incident.id, history_action, details, actor_id, at)
