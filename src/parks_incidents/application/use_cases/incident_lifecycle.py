"""Incident lifecycle use cases for the desk client.

Input guards run before any network call, transitions are checked against the
incident's current status, and every successful mutation invalidates the cached
queries that show the incident so that all views converge by refetching.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

import structlog
from pydantic import ValidationError as PydanticValidationError

from ...config import Settings, get_settings
from ...core.exceptions import InvalidTransitionError, ValidationError
from ...domain.entities.incident import Assignment, Comment, HistoryEntry, Incident
from ...domain.enums import AssignmentStatus, IncidentCategory, IncidentSeverity, IncidentStatus, LifecycleAction
from ...domain.lifecycle import action_for_target, ensure_action_allowed
from ...infrastructure.api.client import INCIDENTS_PATH, IncidentApiClient, incident_path
from ...infrastructure.cache.query_cache import QueryCache, QueryKey
from ...models.schemas import AssignmentBody, CreateIncidentBody, WireModel

logger = structlog.get_logger(__name__)


def incident_key(incident_id: int) -> QueryKey:
    return (incident_path(incident_id),)


def list_key(park_id: int | None = None) -> QueryKey:
    return (INCIDENTS_PATH,) if park_id is None else (INCIDENTS_PATH, park_id)


def comments_key(incident_id: int) -> QueryKey:
    return (f"{incident_path(incident_id)}/comments",)


def history_key(incident_id: int) -> QueryKey:
    return (f"{incident_path(incident_id)}/history",)


def assignments_key(incident_id: int) -> QueryKey:
    return (f"{incident_path(incident_id)}/assignments",)


def invalidation_keys(
    incident_id: int, include_comments: bool = False, include_assignments: bool = False
) -> list[QueryKey]:
    """Keys a mutation of ``incident_id`` makes stale.

    The list key is a prefix, so every park-filtered list goes stale with it.
    """
    keys = [incident_key(incident_id), history_key(incident_id), list_key()]
    if include_comments:
        keys.append(comments_key(incident_id))
    if include_assignments:
        keys.append(assignments_key(incident_id))
    return keys


class IncidentLifecycleService:
    """
    Report incidents and move them through their lifecycle.

    The incidents API stays authoritative: the local transition check only
    avoids sending requests that are bound to be refused.
    """

    def __init__(self, client: IncidentApiClient, cache: QueryCache | None = None, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.client = client
        self.cache = cache or QueryCache(stale_time=self.settings.cache_stale_time)

    # Queries

    async def get_incident(self, incident_id: int) -> Incident:
        return await self.cache.fetch(incident_key(incident_id), lambda: self.client.get_incident(incident_id))

    async def list_incidents(self, park_id: int | None = None) -> list[Incident]:
        return await self.cache.fetch(list_key(park_id), lambda: self.client.list_incidents(park_id))

    async def get_comments(self, incident_id: int) -> list[Comment]:
        return await self.cache.fetch(comments_key(incident_id), lambda: self.client.get_comments(incident_id))

    async def get_history(self, incident_id: int) -> list[HistoryEntry]:
        return await self.cache.fetch(history_key(incident_id), lambda: self.client.get_history(incident_id))

    async def get_assignments(self, incident_id: int) -> list[Assignment]:
        return await self.cache.fetch(assignments_key(incident_id), lambda: self.client.get_assignments(incident_id))

    # Mutations

    async def report_incident(
        self,
        title: str,
        description: str,
        severity: IncidentSeverity | str,
        park_id: int | None,
        asset_id: int | None = None,
        *,
        category: IncidentCategory | str = IncidentCategory.OTHER,
        reporter_name: str | None = None,
        reporter_email: str | None = None,
        location: str | None = None,
    ) -> Incident:
        """Report a new incident; it starts ``pending`` and unassigned.

        Raises:
            ValidationError: If a required field is blank or an id is not positive
        """
        if not title or not title.strip():
            raise ValidationError("Title is required", field="title")
        if not description or not description.strip():
            raise ValidationError("Description is required", field="description")
        if park_id is None or park_id <= 0:
            raise ValidationError("A park must be selected", field="parkId")
        if asset_id is not None and asset_id <= 0:
            raise ValidationError("Asset id must be positive", field="assetId")

        body = _build_body(
            CreateIncidentBody,
            title=title,
            description=description,
            severity=_coerce(IncidentSeverity, severity, "severity"),
            category=_coerce(IncidentCategory, category, "category"),
            park_id=park_id,
            asset_id=asset_id,
            reporter_name=reporter_name or self.settings.reporter_name,
            reporter_email=reporter_email or None,
            location=location or None,
        )

        incident = await self.client.create_incident(body)
        self.cache.invalidate(list_key())

        logger.info("Incident reported", incident_id=incident.id, park_id=incident.park_id)
        return incident

    async def change_status(self, incident_id: int, new_status: IncidentStatus | str) -> Incident:
        """Start or reject an incident by naming the status it should reach.

        Raises:
            ValidationError: If ``new_status`` is not a known status
            InvalidTransitionError: If the status cannot be reached from the current one
        """
        target = _coerce(IncidentStatus, new_status, "status")
        current = await self.get_incident(incident_id)
        action_for_target(current.status, target)

        updated = await self.client.update_status(incident_id, target)
        self._invalidate(incident_id)

        logger.info("Incident status changed", incident_id=incident_id, from_status=current.status.value, to_status=target.value)
        return updated

    async def assign(self, incident_id: int, user_id: int | None) -> Incident:
        if user_id is None:
            raise ValidationError("A user must be selected", field="userId")
        if user_id <= 0:
            raise ValidationError("User id must be positive", field="userId")

        current = await self.get_incident(incident_id)
        ensure_action_allowed(current.status, LifecycleAction.ASSIGN)

        updated = await self.client.assign(incident_id, user_id)
        self._invalidate(incident_id)

        logger.info("Incident assigned", incident_id=incident_id, assigned_to_id=user_id)
        return updated

    async def resolve(self, incident_id: int, notes: str | None) -> Incident:
        if not notes or not notes.strip():
            raise ValidationError("Resolution notes are required", field="resolutionNotes")

        current = await self.get_incident(incident_id)
        ensure_action_allowed(current.status, LifecycleAction.RESOLVE)

        updated = await self.client.resolve(incident_id, notes.strip())
        self._invalidate(incident_id)

        logger.info("Incident resolved", incident_id=incident_id)
        return updated

    async def add_comment(self, incident_id: int, text: str | None) -> Comment:
        """Attach a comment to an open incident.

        Raises:
            ValidationError: If ``text`` is blank
            InvalidTransitionError: If the incident is resolved or rejected
        """
        if not text or not text.strip():
            raise ValidationError("Comment cannot be empty", field="content")

        current = await self.get_incident(incident_id)
        ensure_action_allowed(current.status, LifecycleAction.COMMENT)

        comment = await self.client.add_comment(incident_id, text.strip())
        self._invalidate(incident_id, include_comments=True)

        logger.info("Comment added", incident_id=incident_id, comment_id=comment.id)
        return comment

    async def create_assignment(
        self,
        incident_id: int,
        user_id: int | None,
        department: str = "General",
        due_date: datetime | None = None,
        notes: str | None = None,
    ) -> Assignment:
        """Hand an open incident to a user and department.

        The incident's assignee follows the new assignment.

        Raises:
            ValidationError: If the user or department is missing
            InvalidTransitionError: If the incident is resolved or rejected
        """
        if user_id is None:
            raise ValidationError("A user must be selected", field="assignedToId")
        if user_id <= 0:
            raise ValidationError("User id must be positive", field="assignedToId")
        if not department or not department.strip():
            raise ValidationError("Department is required", field="department")

        body = _build_body(
            AssignmentBody,
            assigned_to_id=user_id,
            department=department,
            due_date=due_date,
            notes=notes.strip() if notes and notes.strip() else None,
        )
        current = await self.get_incident(incident_id)
        ensure_action_allowed(current.status, LifecycleAction.ASSIGN)

        assignment = await self.client.create_assignment(incident_id, body)
        self._invalidate(incident_id, include_assignments=True)

        logger.info(
            "Assignment created", incident_id=incident_id, assignment_id=assignment.id, assigned_to_id=user_id
        )
        return assignment

    async def update_assignment(
        self, incident_id: int, assignment_id: int, status: AssignmentStatus | str, notes: str | None = None
    ) -> Assignment:
        """Move an assignment to another status, optionally replacing its notes.

        Raises:
            ValidationError: If ``status`` is not a known assignment status
            InvalidTransitionError: If the assignment is already completed or cancelled
        """
        target = _coerce(AssignmentStatus, status, "status")
        known = {a.id: a for a in await self.get_assignments(incident_id)}
        current = known.get(assignment_id)
        if current is not None and current.status.is_terminal:
            raise InvalidTransitionError(
                f"Cannot update an assignment that is {current.status.value}", current_status=current.status.value
            )

        updated = await self.client.update_assignment(
            incident_id, assignment_id, target, notes.strip() if notes and notes.strip() else None
        )
        # the incident itself is untouched
        for key in (history_key(incident_id), assignments_key(incident_id)):
            self.cache.invalidate(key)

        logger.info("Assignment updated", incident_id=incident_id, assignment_id=assignment_id, status=target.value)
        return updated

    def _invalidate(self, incident_id: int, include_comments: bool = False, include_assignments: bool = False) -> None:
        for key in invalidation_keys(incident_id, include_comments, include_assignments):
            self.cache.invalidate(key)


def _coerce[E: Enum](enum_type: type[E], value: E | str, field: str) -> E:
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(value)
    except ValueError as e:
        allowed = ", ".join(member.value for member in enum_type)
        raise ValidationError(f"Unknown {field} '{value}'; expected one of: {allowed}", field=field) from e


def _build_body[B: WireModel](model: type[B], **fields: object) -> B:
    """Build a request body, reporting the first rejected field as a ``ValidationError``."""
    try:
        return model(**fields)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        raise ValidationError(first["msg"], field=field) from e
