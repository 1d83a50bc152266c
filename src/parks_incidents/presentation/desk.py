"""
Incident desk: the boundary between user actions and the lifecycle service.

Each action is offered only when the incident's status allows it, cannot be
submitted twice while its request is in flight, and always ends in a
notification. No ``IncidentDeskError`` escapes this module.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime

import structlog

from ..application.dtos.incident_dtos import IncidentListQuery, IncidentPage, IncidentStats
from ..application.use_cases.incident_lifecycle import IncidentLifecycleService
from ..application.use_cases.incident_listing import IncidentListingService
from ..core.exceptions import ActionInProgressError, IncidentDeskError
from ..domain.entities.incident import Assignment, Comment, HistoryEntry, Incident
from ..domain.enums import AssignmentStatus, IncidentCategory, IncidentSeverity, IncidentStatus, LifecycleAction
from .notifications import LoggingNotifier, Notification, NotificationLevel, Notifier, notification_for_error

logger = structlog.get_logger(__name__)

# button order on the detail view
ACTION_ORDER = (
    LifecycleAction.START,
    LifecycleAction.ASSIGN,
    LifecycleAction.RESOLVE,
    LifecycleAction.REJECT,
    LifecycleAction.COMMENT,
)


@dataclass(frozen=True)
class ActionResult[T]:
    ok: bool
    value: T | None = None
    notification: Notification | None = None


@dataclass(frozen=True)
class IncidentDetail:
    """Everything the detail view of one incident shows."""

    incident: Incident
    comments: list[Comment] = field(default_factory=list)
    history: list[HistoryEntry] = field(default_factory=list)
    actions: list[LifecycleAction] = field(default_factory=list)
    assignments: list[Assignment] = field(default_factory=list)


class IncidentDesk:
    """User-facing incident operations with pending flags and notifications."""

    def __init__(
        self,
        lifecycle: IncidentLifecycleService,
        notifier: Notifier | None = None,
        listing: IncidentListingService | None = None,
    ):
        self.lifecycle = lifecycle
        self.listing = listing or IncidentListingService(lifecycle)
        self.notifier = notifier or LoggingNotifier()
        self._pending: set[tuple[str, int | None]] = set()

    def available_actions(self, incident: Incident) -> list[LifecycleAction]:
        """Actions to offer for ``incident``; empty once it is resolved or rejected."""
        allowed = incident.available_actions
        return [action for action in ACTION_ORDER if action in allowed]

    def is_pending(self, action: LifecycleAction | str, incident_id: int | None = None) -> bool:
        return (_action_name(action), incident_id) in self._pending

    # Reads

    async def open_incident(self, incident_id: int) -> ActionResult[IncidentDetail]:
        async def load() -> IncidentDetail:
            incident = await self.lifecycle.get_incident(incident_id)
            comments = await self.lifecycle.get_comments(incident_id)
            history = await self.lifecycle.get_history(incident_id)
            assignments = await self.lifecycle.get_assignments(incident_id)
            return IncidentDetail(incident, comments, history, self.available_actions(incident), assignments)

        return await self._read(f"Could not load incident {incident_id}", load)

    async def list_incidents(self, query: IncidentListQuery) -> ActionResult[IncidentPage]:
        return await self._read("Could not load incidents", lambda: self.listing.page(query))

    async def stats(self, park_id: int | None = None) -> ActionResult[IncidentStats]:
        return await self._read("Could not load incident statistics", lambda: self.listing.stats(park_id))

    # Actions

    async def report(
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
    ) -> ActionResult[Incident]:
        return await self._run(
            "report",
            None,
            "Incident reported",
            lambda: self.lifecycle.report_incident(
                title,
                description,
                severity,
                park_id,
                asset_id,
                category=category,
                reporter_name=reporter_name,
                reporter_email=reporter_email,
                location=location,
            ),
        )

    async def start(self, incident_id: int) -> ActionResult[Incident]:
        return await self._run(
            LifecycleAction.START,
            incident_id,
            "Work started",
            lambda: self.lifecycle.change_status(incident_id, IncidentStatus.IN_PROGRESS),
        )

    async def reject(self, incident_id: int) -> ActionResult[Incident]:
        return await self._run(
            LifecycleAction.REJECT,
            incident_id,
            "Incident rejected",
            lambda: self.lifecycle.change_status(incident_id, IncidentStatus.REJECTED),
        )

    async def change_status(self, incident_id: int, status: IncidentStatus | str) -> ActionResult[Incident]:
        return await self._run(
            "change_status",
            incident_id,
            "Status updated",
            lambda: self.lifecycle.change_status(incident_id, status),
        )

    async def assign(self, incident_id: int, user_id: int | None) -> ActionResult[Incident]:
        return await self._run(
            LifecycleAction.ASSIGN,
            incident_id,
            "Incident assigned",
            lambda: self.lifecycle.assign(incident_id, user_id),
        )

    async def resolve(self, incident_id: int, notes: str | None) -> ActionResult[Incident]:
        return await self._run(
            LifecycleAction.RESOLVE,
            incident_id,
            "Incident resolved",
            lambda: self.lifecycle.resolve(incident_id, notes),
        )

    async def comment(self, incident_id: int, text: str | None) -> ActionResult[Comment]:
        return await self._run(
            LifecycleAction.COMMENT,
            incident_id,
            "Comment added",
            lambda: self.lifecycle.add_comment(incident_id, text),
        )

    async def create_assignment(
        self,
        incident_id: int,
        user_id: int | None,
        department: str = "General",
        due_date: datetime | None = None,
        notes: str | None = None,
    ) -> ActionResult[Assignment]:
        return await self._run(
            "create_assignment",
            incident_id,
            "Assignment created",
            lambda: self.lifecycle.create_assignment(incident_id, user_id, department, due_date, notes),
        )

    async def update_assignment(
        self, incident_id: int, assignment_id: int, status: AssignmentStatus | str, notes: str | None = None
    ) -> ActionResult[Assignment]:
        return await self._run(
            "update_assignment",
            incident_id,
            "Assignment updated",
            lambda: self.lifecycle.update_assignment(incident_id, assignment_id, status, notes),
        )

    async def _run[T](
        self,
        action: LifecycleAction | str,
        incident_id: int | None,
        success_title: str,
        call: Callable[[], Awaitable[T]],
    ) -> ActionResult[T]:
        name = _action_name(action)
        key = (name, incident_id)
        failure_title = f"Could not {name.replace('_', ' ')}"

        if key in self._pending:
            return self._fail(failure_title, ActionInProgressError(name, incident_id))

        self._pending.add(key)
        try:
            value = await call()
        except IncidentDeskError as e:
            logger.info("Desk action failed", action=name, incident_id=incident_id, error_code=e.error_code)
            return self._fail(failure_title, e)
        finally:
            self._pending.discard(key)

        notification = Notification(NotificationLevel.SUCCESS, success_title, _describe(value))
        self.notifier.notify(notification)
        return ActionResult(ok=True, value=value, notification=notification)

    async def _read[T](self, failure_title: str, call: Callable[[], Awaitable[T]]) -> ActionResult[T]:
        try:
            return ActionResult(ok=True, value=await call())
        except IncidentDeskError as e:
            return self._fail(failure_title, e)

    def _fail(self, title: str, error: IncidentDeskError) -> ActionResult:
        notification = notification_for_error(error, title)
        self.notifier.notify(notification)
        return ActionResult(ok=False, notification=notification)


def _action_name(action: LifecycleAction | str) -> str:
    return action.value if isinstance(action, LifecycleAction) else action


def _describe(value: object) -> str:
    if isinstance(value, Incident):
        return f"#{value.id} {value.title} is {value.status.value}"
    if isinstance(value, Comment):
        return f"Comment #{value.id} added to incident #{value.incident_id}"
    if isinstance(value, Assignment):
        return f"Assignment #{value.id} for user {value.assigned_to_id} is {value.status.value}"
    return "Done"
