"""In-memory incident repository backing the reference API."""

from __future__ import annotations

import itertools
from collections import defaultdict
from datetime import datetime

import structlog

from ...domain.entities.incident import Assignment, Comment, HistoryEntry, Incident
from ...domain.enums import HistoryAction
from ...domain.repositories.incident_repository import AssetRef, IncidentRepository, ParkRef

logger = structlog.get_logger(__name__)


class InMemoryIncidentRepository(IncidentRepository):
    """
    Dictionary-backed repository.

    Incidents and assignments are replaced wholesale on save (entities are
    immutable); comments and history are append-only lists keyed by incident id.
    """

    def __init__(self, parks: list[ParkRef] | None = None, assets: list[AssetRef] | None = None) -> None:
        self._incidents: dict[int, Incident] = {}
        self._comments: dict[int, list[Comment]] = defaultdict(list)
        self._history: dict[int, list[HistoryEntry]] = defaultdict(list)
        self._assignments: dict[int, dict[int, Assignment]] = defaultdict(dict)
        self._parks: dict[int, ParkRef] = {park.id: park for park in parks or []}
        self._assets: dict[int, AssetRef] = {asset.id: asset for asset in assets or []}
        self._incident_ids = itertools.count(1)
        self._comment_ids = itertools.count(1)
        self._history_ids = itertools.count(1)
        self._assignment_ids = itertools.count(1)

    async def next_incident_id(self) -> int:
        return next(self._incident_ids)

    async def save(self, incident: Incident) -> Incident:
        self._incidents[incident.id] = incident
        return incident

    async def find_by_id(self, incident_id: int) -> Incident | None:
        return self._incidents.get(incident_id)

    async def find_all(self, park_id: int | None = None) -> list[Incident]:
        incidents = [i for i in self._incidents.values() if park_id is None or i.park_id == park_id]
        return sorted(incidents, key=lambda i: (i.created_at, i.id), reverse=True)

    async def add_comment(self, incident_id: int, content: str, user_id: int | None, at: datetime) -> Comment:
        comment = Comment(id=next(self._comment_ids), incident_id=incident_id, content=content, user_id=user_id, created_at=at)
        self._comments[incident_id].append(comment)
        return comment

    async def list_comments(self, incident_id: int) -> list[Comment]:
        return list(self._comments.get(incident_id, []))

    async def append_history(
        self, incident_id: int, action: HistoryAction, details: str, user_id: int | None, at: datetime
    ) -> HistoryEntry:
        entry = HistoryEntry(
            id=next(self._history_ids),
            incident_id=incident_id,
            action=action,
            details=details,
            user_id=user_id,
            created_at=at,
        )
        self._history[incident_id].append(entry)
        return entry

    async def list_history(self, incident_id: int) -> list[HistoryEntry]:
        return list(self._history.get(incident_id, []))

    async def next_assignment_id(self) -> int:
        return next(self._assignment_ids)

    async def save_assignment(self, assignment: Assignment) -> Assignment:
        self._assignments[assignment.incident_id][assignment.id] = assignment
        return assignment

    async def find_assignment(self, incident_id: int, assignment_id: int) -> Assignment | None:
        return self._assignments.get(incident_id, {}).get(assignment_id)

    async def list_assignments(self, incident_id: int) -> list[Assignment]:
        assignments = self._assignments.get(incident_id, {}).values()
        return sorted(assignments, key=lambda a: (a.created_at, a.id), reverse=True)

    async def find_park(self, park_id: int) -> ParkRef | None:
        return self._parks.get(park_id)

    async def find_asset(self, asset_id: int) -> AssetRef | None:
        return self._assets.get(asset_id)
