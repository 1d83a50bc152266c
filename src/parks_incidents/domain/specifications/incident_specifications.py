"""Filter predicates over incidents.

Each list filter (search box, park, status, category, severity, assignee) is one
specification; a list view composes the active ones with ``and_``.
"""

from __future__ import annotations

from ..entities.incident import Incident
from ..enums import IncidentCategory, IncidentSeverity, IncidentStatus
from .base import Specification


class SearchTextSpecification(Specification[Incident]):
    """Case-insensitive substring match on title, description or reporter name."""

    def __init__(self, text: str):
        self._needle = text.strip().lower()

    def is_satisfied_by(self, incident: Incident) -> bool:
        if not self._needle:
            return True
        haystacks = (incident.title, incident.description, incident.reporter_name)
        return any(self._needle in (value or "").lower() for value in haystacks)

    def why_not_satisfied(self, incident: Incident) -> str | None:
        if self.is_satisfied_by(incident):
            return None
        return f"Incident {incident.id} does not mention '{self._needle}'"


class ParkSpecification(Specification[Incident]):
    def __init__(self, park_id: int):
        self._park_id = park_id

    def is_satisfied_by(self, incident: Incident) -> bool:
        return incident.park_id == self._park_id

    def why_not_satisfied(self, incident: Incident) -> str | None:
        if self.is_satisfied_by(incident):
            return None
        return f"Incident {incident.id} belongs to park {incident.park_id}, not {self._park_id}"


class StatusSpecification(Specification[Incident]):
    def __init__(self, status: IncidentStatus):
        self._status = status

    def is_satisfied_by(self, incident: Incident) -> bool:
        return incident.status is self._status

    def why_not_satisfied(self, incident: Incident) -> str | None:
        if self.is_satisfied_by(incident):
            return None
        return f"Incident {incident.id} is {incident.status.value}, not {self._status.value}"


class CategorySpecification(Specification[Incident]):
    def __init__(self, category: IncidentCategory):
        self._category = category

    def is_satisfied_by(self, incident: Incident) -> bool:
        return incident.category is self._category

    def why_not_satisfied(self, incident: Incident) -> str | None:
        if self.is_satisfied_by(incident):
            return None
        return f"Incident {incident.id} is categorised {incident.category.value}, not {self._category.value}"


class SeveritySpecification(Specification[Incident]):
    def __init__(self, severity: IncidentSeverity):
        self._severity = severity

    def is_satisfied_by(self, incident: Incident) -> bool:
        return incident.severity is self._severity

    def why_not_satisfied(self, incident: Incident) -> str | None:
        if self.is_satisfied_by(incident):
            return None
        return f"Incident {incident.id} has {incident.severity.value} severity, not {self._severity.value}"


class AssigneeSpecification(Specification[Incident]):
    """Match incidents assigned to a user, or unassigned ones when ``user_id`` is None."""

    def __init__(self, user_id: int | None):
        self._user_id = user_id

    def is_satisfied_by(self, incident: Incident) -> bool:
        return incident.assigned_to_id == self._user_id

    def why_not_satisfied(self, incident: Incident) -> str | None:
        if self.is_satisfied_by(incident):
            return None
        if self._user_id is None:
            return f"Incident {incident.id} is assigned to user {incident.assigned_to_id}"
        return f"Incident {incident.id} is not assigned to user {self._user_id}"
