"""Abstract repository interface for incident persistence operations."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from ..entities.incident import Assignment, Comment, HistoryEntry, Incident
from ..enums import HistoryAction


@dataclass(frozen=True)
class ParkRef:
    id: int
    name: str


@dataclass(frozen=True)
class AssetRef:
    id: int
    park_id: int
    name: str


class IncidentRepository(ABC):
    """
    Abstract repository interface for incident persistence operations.

    The reference incidents API is the only writer; it persists incidents, their
    comments, work assignments and their append-only history through this
    contract.
    """

    @abstractmethod
    async def next_incident_id(self) -> int:
        """Reserve the id for a new incident."""
        pass

    @abstractmethod
    async def save(self, incident: Incident) -> Incident:
        """Insert or replace an incident.

        Args:
            incident: The incident entity to store

        Returns:
            The stored incident
        """
        pass

    @abstractmethod
    async def find_by_id(self, incident_id: int) -> Incident | None:
        """Find an incident by its ID.

        Returns:
            The incident entity if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_all(self, park_id: int | None = None) -> list[Incident]:
        """List incidents, newest first, optionally restricted to one park."""
        pass

    @abstractmethod
    async def add_comment(self, incident_id: int, content: str, user_id: int | None, at: datetime) -> Comment:
        """Append a comment to an incident."""
        pass

    @abstractmethod
    async def list_comments(self, incident_id: int) -> list[Comment]:
        """Comments of an incident, oldest first."""
        pass

    @abstractmethod
    async def append_history(
        self, incident_id: int, action: HistoryAction, details: str, user_id: int | None, at: datetime
    ) -> HistoryEntry:
        """Append an audit record; existing records are never modified."""
        pass

    @abstractmethod
    async def list_history(self, incident_id: int) -> list[HistoryEntry]:
        """History of an incident in chronological order."""
        pass

    @abstractmethod
    async def next_assignment_id(self) -> int:
        pass

    @abstractmethod
    async def save_assignment(self, assignment: Assignment) -> Assignment:
        """Insert or replace an assignment."""
        pass

    @abstractmethod
    async def find_assignment(self, incident_id: int, assignment_id: int) -> Assignment | None:
        """Find an assignment; one belonging to another incident is not found."""
        pass

    @abstractmethod
    async def list_assignments(self, incident_id: int) -> list[Assignment]:
        """Assignments of an incident, newest first."""
        pass

    @abstractmethod
    async def find_park(self, park_id: int) -> ParkRef | None:
        pass

    @abstractmethod
    async def find_asset(self, asset_id: int) -> AssetRef | None:
        pass
