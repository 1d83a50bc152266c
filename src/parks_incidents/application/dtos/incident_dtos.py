"""Incident list DTOs: query parameters, sort order, pages and dashboard stats."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ...domain.entities.incident import Incident
from ...domain.enums import IncidentCategory, IncidentSeverity, IncidentStatus


class SortField(str, Enum):
    """Columns an incident list can be sorted by."""

    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    TITLE = "title"
    STATUS = "status"
    SEVERITY = "severity"
    PARK_ID = "park_id"
    RESOLUTION_DATE = "resolution_date"


class SortOrder(BaseModel):
    """Sort column and direction of a list view."""

    model_config = ConfigDict(frozen=True)

    field: SortField = Field(default=SortField.CREATED_AT, description="Column to sort by")
    descending: bool = Field(default=True, description="Sort direction")

    def toggled(self, field: SortField) -> SortOrder:
        """Clicking the active column flips its direction; another column starts ascending."""
        if field is self.field:
            return SortOrder(field=field, descending=not self.descending)
        return SortOrder(field=field, descending=False)


class IncidentListQuery(BaseModel):
    """Filters, sort order and page of one incident list view.

    ``None`` on a filter means "all".
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    search: str = Field(default="", max_length=200, description="Free-text search over title, description and reporter")
    park_id: int | None = Field(default=None, gt=0)
    status: IncidentStatus | None = None
    category: IncidentCategory | None = None
    severity: IncidentSeverity | None = None
    assigned_to_id: int | None = Field(default=None, gt=0)
    unassigned_only: bool = False
    sort: SortOrder = Field(default_factory=SortOrder)
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, ge=1, le=200)

    @model_validator(mode="after")
    def check_assignee_filters(self) -> IncidentListQuery:
        """Validate that the assignee filters do not contradict each other."""
        if self.unassigned_only and self.assigned_to_id is not None:
            raise ValueError("assigned_to_id and unassigned_only cannot be combined")
        return self


@dataclass(frozen=True)
class IncidentPage:
    """One page of a filtered and sorted incident list."""

    items: list[Incident]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total / self.page_size))

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1


@dataclass(frozen=True)
class IncidentStats:
    """Dashboard counters over a set of incidents."""

    total: int
    by_status: dict[IncidentStatus, int] = field(default_factory=dict)
    by_severity: dict[IncidentSeverity, int] = field(default_factory=dict)
    by_category: dict[IncidentCategory, int] = field(default_factory=dict)
    by_park: dict[int, int] = field(default_factory=dict)
    resolution_rate: float = 0.0
    average_resolution_days: float | None = None
    recent: list[Incident] = field(default_factory=list)

    @property
    def open_count(self) -> int:
        return self.by_status.get(IncidentStatus.PENDING, 0) + self.by_status.get(IncidentStatus.IN_PROGRESS, 0)
