"""Incident list queries: filtering, sorting, pagination and dashboard stats.

All list views of the desk (park-scoped, status-scoped, the full list) are the
same query with different filters.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from typing import Any

import structlog

from ...domain.entities.incident import Incident
from ...domain.enums import IncidentStatus
from ...domain.specifications import (
    AssigneeSpecification,
    CategorySpecification,
    MatchAllSpecification,
    ParkSpecification,
    SearchTextSpecification,
    SeveritySpecification,
    Specification,
    StatusSpecification,
)
from ..dtos.incident_dtos import IncidentListQuery, IncidentPage, IncidentStats, SortField, SortOrder
from .incident_lifecycle import IncidentLifecycleService

logger = structlog.get_logger(__name__)

RECENT_LIMIT = 5
SECONDS_PER_DAY = 86400


def build_incident_filter(query: IncidentListQuery) -> Specification[Incident]:
    """Compose the active filters of ``query``; no filter matches everything."""
    specs: list[Specification[Incident]] = []
    if query.search:
        specs.append(SearchTextSpecification(query.search))
    if query.park_id is not None:
        specs.append(ParkSpecification(query.park_id))
    if query.status is not None:
        specs.append(StatusSpecification(query.status))
    if query.category is not None:
        specs.append(CategorySpecification(query.category))
    if query.severity is not None:
        specs.append(SeveritySpecification(query.severity))
    if query.unassigned_only:
        specs.append(AssigneeSpecification(None))
    elif query.assigned_to_id is not None:
        specs.append(AssigneeSpecification(query.assigned_to_id))

    combined: Specification[Incident] = MatchAllSpecification()
    for spec in specs:
        combined = combined.and_(spec)
    return combined


def filter_incidents(incidents: Iterable[Incident], query: IncidentListQuery) -> list[Incident]:
    spec = build_incident_filter(query)
    return [incident for incident in incidents if spec.is_satisfied_by(incident)]


def _sort_value(incident: Incident, field: SortField) -> Any:
    match field:
        case SortField.SEVERITY:
            return incident.severity.rank
        case SortField.STATUS:
            return incident.status.value
        case SortField.TITLE:
            return incident.title.casefold()
        case SortField.PARK_ID:
            return incident.park_id
        case SortField.UPDATED_AT:
            return incident.updated_at
        case SortField.RESOLUTION_DATE:
            # None until the incident is resolved
            return incident.resolution_date
        case _:
            return incident.created_at


def sort_incidents(incidents: Iterable[Incident], order: SortOrder) -> list[Incident]:
    """Stable sort by one column; ties keep their id order and missing values go last."""
    items = sorted(incidents, key=lambda i: i.id)
    present = [i for i in items if _sort_value(i, order.field) is not None]
    missing = [i for i in items if _sort_value(i, order.field) is None]
    present.sort(key=lambda i: _sort_value(i, order.field), reverse=order.descending)
    return present + missing


def paginate(incidents: Sequence[Incident], page: int, page_size: int) -> IncidentPage:
    """Slice one page; a page past the end is clamped to the last page."""
    total = len(incidents)
    last_page = max(1, -(-total // page_size))
    page = min(max(page, 1), last_page)
    start = (page - 1) * page_size
    return IncidentPage(items=list(incidents[start : start + page_size]), total=total, page=page, page_size=page_size)


def apply_query(incidents: Iterable[Incident], query: IncidentListQuery) -> IncidentPage:
    matching = filter_incidents(incidents, query)
    return paginate(sort_incidents(matching, query.sort), query.page, query.page_size)


def summarize_incidents(incidents: Iterable[Incident], recent_limit: int = RECENT_LIMIT) -> IncidentStats:
    """Dashboard counters: totals per status, severity, category and park.

    The resolution rate is resolved incidents over all incidents; the average
    resolution time only counts incidents with a resolution date.
    """
    items = list(incidents)
    total = len(items)

    by_status = Counter(i.status for i in items)
    resolution_days = [
        (i.resolution_date - i.created_at).total_seconds() / SECONDS_PER_DAY for i in items if i.resolution_date is not None
    ]
    recent = sorted(items, key=lambda i: (i.created_at, i.id), reverse=True)[:recent_limit]

    return IncidentStats(
        total=total,
        by_status=dict(by_status),
        by_severity=dict(Counter(i.severity for i in items)),
        by_category=dict(Counter(i.category for i in items)),
        by_park=dict(Counter(i.park_id for i in items)),
        resolution_rate=by_status.get(IncidentStatus.RESOLVED, 0) / total if total else 0.0,
        average_resolution_days=round(sum(resolution_days) / len(resolution_days), 2) if resolution_days else None,
        recent=recent,
    )


class IncidentListingService:
    """List views and dashboard stats, read through the lifecycle service's cache."""

    def __init__(self, lifecycle: IncidentLifecycleService):
        self._lifecycle = lifecycle

    async def page(self, query: IncidentListQuery) -> IncidentPage:
        incidents = await self._lifecycle.list_incidents(query.park_id)
        page = apply_query(incidents, query)
        logger.debug("Incident list queried", total=page.total, page=page.page, park_id=query.park_id)
        return page

    async def stats(self, park_id: int | None = None) -> IncidentStats:
        return summarize_incidents(await self._lifecycle.list_incidents(park_id))
