from .incident_lifecycle import IncidentLifecycleService, invalidation_keys
from .incident_listing import (
    IncidentListingService,
    apply_query,
    build_incident_filter,
    filter_incidents,
    paginate,
    sort_incidents,
    summarize_incidents,
)

__all__ = [
    "IncidentLifecycleService",
    "IncidentListingService",
    "invalidation_keys",
    "build_incident_filter",
    "filter_incidents",
    "sort_incidents",
    "paginate",
    "apply_query",
    "summarize_incidents",
]
