"""Domain enums for incident classification and lifecycle."""

from enum import Enum


class IncidentStatus(str, Enum):
    """Lifecycle status of an incident."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (IncidentStatus.RESOLVED, IncidentStatus.REJECTED)


class IncidentCategory(str, Enum):
    """Enumeration of incident categories."""

    DAMAGE = "damage"
    VANDALISM = "vandalism"
    MAINTENANCE = "maintenance"
    SAFETY = "safety"
    ACCESSIBILITY = "accessibility"
    ASSET_ISSUE = "asset_issue"
    OTHER = "other"


class IncidentSeverity(str, Enum):
    """Enumeration of incident severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Ordering rank, low to critical."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    IncidentSeverity.LOW: 0,
    IncidentSeverity.MEDIUM: 1,
    IncidentSeverity.HIGH: 2,
    IncidentSeverity.CRITICAL: 3,
}


class LifecycleAction(str, Enum):
    """Actions a user can take on an incident."""

    START = "start"
    ASSIGN = "assign"
    RESOLVE = "resolve"
    REJECT = "reject"
    COMMENT = "comment"


class HistoryAction(str, Enum):
    """Kinds of audit records kept for an incident."""

    STATUS_CHANGED = "status_changed"
    ASSIGNED = "assigned"
    RESOLVED = "resolved"
    COMMENTED = "commented"
    ASSIGNMENT_CREATED = "assignment_created"
    ASSIGNMENT_UPDATED = "assignment_updated"


class AssignmentStatus(str, Enum):
    """Progress of one work assignment on an incident."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (AssignmentStatus.COMPLETED, AssignmentStatus.CANCELLED)
