"""Domain layer: incident entities, lifecycle rules and filter specifications."""

from .entities import Assignment, Comment, HistoryEntry, Incident
from .enums import AssignmentStatus, HistoryAction, IncidentCategory, IncidentSeverity, IncidentStatus, LifecycleAction
from .lifecycle import action_for_target, available_actions, ensure_action_allowed, next_status

__all__ = [
    # Entities
    "Incident",
    "Comment",
    "HistoryEntry",
    "Assignment",
    # Enums
    "IncidentStatus",
    "IncidentCategory",
    "IncidentSeverity",
    "LifecycleAction",
    "HistoryAction",
    "AssignmentStatus",
    # Lifecycle
    "available_actions",
    "ensure_action_allowed",
    "next_status",
    "action_for_target",
]
