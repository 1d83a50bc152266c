from .schemas import (
    AssignBody,
    AssignmentBody,
    AssignmentSchema,
    AssignmentUpdateBody,
    CommentBody,
    CommentSchema,
    CreateIncidentBody,
    HealthSchema,
    HistoryEntrySchema,
    IncidentSchema,
    ResolveBody,
    StatsSchema,
    StatusChangeBody,
)

__all__ = [
    "IncidentSchema",
    "CommentSchema",
    "HistoryEntrySchema",
    "AssignmentSchema",
    "CreateIncidentBody",
    "StatusChangeBody",
    "AssignBody",
    "ResolveBody",
    "CommentBody",
    "AssignmentBody",
    "AssignmentUpdateBody",
    "StatsSchema",
    "HealthSchema",
]
