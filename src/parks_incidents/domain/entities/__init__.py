from .incident import Assignment, Comment, HistoryEntry, Incident

__all__ = ["Incident", "Comment", "HistoryEntry", "Assignment"]
