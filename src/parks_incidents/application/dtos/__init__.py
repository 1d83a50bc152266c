from .incident_dtos import IncidentListQuery, IncidentPage, IncidentStats, SortField, SortOrder

__all__ = ["IncidentListQuery", "IncidentPage", "IncidentStats", "SortField", "SortOrder"]
