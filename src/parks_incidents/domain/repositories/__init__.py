from .incident_repository import AssetRef, IncidentRepository, ParkRef

__all__ = ["IncidentRepository", "ParkRef", "AssetRef"]
