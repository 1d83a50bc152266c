from .client import INCIDENTS_PATH, IncidentApiClient, incident_path

__all__ = ["IncidentApiClient", "INCIDENTS_PATH", "incident_path"]
