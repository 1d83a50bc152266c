from .incident_workflow_service import IncidentWorkflowService, NewAssignment, NewIncident

__all__ = ["IncidentWorkflowService", "NewIncident", "NewAssignment"]
