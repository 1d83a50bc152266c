"""
Incidents Router

REST resource for park incidents: listing, detail, comments, history and work
assignments, plus the lifecycle mutations. Mutations require a bearer token and are attributed
to the user named in ``X-User-Id``.
"""

from fastapi import APIRouter, Query, status

from ...application.use_cases.incident_listing import summarize_incidents
from ...config import get_logger
from ...domain.services.incident_workflow_service import IncidentWorkflowService, NewAssignment, NewIncident
from ...models.schemas import (
    AssignBody,
    AssignmentBody,
    AssignmentSchema,
    AssignmentUpdateBody,
    CommentBody,
    CommentSchema,
    CreateIncidentBody,
    HistoryEntrySchema,
    IncidentSchema,
    ResolveBody,
    StatsSchema,
    StatusChangeBody,
)
from ..dependencies import ActorId, BearerToken, WorkflowService
from ..responses import ErrorResponse

router = APIRouter(prefix="/incidents", tags=["incidents"])
logger = get_logger(__name__)

ERROR_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Missing or invalid bearer token"},
    404: {"model": ErrorResponse, "description": "Incident not found"},
    409: {"model": ErrorResponse, "description": "Action not allowed in the current status"},
    422: {"model": ErrorResponse, "description": "Invalid request body"},
}


@router.get("", response_model=list[IncidentSchema])
async def list_incidents(
    park_id: int | None = Query(default=None, alias="parkId", gt=0),
    workflow: IncidentWorkflowService = WorkflowService,
) -> list[IncidentSchema]:
    """List incidents, newest first, optionally for one park."""
    incidents = await workflow.list_incidents(park_id=park_id)
    return [IncidentSchema.from_entity(incident) for incident in incidents]


@router.get("/stats", response_model=StatsSchema)
async def incident_stats(
    park_id: int | None = Query(default=None, alias="parkId", gt=0),
    workflow: IncidentWorkflowService = WorkflowService,
) -> StatsSchema:
    """Dashboard counters over all incidents (or one park's)."""
    stats = summarize_incidents(await workflow.list_incidents(park_id=park_id))
    return StatsSchema(
        total=stats.total,
        by_status={key.value: count for key, count in stats.by_status.items()},
        by_severity={severity.value: count for severity, count in stats.by_severity.items()},
        by_category={category.value: count for category, count in stats.by_category.items()},
        by_park={str(park): count for park, count in stats.by_park.items()},
        resolution_rate=stats.resolution_rate,
        average_resolution_days=stats.average_resolution_days,
        recent=[IncidentSchema.from_entity(incident) for incident in stats.recent],
    )


@router.post("", response_model=IncidentSchema, status_code=status.HTTP_201_CREATED, responses=ERROR_RESPONSES)
async def create_incident(
    body: CreateIncidentBody,
    workflow: IncidentWorkflowService = WorkflowService,
    _token: str = BearerToken,
) -> IncidentSchema:
    incident = await workflow.report(
        NewIncident(
            title=body.title,
            description=body.description,
            park_id=body.park_id,
            reporter_name=body.reporter_name,
            severity=body.severity,
            category=body.category,
            asset_id=body.asset_id,
            reporter_email=body.reporter_email,
            location=body.location,
        )
    )
    return IncidentSchema.from_entity(incident)


@router.get("/{incident_id}", response_model=IncidentSchema, responses=ERROR_RESPONSES)
async def get_incident(incident_id: int, workflow: IncidentWorkflowService = WorkflowService) -> IncidentSchema:
    return IncidentSchema.from_entity(await workflow.get(incident_id))


@router.get("/{incident_id}/comments", response_model=list[CommentSchema], responses=ERROR_RESPONSES)
async def list_comments(incident_id: int, workflow: IncidentWorkflowService = WorkflowService) -> list[CommentSchema]:
    """Comments of an incident, oldest first."""
    return [CommentSchema.from_entity(comment) for comment in await workflow.comments(incident_id)]


@router.get("/{incident_id}/history", response_model=list[HistoryEntrySchema], responses=ERROR_RESPONSES)
async def list_history(incident_id: int, workflow: IncidentWorkflowService = WorkflowService) -> list[HistoryEntrySchema]:
    """Audit trail of an incident in chronological order."""
    return [HistoryEntrySchema.from_entity(entry) for entry in await workflow.history(incident_id)]


@router.put("/{incident_id}/status", response_model=IncidentSchema, responses=ERROR_RESPONSES)
async def change_status(
    incident_id: int,
    body: StatusChangeBody,
    workflow: IncidentWorkflowService = WorkflowService,
    actor_id: int | None = ActorId,
    _token: str = BearerToken,
) -> IncidentSchema:
    """
    Move an incident to ``in_progress`` or ``rejected``.

    Resolving goes through ``/resolve`` because it needs notes; any transition
    the lifecycle does not allow answers 409 ``INVALID_TRANSITION``.
    """
    return IncidentSchema.from_entity(await workflow.change_status(incident_id, body.status, actor_id))


@router.post("/{incident_id}/assign", response_model=IncidentSchema, responses=ERROR_RESPONSES)
async def assign_incident(
    incident_id: int,
    body: AssignBody,
    workflow: IncidentWorkflowService = WorkflowService,
    actor_id: int | None = ActorId,
    _token: str = BearerToken,
) -> IncidentSchema:
    return IncidentSchema.from_entity(await workflow.assign(incident_id, body.user_id, actor_id))


@router.post("/{incident_id}/resolve", response_model=IncidentSchema, responses=ERROR_RESPONSES)
async def resolve_incident(
    incident_id: int,
    body: ResolveBody,
    workflow: IncidentWorkflowService = WorkflowService,
    actor_id: int | None = ActorId,
    _token: str = BearerToken,
) -> IncidentSchema:
    return IncidentSchema.from_entity(await workflow.resolve(incident_id, body.resolution_notes, actor_id))


@router.post(
    "/{incident_id}/comments",
    response_model=CommentSchema,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def add_comment(
    incident_id: int,
    body: CommentBody,
    workflow: IncidentWorkflowService = WorkflowService,
    actor_id: int | None = ActorId,
    _token: str = BearerToken,
) -> CommentSchema:
    comment = await workflow.add_comment(incident_id, body.content, body.user_id or actor_id)
    return CommentSchema.from_entity(comment)


@router.get("/{incident_id}/assignments", response_model=list[AssignmentSchema], responses=ERROR_RESPONSES)
async def list_assignments(
    incident_id: int, workflow: IncidentWorkflowService = WorkflowService
) -> list[AssignmentSchema]:
    """Work assignments of an incident, newest first."""
    return [AssignmentSchema.from_entity(assignment) for assignment in await workflow.assignments(incident_id)]


@router.post(
    "/{incident_id}/assignments",
    response_model=AssignmentSchema,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def create_assignment(
    incident_id: int,
    body: AssignmentBody,
    workflow: IncidentWorkflowService = WorkflowService,
    actor_id: int | None = ActorId,
    _token: str = BearerToken,
) -> AssignmentSchema:
    """
    Hand the incident to a user and department.

    The incident's assignee follows the new assignment; its status does not
    change. Closed incidents answer 409 ``INVALID_TRANSITION``.
    """
    assignment = await workflow.add_assignment(
        incident_id,
        NewAssignment(
            assigned_to_id=body.assigned_to_id,
            department=body.department,
            due_date=body.due_date,
            notes=body.notes,
        ),
        actor_id,
    )
    return AssignmentSchema.from_entity(assignment)


@router.put(
    "/{incident_id}/assignments/{assignment_id}", response_model=AssignmentSchema, responses=ERROR_RESPONSES
)
async def update_assignment(
    incident_id: int,
    assignment_id: int,
    body: AssignmentUpdateBody,
    workflow: IncidentWorkflowService = WorkflowService,
    actor_id: int | None = ActorId,
    _token: str = BearerToken,
) -> AssignmentSchema:
    assignment = await workflow.update_assignment(incident_id, assignment_id, body.status, body.notes, actor_id)
    return AssignmentSchema.from_entity(assignment)
