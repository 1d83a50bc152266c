"""Health check router."""

from fastapi import APIRouter, Request

from ...core.clock import now
from ...models.schemas import HealthSchema
from ..dependencies import WorkflowService

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthSchema)
async def health_check(request: Request, workflow=WorkflowService) -> HealthSchema:
    """Liveness check reporting version, environment and store size."""
    settings = request.app.state.settings
    incidents = await workflow.list_incidents()
    return HealthSchema(
        status="healthy",
        version=settings.app_version,
        environment=settings.environment,
        incident_count=len(incidents),
        timestamp=now(),
    )
