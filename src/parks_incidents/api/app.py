"""
FastAPI application factory for the reference incidents API.

The API owns an in-memory incident store and is the authoritative enforcer of
the incident lifecycle.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from ..config import Settings, configure_logging, get_logger, get_settings
from ..domain.services.incident_workflow_service import IncidentWorkflowService
from ..infrastructure.persistence import DEMO_ASSETS, DEMO_PARKS, InMemoryIncidentRepository, seed_demo_incidents
from .middleware.logging import request_logging_middleware
from .responses import install_exception_handlers


@asynccontextmanager
async def create_lifespan_manager(app: FastAPI):
    """
    Create application lifespan manager.

    Seeds demo incidents on startup when configured to.

    Args:
        app: The FastAPI application instance

    Yields:
        None: Control back to the application after startup
    """
    logger = get_logger("app.lifespan")
    settings: Settings = app.state.settings

    logger.info("Starting incidents API", environment=settings.environment)

    if settings.seed_demo_data and not await app.state.repository.find_all():
        count = await seed_demo_incidents(app.state.workflow)
        logger.info("Demo data loaded", incidents=count, parks=len(DEMO_PARKS))

    yield

    logger.info("Shutting down incidents API")


def create_app(settings: Settings | None = None, repository: InMemoryIncidentRepository | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to run with; defaults to the cached environment settings
        repository: Incident store; defaults to an empty in-memory store with the demo park directory

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    settings = settings or get_settings()

    configure_logging(settings)
    logger = get_logger("app.factory")

    logger.info(
        "Creating FastAPI application", app_name=settings.app_name, version=settings.app_version, environment=settings.environment
    )

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Reference REST API for reporting park incidents and tracking them through their lifecycle",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=create_lifespan_manager,
        debug=settings.debug,
        openapi_tags=[
            {"name": "health", "description": "Service health"},
            {"name": "incidents", "description": "Incident reports, lifecycle actions, comments and history"},
        ],
    )

    repository = repository or InMemoryIncidentRepository(parks=DEMO_PARKS, assets=DEMO_ASSETS)
    app.state.settings = settings
    app.state.repository = repository
    app.state.workflow = IncidentWorkflowService(repository)

    install_exception_handlers(app)
    app.middleware("http")(request_logging_middleware)

    from .routers import health, incidents

    app.include_router(health.router, prefix="/api")
    app.include_router(incidents.router, prefix="/api")

    logger.info("FastAPI application created successfully")

    return app
