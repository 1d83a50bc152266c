"""
FastAPI dependencies module.

Provides the workflow service, the settings of the running app, bearer token
checks for mutating routes and the acting user id.
"""

import secrets

from fastapi import Depends, Header, HTTPException, Request, status

from ..config import Settings
from ..domain.services.incident_workflow_service import IncidentWorkflowService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_workflow_service(request: Request) -> IncidentWorkflowService:
    """
    Dependency to inject the workflow service.

    Returns:
        IncidentWorkflowService: The service owning the app's incident store
    """
    return request.app.state.workflow


def require_bearer_token(
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_app_settings),
) -> str:
    """
    Require ``Authorization: Bearer <token>`` on the request.

    Any non-empty token is accepted unless ``api_token`` is configured, in which
    case it must match.

    Raises:
        HTTPException: 401 if the header is missing, malformed or wrong
    """
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    expected = settings.api_token.get_secret_value() if settings.api_token else None
    if expected is not None and not secrets.compare_digest(token.strip(), expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token.strip()


def get_actor_id(x_user_id: str | None = Header(default=None)) -> int | None:
    """Read the acting user from ``X-User-Id``; absent means anonymous."""
    if x_user_id is None or not x_user_id.strip():
        return None
    try:
        return int(x_user_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="X-User-Id must be an integer") from e


# Convenience dependency combinations
WorkflowService = Depends(get_workflow_service)
BearerToken = Depends(require_bearer_token)
ActorId = Depends(get_actor_id)
