"""Async REST client for the incidents API."""

from __future__ import annotations

from typing import Any, TypeVar

import httpx
import structlog
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ...config import Settings, get_settings
from ...core.exceptions import (
    InvalidIncidentError,
    InvalidTransitionError,
    NetworkError,
    RemoteIncidentNotFoundError,
    RequestError,
    ResponseFormatError,
    ValidationError,
)
from ...domain.entities.incident import Assignment, Comment, HistoryEntry, Incident
from ...domain.enums import AssignmentStatus, IncidentStatus
from ...models.schemas import (
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
    StatusChangeBody,
)

logger = structlog.get_logger(__name__)

S = TypeVar("S", bound=BaseModel)

INCIDENTS_PATH = "/api/incidents"

# error codes of a 422 the user can fix by correcting input
INPUT_ERROR_CODES = frozenset({"INVALID_INCIDENT", "VALIDATION_ERROR"})

_incident_list = TypeAdapter(list[IncidentSchema])
_comment_list = TypeAdapter(list[CommentSchema])
_history_list = TypeAdapter(list[HistoryEntrySchema])
_assignment_list = TypeAdapter(list[AssignmentSchema])


def incident_path(incident_id: int) -> str:
    return f"{INCIDENTS_PATH}/{incident_id}"


class IncidentApiClient:
    """
    Thin client for the incidents REST API.

    Every request carries the bearer token and ``X-User-Id`` header, every
    response is validated against a wire schema, and every failure surfaces as
    an ``IncidentDeskError`` subclass. Requests are never retried.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            settings: Settings providing base URL, credentials and timeout
            base_url: Override of ``settings.api_base_url``
            transport: Custom httpx transport (in-process app, mock responses)
        """
        self.settings = settings or get_settings()
        self.user_id = self.settings.api_user_id
        self._client = httpx.AsyncClient(
            base_url=base_url or self.settings.api_base_url,
            headers=self.settings.get_client_headers(),
            timeout=httpx.Timeout(self.settings.request_timeout),
            transport=transport,
        )

    async def __aenter__(self) -> IncidentApiClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # Queries

    async def list_incidents(self, park_id: int | None = None) -> list[Incident]:
        params = {"parkId": park_id} if park_id is not None else None
        payload = await self._request("GET", INCIDENTS_PATH, params=params)
        return [schema.to_entity() for schema in self._parse_list(_incident_list, payload)]

    async def get_incident(self, incident_id: int) -> Incident:
        payload = await self._request("GET", incident_path(incident_id))
        return self._to_incident(payload)

    async def get_comments(self, incident_id: int) -> list[Comment]:
        payload = await self._request("GET", f"{incident_path(incident_id)}/comments")
        return [schema.to_entity() for schema in self._parse_list(_comment_list, payload)]

    async def get_history(self, incident_id: int) -> list[HistoryEntry]:
        payload = await self._request("GET", f"{incident_path(incident_id)}/history")
        return [schema.to_entity() for schema in self._parse_list(_history_list, payload)]

    async def get_assignments(self, incident_id: int) -> list[Assignment]:
        payload = await self._request("GET", f"{incident_path(incident_id)}/assignments")
        return [schema.to_entity() for schema in self._parse_list(_assignment_list, payload)]

    async def health(self) -> HealthSchema:
        payload = await self._request("GET", "/api/health")
        return self._parse(HealthSchema, payload)

    # Mutations

    async def create_incident(self, body: CreateIncidentBody) -> Incident:
        payload = await self._request("POST", INCIDENTS_PATH, json=body.to_wire())
        return self._to_incident(payload)

    async def update_status(self, incident_id: int, status: IncidentStatus) -> Incident:
        body = StatusChangeBody(status=status)
        payload = await self._request("PUT", f"{incident_path(incident_id)}/status", json=body.to_wire())
        return self._to_incident(payload)

    async def assign(self, incident_id: int, user_id: int) -> Incident:
        body = AssignBody(user_id=user_id)
        payload = await self._request("POST", f"{incident_path(incident_id)}/assign", json=body.to_wire())
        return self._to_incident(payload)

    async def resolve(self, incident_id: int, notes: str) -> Incident:
        body = ResolveBody(resolution_notes=notes)
        payload = await self._request("POST", f"{incident_path(incident_id)}/resolve", json=body.to_wire())
        return self._to_incident(payload)

    async def add_comment(self, incident_id: int, content: str) -> Comment:
        body = CommentBody(content=content, user_id=self.user_id)
        payload = await self._request("POST", f"{incident_path(incident_id)}/comments", json=body.to_wire())
        return self._parse(CommentSchema, payload).to_entity()

    async def create_assignment(self, incident_id: int, body: AssignmentBody) -> Assignment:
        payload = await self._request("POST", f"{incident_path(incident_id)}/assignments", json=body.to_wire())
        return self._parse(AssignmentSchema, payload).to_entity()

    async def update_assignment(
        self, incident_id: int, assignment_id: int, status: AssignmentStatus, notes: str | None = None
    ) -> Assignment:
        body = AssignmentUpdateBody(status=status, notes=notes)
        path = f"{incident_path(incident_id)}/assignments/{assignment_id}"
        payload = await self._request("PUT", path, json=body.to_wire())
        return self._parse(AssignmentSchema, payload).to_entity()

    # Plumbing

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send one request and return the decoded JSON body.

        Raises:
            NetworkError: If no response was received
            ValidationError: If the API rejected the input (422)
            RequestError: If the response status is otherwise not 2xx
            ResponseFormatError: If the body is not JSON
        """
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning("Incidents API request timed out", method=method, path=path)
            raise NetworkError(f"{method} {path} timed out", original_error=e) from e
        except httpx.RequestError as e:
            # transport failures, undecodable bodies and redirect loops alike
            logger.warning("Incidents API unreachable", method=method, path=path, error=str(e))
            raise NetworkError(f"{method} {path} failed: {e}", original_error=e) from e

        if response.is_success:
            try:
                return response.json()
            except ValueError as e:
                raise ResponseFormatError(
                    f"{method} {path} returned a non-JSON body", status_code=response.status_code
                ) from e

        raise self._error_for(method, path, response)

    def _error_for(self, method: str, path: str, response: httpx.Response) -> Exception:
        message, error_code, field, details = _read_error_body(response)
        message = message or f"{method} {path} failed with status {response.status_code}"

        logger.warning(
            "Incidents API request failed",
            method=method,
            path=path,
            status_code=response.status_code,
            error_code=error_code,
        )

        if response.status_code == 404:
            return RemoteIncidentNotFoundError(message, error_code=error_code, details=details)
        if response.status_code == 409 and error_code == "INVALID_TRANSITION":
            return InvalidTransitionError(message, current_status=details.get("current_status"), action=details.get("action"))
        if response.status_code == 422 and error_code in INPUT_ERROR_CODES:
            return ValidationError(message, field=field)
        return RequestError(message, status_code=response.status_code, error_code=error_code, details=details)

    def _parse(self, schema: type[S], payload: Any) -> S:
        try:
            return schema.model_validate(payload)
        except PydanticValidationError as e:
            raise ResponseFormatError(
                f"Unexpected {schema.__name__} payload", details={"errors": e.errors(include_url=False)}
            ) from e

    def _parse_list(self, adapter: TypeAdapter, payload: Any) -> list[Any]:
        try:
            return adapter.validate_python(payload)
        except PydanticValidationError as e:
            raise ResponseFormatError("Unexpected list payload", details={"errors": e.errors(include_url=False)}) from e

    def _to_incident(self, payload: Any) -> Incident:
        schema = self._parse(IncidentSchema, payload)
        try:
            return schema.to_entity()
        except InvalidIncidentError as e:
            raise ResponseFormatError(f"Incident {schema.id} is inconsistent: {e.message}") from e


def _read_error_body(response: httpx.Response) -> tuple[str | None, str | None, str | None, dict[str, Any]]:
    """Extract message, error code, offending field and details from an error response.

    Understands the API's error envelope and FastAPI's plain ``{"detail": ...}``.
    Only the first entry of ``errors`` is read.
    """
    try:
        body = response.json()
    except ValueError:
        return None, None, None, {}
    if not isinstance(body, dict):
        return None, None, None, {}

    message = body.get("message")
    if message is None and isinstance(body.get("detail"), str):
        message = body["detail"]

    error_code = None
    field = None
    details: dict[str, Any] = {}
    errors = body.get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        error_code = errors[0].get("error_code")
        if isinstance(errors[0].get("field"), str):
            field = errors[0]["field"]
        context = errors[0].get("context")
        if isinstance(context, dict):
            details = context
    return message, error_code, field, details
