"""Tests for the incidents REST client against canned responses."""

import json

import httpx
import pytest

from parks_incidents.core.exceptions import (
    InvalidTransitionError,
    NetworkError,
    RemoteIncidentNotFoundError,
    RequestError,
    ResponseFormatError,
    ValidationError,
)
from parks_incidents.domain.enums import AssignmentStatus, IncidentSeverity, IncidentStatus
from parks_incidents.infrastructure.api import IncidentApiClient
from parks_incidents.models import AssignmentBody

INCIDENT_PAYLOAD = {
    "id": 12,
    "title": "Broken swing",
    "description": "Swing chain snapped",
    "category": "damage",
    "severity": "high",
    "status": "pending",
    "parkId": 3,
    "assetId": None,
    "reporterName": "María López",
    "reporterEmail": None,
    "assignedToId": None,
    "resolutionNotes": None,
    "resolutionDate": None,
    "createdAt": "2025-03-10T09:30:00Z",
    "updatedAt": "2025-03-10T09:30:00Z",
}


def error_body(error_code: str, message: str, context: dict | None = None, field: str | None = None) -> dict:
    return {
        "status": "error",
        "message": message,
        "errors": [{"error_code": error_code, "error_type": "X", "field": field, "description": message, "context": context}],
        "metadata": {"request_id": "req_1", "timestamp": "2025-03-10T09:30:00Z"},
    }


def make_client(settings, handler) -> IncidentApiClient:
    return IncidentApiClient(settings=settings, transport=httpx.MockTransport(handler))


class TestRequests:
    @pytest.mark.asyncio
    async def test_every_request_carries_token_and_user(self, settings):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[INCIDENT_PAYLOAD])

        async with make_client(settings, handler) as client:
            incidents = await client.list_incidents(park_id=3)

        assert seen[0].headers["Authorization"] == "Bearer test-token"
        assert seen[0].headers["X-User-Id"] == "42"
        assert seen[0].url.path == "/api/incidents"
        assert seen[0].url.params["parkId"] == "3"
        assert incidents[0].id == 12
        assert incidents[0].severity is IncidentSeverity.HIGH

    @pytest.mark.asyncio
    async def test_mutation_bodies_are_camel_case(self, settings):
        bodies: dict[str, dict] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            bodies[f"{request.method} {request.url.path}"] = json.loads(request.content)
            if request.url.path.endswith("/comments"):
                return httpx.Response(
                    201,
                    json={"id": 1, "incidentId": 12, "content": "On it", "userId": 42, "createdAt": "2025-03-10T10:00:00Z"},
                )
            return httpx.Response(200, json=INCIDENT_PAYLOAD)

        async with make_client(settings, handler) as client:
            await client.update_status(12, IncidentStatus.IN_PROGRESS)
            await client.assign(12, 7)
            await client.resolve(12, "Replaced chain")
            comment = await client.add_comment(12, "On it")

        assert bodies["PUT /api/incidents/12/status"] == {"status": "in_progress"}
        assert bodies["POST /api/incidents/12/assign"] == {"userId": 7}
        assert bodies["POST /api/incidents/12/resolve"] == {"resolutionNotes": "Replaced chain"}
        assert bodies["POST /api/incidents/12/comments"] == {"content": "On it", "userId": 42}
        assert comment.user_id == 42

    @pytest.mark.asyncio
    async def test_assignment_requests(self, settings):
        bodies: dict[str, dict] = {}
        assignment = {
            "id": 3,
            "incidentId": 12,
            "assignedToId": 7,
            "assignedById": 42,
            "department": "General",
            "status": "pending",
            "dueDate": None,
            "notes": None,
            "createdAt": "2025-03-10T10:00:00Z",
            "updatedAt": "2025-03-10T10:00:00Z",
        }

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                return httpx.Response(200, json=[assignment])
            bodies[f"{request.method} {request.url.path}"] = json.loads(request.content)
            return httpx.Response(200, json=assignment)

        async with make_client(settings, handler) as client:
            listed = await client.get_assignments(12)
            await client.create_assignment(12, AssignmentBody(assigned_to_id=7))
            await client.update_assignment(12, 3, AssignmentStatus.COMPLETED)

        assert listed[0].assigned_by_id == 42
        assert listed[0].status is AssignmentStatus.PENDING
        assert bodies["POST /api/incidents/12/assignments"] == {
            "assignedToId": 7,
            "department": "General",
            "dueDate": None,
            "notes": None,
        }
        assert bodies["PUT /api/incidents/12/assignments/3"] == {"status": "completed", "notes": None}

    @pytest.mark.asyncio
    async def test_priority_is_accepted_for_severity(self, settings):
        payload = {k: v for k, v in INCIDENT_PAYLOAD.items() if k != "severity"} | {"priority": "critical"}

        async with make_client(settings, lambda request: httpx.Response(200, json=payload)) as client:
            incident = await client.get_incident(12)

        assert incident.severity is IncidentSeverity.CRITICAL


class TestErrorMapping:
    @pytest.mark.asyncio
    async def test_not_found(self, settings):
        handler = lambda request: httpx.Response(404, json=error_body("INCIDENT_NOT_FOUND", "Incident 12 not found"))

        async with make_client(settings, handler) as client:
            with pytest.raises(RemoteIncidentNotFoundError) as exc_info:
                await client.get_incident(12)

        assert isinstance(exc_info.value, RequestError)
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Incident 12 not found"

    @pytest.mark.asyncio
    async def test_conflict_becomes_invalid_transition(self, settings):
        body = error_body(
            "INVALID_TRANSITION", "Cannot start an incident that is rejected", {"current_status": "rejected", "action": "start"}
        )

        async with make_client(settings, lambda request: httpx.Response(409, json=body)) as client:
            with pytest.raises(InvalidTransitionError) as exc_info:
                await client.update_status(12, IncidentStatus.IN_PROGRESS)

        assert exc_info.value.current_status == "rejected"

    @pytest.mark.asyncio
    async def test_server_error(self, settings):
        async with make_client(settings, lambda request: httpx.Response(500, text="oops")) as client:
            with pytest.raises(RequestError) as exc_info:
                await client.list_incidents()

        assert exc_info.value.status_code == 500
        assert "500" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_timeout_becomes_network_error(self, settings):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with make_client(settings, handler) as client:
            with pytest.raises(NetworkError) as exc_info:
                await client.get_incident(12)

        assert isinstance(exc_info.value.original_error, httpx.ReadTimeout)

    @pytest.mark.asyncio
    async def test_connection_failure_becomes_network_error(self, settings):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with make_client(settings, handler) as client:
            with pytest.raises(NetworkError):
                await client.list_incidents()

    @pytest.mark.asyncio
    async def test_unknown_park_becomes_validation_error(self, settings):
        body = error_body("INVALID_INCIDENT", "Park 999 does not exist", field="parkId")

        async with make_client(settings, lambda request: httpx.Response(422, json=body)) as client:
            with pytest.raises(ValidationError) as exc_info:
                await client.get_incident(12)

        assert exc_info.value.field == "parkId"
        assert exc_info.value.message == "Park 999 does not exist"

    @pytest.mark.asyncio
    async def test_rejected_request_body_becomes_validation_error(self, settings):
        body = error_body("VALIDATION_ERROR", "Request validation failed", field="title")

        async with make_client(settings, lambda request: httpx.Response(422, json=body)) as client:
            with pytest.raises(ValidationError) as exc_info:
                await client.list_incidents()

        assert exc_info.value.field == "title"

    @pytest.mark.asyncio
    async def test_other_unprocessable_responses_stay_request_errors(self, settings):
        body = error_body("UNPROCESSABLE_ENTITY", "Unprocessable")

        async with make_client(settings, lambda request: httpx.Response(422, json=body)) as client:
            with pytest.raises(RequestError) as exc_info:
                await client.list_incidents()

        assert exc_info.value.status_code == 422

    @pytest.mark.asyncio
    async def test_undecodable_body_becomes_network_error(self, settings):
        handler = lambda request: httpx.Response(200, headers={"content-encoding": "gzip"}, content=b"not gzip")

        async with make_client(settings, handler) as client:
            with pytest.raises(NetworkError) as exc_info:
                await client.get_incident(12)

        assert isinstance(exc_info.value.original_error, httpx.DecodingError)

    @pytest.mark.asyncio
    async def test_requests_are_not_retried(self, settings):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503, json={"detail": "Service unavailable"})

        async with make_client(settings, handler) as client:
            with pytest.raises(RequestError, match="Service unavailable"):
                await client.get_history(12)

        assert len(calls) == 1


class TestResponseValidation:
    @pytest.mark.asyncio
    async def test_unknown_status_is_rejected(self, settings):
        payload = INCIDENT_PAYLOAD | {"status": "archived"}

        async with make_client(settings, lambda request: httpx.Response(200, json=payload)) as client:
            with pytest.raises(ResponseFormatError):
                await client.get_incident(12)

    @pytest.mark.asyncio
    async def test_broken_invariant_is_rejected(self, settings):
        payload = INCIDENT_PAYLOAD | {"resolutionNotes": "Replaced chain"}

        async with make_client(settings, lambda request: httpx.Response(200, json=payload)) as client:
            with pytest.raises(ResponseFormatError, match="inconsistent"):
                await client.get_incident(12)

    @pytest.mark.asyncio
    async def test_non_json_body(self, settings):
        async with make_client(settings, lambda request: httpx.Response(200, text="<html>")) as client:
            with pytest.raises(ResponseFormatError):
                await client.list_incidents()
