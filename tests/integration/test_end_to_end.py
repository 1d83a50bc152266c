"""End-to-end desk scenarios against the in-process incidents API."""

import httpx
import pytest
import pytest_asyncio

from parks_incidents.application.dtos import IncidentListQuery
from parks_incidents.application.use_cases.incident_lifecycle import IncidentLifecycleService
from parks_incidents.domain.enums import AssignmentStatus, IncidentStatus, LifecycleAction
from parks_incidents.infrastructure.api.client import IncidentApiClient
from parks_incidents.infrastructure.cache import QueryCache
from parks_incidents.presentation import GENERIC_FAILURE_MESSAGE, IncidentDesk, NotificationLevel


class CountingTransport(httpx.AsyncBaseTransport):
    """Forwards to the app and remembers every request sent."""

    def __init__(self, inner: httpx.AsyncBaseTransport):
        self.inner = inner
        self.requests: list[httpx.Request] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return await self.inner.handle_async_request(request)


@pytest.fixture
def transport(app):
    return CountingTransport(httpx.ASGITransport(app=app))


@pytest_asyncio.fixture
async def counted_desk(transport, settings, notifier):
    async with IncidentApiClient(settings=settings, transport=transport) as incident_client:
        lifecycle = IncidentLifecycleService(incident_client, cache=QueryCache(), settings=settings)
        yield IncidentDesk(lifecycle, notifier=notifier)


async def report_swing(desk: IncidentDesk):
    result = await desk.report("Broken swing", "Swing chain snapped", "high", 3)
    assert result.ok, result.notification
    return result.value


@pytest.mark.integration
class TestScenarios:
    @pytest.mark.asyncio
    async def test_report_starts_pending_and_unassigned(self, desk):
        incident = await report_swing(desk)

        assert incident.status is IncidentStatus.PENDING
        assert incident.assigned_to_id is None
        assert incident.park_id == 3
        assert incident.reporter_name == "Test Desk"

    @pytest.mark.asyncio
    async def test_assign_keeps_status(self, desk):
        incident = await report_swing(desk)

        result = await desk.assign(incident.id, 7)

        assert result.value.assigned_to_id == 7
        assert result.value.status is IncidentStatus.PENDING

    @pytest.mark.asyncio
    async def test_resolve_in_progress_incident(self, desk):
        incident = await report_swing(desk)
        await desk.start(incident.id)

        result = await desk.resolve(incident.id, "Replaced chain")

        assert result.ok
        assert result.value.status is IncidentStatus.RESOLVED
        assert result.value.resolution_notes == "Replaced chain"
        assert result.value.resolution_date is not None

    @pytest.mark.asyncio
    async def test_resolve_keeps_assignee(self, desk):
        incident = await report_swing(desk)
        await desk.assign(incident.id, 7)

        result = await desk.resolve(incident.id, "Replaced chain")

        assert result.value.assigned_to_id == 7

    @pytest.mark.asyncio
    async def test_rejected_incident_offers_no_actions(self, desk, notifier):
        incident = await report_swing(desk)

        result = await desk.change_status(incident.id, "rejected")
        detail = await desk.open_incident(incident.id)

        assert result.value.status is IncidentStatus.REJECTED
        assert detail.value.actions == []

        refused = await desk.comment(incident.id, "Any update?")
        assert not refused.ok
        assert notifier.last.level is NotificationLevel.WARNING


@pytest.mark.integration
class TestLocalGuards:
    @pytest.mark.asyncio
    async def test_empty_notes_never_reach_the_api(self, counted_desk, transport):
        incident = await report_swing(counted_desk)
        sent = len(transport.requests)

        result = await counted_desk.resolve(incident.id, "")

        assert not result.ok
        assert len(transport.requests) == sent
        detail = await counted_desk.open_incident(incident.id)
        assert detail.value.incident.status is IncidentStatus.PENDING

    @pytest.mark.asyncio
    async def test_every_request_is_authenticated(self, counted_desk, transport):
        await report_swing(counted_desk)
        await counted_desk.list_incidents(IncidentListQuery())

        assert transport.requests
        assert all(r.headers["Authorization"] == "Bearer test-token" for r in transport.requests)
        assert all(r.headers["X-User-Id"] == "42" for r in transport.requests)


@pytest.mark.integration
class TestCacheConsistency:
    @pytest.mark.asyncio
    async def test_detail_and_lists_follow_mutations(self, desk):
        incident = await report_swing(desk)
        park_query = IncidentListQuery(park_id=3)

        # warm every view
        await desk.open_incident(incident.id)
        await desk.list_incidents(IncidentListQuery())
        await desk.list_incidents(park_query)

        await desk.start(incident.id)

        detail = (await desk.open_incident(incident.id)).value
        everything = (await desk.list_incidents(IncidentListQuery())).value
        in_park = (await desk.list_incidents(park_query)).value

        assert detail.incident.status is IncidentStatus.IN_PROGRESS
        assert LifecycleAction.START not in detail.actions
        assert [i.status for i in everything.items] == [IncidentStatus.IN_PROGRESS]
        assert [i.status for i in in_park.items] == [IncidentStatus.IN_PROGRESS]
        assert [entry.action.value for entry in detail.history] == ["status_changed"]

    @pytest.mark.asyncio
    async def test_comments_refetched_after_comment(self, desk):
        incident = await report_swing(desk)
        assert (await desk.open_incident(incident.id)).value.comments == []

        await desk.comment(incident.id, "Crew on the way")

        detail = (await desk.open_incident(incident.id)).value
        assert [c.content for c in detail.comments] == ["Crew on the way"]
        assert detail.comments[0].user_id == 42

    @pytest.mark.asyncio
    async def test_new_report_shows_in_warm_list(self, desk):
        await desk.list_incidents(IncidentListQuery())

        await report_swing(desk)
        page = (await desk.list_incidents(IncidentListQuery())).value

        assert page.total == 1

    @pytest.mark.asyncio
    async def test_stats(self, desk):
        first = await report_swing(desk)
        await report_swing(desk)
        await desk.start(first.id)
        await desk.resolve(first.id, "Replaced chain")

        stats = (await desk.stats()).value

        assert stats.total == 2
        assert stats.by_status[IncidentStatus.RESOLVED] == 1
        assert stats.open_count == 1
        assert stats.resolution_rate == 0.5


@pytest.mark.integration
class TestAssignments:
    @pytest.mark.asyncio
    async def test_assignment_shows_in_warm_detail(self, desk):
        incident = await report_swing(desk)
        await desk.open_incident(incident.id)

        result = await desk.create_assignment(incident.id, 7, "Mantenimiento", notes="Bring a new chain")

        assert result.ok, result.notification
        detail = (await desk.open_incident(incident.id)).value
        assert [(a.assigned_to_id, a.department, a.status) for a in detail.assignments] == [
            (7, "Mantenimiento", AssignmentStatus.PENDING)
        ]
        assert detail.assignments[0].assigned_by_id == 42
        assert detail.incident.assigned_to_id == 7
        assert detail.incident.status is IncidentStatus.PENDING
        assert [(e.action.value, e.details) for e in detail.history] == [("assignment_created", "Bring a new chain")]

    @pytest.mark.asyncio
    async def test_each_update_writes_one_history_entry(self, desk):
        incident = await report_swing(desk)
        assignment = (await desk.create_assignment(incident.id, 7)).value

        await desk.update_assignment(incident.id, assignment.id, AssignmentStatus.IN_PROGRESS)
        result = await desk.update_assignment(incident.id, assignment.id, "completed", notes="Chain replaced")

        assert result.value.status is AssignmentStatus.COMPLETED
        assert result.value.notes == "Chain replaced"
        detail = (await desk.open_incident(incident.id)).value
        assert [e.action.value for e in detail.history] == [
            "assignment_created",
            "assignment_updated",
            "assignment_updated",
        ]
        assert detail.history[1].details == f"Assignment {assignment.id} status changed to in_progress"

    @pytest.mark.asyncio
    async def test_completed_assignment_is_closed(self, desk, notifier):
        incident = await report_swing(desk)
        assignment = (await desk.create_assignment(incident.id, 7)).value
        await desk.update_assignment(incident.id, assignment.id, AssignmentStatus.COMPLETED)

        result = await desk.update_assignment(incident.id, assignment.id, AssignmentStatus.IN_PROGRESS)

        assert not result.ok
        assert notifier.last.level is NotificationLevel.WARNING
        assert notifier.last.error_code == "INVALID_TRANSITION"

    @pytest.mark.asyncio
    async def test_rejected_incident_takes_no_assignment(self, desk, notifier):
        incident = await report_swing(desk)
        await desk.reject(incident.id)

        result = await desk.create_assignment(incident.id, 7)

        assert not result.ok
        assert notifier.last.level is NotificationLevel.WARNING
        assert notifier.last.title == "Could not create assignment"

    @pytest.mark.asyncio
    async def test_unknown_assignment_is_a_generic_failure(self, desk, notifier):
        incident = await report_swing(desk)

        result = await desk.update_assignment(incident.id, 99, AssignmentStatus.COMPLETED)

        assert not result.ok
        assert notifier.last.message == GENERIC_FAILURE_MESSAGE
        assert notifier.last.error_code == "ASSIGNMENT_NOT_FOUND"


@pytest.mark.integration
class TestServerErrors:
    @pytest.mark.asyncio
    async def test_unknown_incident_is_a_generic_failure(self, desk, notifier):
        result = await desk.open_incident(404)

        assert not result.ok
        assert notifier.last.message == GENERIC_FAILURE_MESSAGE
        assert notifier.last.error_code == "INCIDENT_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_unknown_park_is_a_field_warning(self, desk, notifier):
        result = await desk.report("Broken swing", "Swing chain snapped", "high", 999)

        assert not result.ok
        assert notifier.last.level is NotificationLevel.WARNING
        assert notifier.last.error_code == "VALIDATION_ERROR"
        assert notifier.last.field == "parkId"
        assert "999" in notifier.last.message

    @pytest.mark.asyncio
    async def test_asset_from_another_park_is_a_field_warning(self, desk, notifier):
        # asset 1 sits in park 1
        result = await desk.report("Broken swing", "Swing chain snapped", "high", 3, asset_id=1)

        assert not result.ok
        assert notifier.last.level is NotificationLevel.WARNING
        assert notifier.last.field == "assetId"
