"""
Pytest configuration and shared fixtures for the parks incident desk tests.

Provides settings isolated from the developer's environment, the reference API
(FastAPI ``TestClient`` and an in-process httpx transport), and factories for
domain entities.
"""

import os
from collections.abc import AsyncGenerator, Generator
from datetime import datetime

import httpx
import pytest
import pytest_asyncio
import pytz
from fastapi import FastAPI
from fastapi.testclient import TestClient

# Set test environment before imports
os.environ["ENVIRONMENT"] = "test"
os.environ["SEED_DEMO_DATA"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["LOG_FORMAT"] = "json"
os.environ["TIMEZONE"] = "America/Mexico_City"

from parks_incidents.api.app import create_app
from parks_incidents.application.use_cases.incident_lifecycle import IncidentLifecycleService
from parks_incidents.config import Settings
from parks_incidents.domain.entities.incident import Incident
from parks_incidents.domain.enums import IncidentCategory, IncidentSeverity, IncidentStatus
from parks_incidents.infrastructure.api.client import IncidentApiClient
from parks_incidents.infrastructure.cache.query_cache import QueryCache
from parks_incidents.infrastructure.persistence import DEMO_ASSETS, DEMO_PARKS, InMemoryIncidentRepository
from parks_incidents.presentation.desk import IncidentDesk
from parks_incidents.presentation.notifications import RecordingNotifier

TEST_TOKEN = "test-token"
TEST_USER_ID = 42
BASE_TIME = datetime(2025, 3, 10, 9, 30, tzinfo=pytz.UTC)


@pytest.fixture
def settings() -> Settings:
    """Settings for tests, independent of any local ``.env`` file."""
    return Settings(
        _env_file=None,
        environment="test",
        seed_demo_data=False,
        api_base_url="http://testserver",
        api_client_token=TEST_TOKEN,
        api_user_id=TEST_USER_ID,
        cache_stale_time=0.0,
        reporter_name="Test Desk",
    )


@pytest.fixture
def repository() -> InMemoryIncidentRepository:
    return InMemoryIncidentRepository(parks=DEMO_PARKS, assets=DEMO_ASSETS)


@pytest.fixture
def app(settings: Settings, repository: InMemoryIncidentRepository) -> FastAPI:
    """Reference incidents API over a fresh in-memory store."""
    return create_app(settings=settings, repository=repository)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {TEST_TOKEN}", "X-User-Id": str(TEST_USER_ID)}


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Create test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


@pytest_asyncio.fixture
async def api_client(app: FastAPI, settings: Settings) -> AsyncGenerator[IncidentApiClient, None]:
    """The real REST client talking to the in-process API."""
    transport = httpx.ASGITransport(app=app)
    async with IncidentApiClient(settings=settings, transport=transport) as incident_client:
        yield incident_client


@pytest.fixture
def lifecycle(api_client: IncidentApiClient, settings: Settings) -> IncidentLifecycleService:
    return IncidentLifecycleService(api_client, cache=QueryCache(), settings=settings)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def desk(lifecycle: IncidentLifecycleService, notifier: RecordingNotifier) -> IncidentDesk:
    return IncidentDesk(lifecycle, notifier=notifier)


@pytest.fixture
def make_incident():
    """Factory for incident entities with sensible defaults."""

    def _make(**overrides) -> Incident:
        fields = {
            "id": 1,
            "title": "Broken swing",
            "description": "Swing chain snapped",
            "category": IncidentCategory.DAMAGE,
            "severity": IncidentSeverity.HIGH,
            "status": IncidentStatus.PENDING,
            "park_id": 3,
            "reporter_name": "María López",
            "created_at": BASE_TIME,
            "updated_at": BASE_TIME,
        }
        fields.update(overrides)
        return Incident(**fields)

    return _make


@pytest.fixture
def sample_report() -> dict:
    """Create-incident body as the desk sends it."""
    return {
        "title": "Broken swing",
        "description": "Swing chain snapped",
        "severity": "high",
        "category": "damage",
        "parkId": 3,
        "reporterName": "María López",
    }


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "integration: integration test")


@pytest.fixture
def base_time() -> datetime:
    return BASE_TIME
