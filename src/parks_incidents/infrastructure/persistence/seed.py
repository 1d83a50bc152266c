"""Demo park directory and sample incidents for local runs."""

import structlog

from ...domain.enums import IncidentCategory, IncidentSeverity, IncidentStatus
from ...domain.repositories.incident_repository import AssetRef, ParkRef
from ...domain.services.incident_workflow_service import IncidentWorkflowService, NewIncident

logger = structlog.get_logger(__name__)

DEMO_PARKS = [
    ParkRef(id=1, name="Parque Agua Azul"),
    ParkRef(id=2, name="Bosque Los Colomos"),
    ParkRef(id=3, name="Parque Metropolitano"),
    ParkRef(id=4, name="Parque Alcalde"),
    ParkRef(id=5, name="Parque González Gallo"),
]

DEMO_ASSETS = [
    AssetRef(id=1, park_id=1, name="Fuente central"),
    AssetRef(id=2, park_id=1, name="Banca de concreto 12"),
    AssetRef(id=3, park_id=2, name="Sendero norte"),
    AssetRef(id=4, park_id=3, name="Columpio doble"),
    AssetRef(id=5, park_id=3, name="Luminaria 7"),
    AssetRef(id=6, park_id=4, name="Cancha de basquetbol"),
]


async def seed_demo_incidents(workflow: IncidentWorkflowService) -> int:
    """Report a handful of incidents in different statuses.

    Returns:
        Number of incidents created
    """
    samples = [
        (
            NewIncident(
                title="Fuga en la fuente",
                description="La fuente central pierde agua por la base",
                park_id=1,
                asset_id=1,
                severity=IncidentSeverity.HIGH,
                category=IncidentCategory.MAINTENANCE,
                reporter_name="María López",
                reporter_email="maria@example.org",
            ),
            IncidentStatus.IN_PROGRESS,
        ),
        (
            NewIncident(
                title="Grafiti en banca",
                description="Pintas en la banca 12 junto al kiosco",
                park_id=1,
                asset_id=2,
                severity=IncidentSeverity.LOW,
                category=IncidentCategory.VANDALISM,
                reporter_name="Jorge Ramírez",
            ),
            IncidentStatus.PENDING,
        ),
        (
            NewIncident(
                title="Luminaria apagada",
                description="La luminaria 7 no enciende desde el lunes",
                park_id=3,
                asset_id=5,
                severity=IncidentSeverity.MEDIUM,
                category=IncidentCategory.SAFETY,
                reporter_name="Vigilancia nocturna",
            ),
            IncidentStatus.REJECTED,
        ),
    ]

    for data, status in samples:
        incident = await workflow.report(data)
        if status is not IncidentStatus.PENDING:
            await workflow.change_status(incident.id, status, actor_id=None)

    logger.info("Demo incidents seeded", count=len(samples))
    return len(samples)
