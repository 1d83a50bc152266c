from .memory_repository import InMemoryIncidentRepository
from .seed import DEMO_ASSETS, DEMO_PARKS, seed_demo_incidents

__all__ = ["InMemoryIncidentRepository", "DEMO_PARKS", "DEMO_ASSETS", "seed_demo_incidents"]
