from .base import AndSpecification, MatchAllSpecification, Specification
from .incident_specifications import (
    AssigneeSpecification,
    CategorySpecification,
    ParkSpecification,
    SearchTextSpecification,
    SeveritySpecification,
    StatusSpecification,
)

__all__ = [
    "Specification",
    "AndSpecification",
    "MatchAllSpecification",
    "SearchTextSpecification",
    "ParkSpecification",
    "StatusSpecification",
    "CategorySpecification",
    "SeveritySpecification",
    "AssigneeSpecification",
]
