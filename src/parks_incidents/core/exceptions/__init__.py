"""Core exception classes for the parks incident desk.

This module provides a hierarchy of custom exceptions used throughout the
application so the desk can turn any failure into a notification and the
reference API can map it onto an HTTP status code.
"""

from .application import ActionInProgressError, ValidationError
from .base import (
    ApplicationError,
    DomainError,
    IncidentDeskError,
    InfrastructureError,
)
from .domain import AssignmentNotFoundError, IncidentNotFoundError, InvalidIncidentError, InvalidTransitionError
from .infrastructure import (
    NetworkError,
    RemoteIncidentNotFoundError,
    RequestError,
    ResponseFormatError,
)

__all__ = [
    # Base exceptions
    "IncidentDeskError",
    "ApplicationError",
    "DomainError",
    "InfrastructureError",
    # Domain exceptions
    "InvalidIncidentError",
    "InvalidTransitionError",
    "IncidentNotFoundError",
    "AssignmentNotFoundError",
    # Application exceptions
    "ValidationError",
    "ActionInProgressError",
    # Infrastructure exceptions
    "RequestError",
    "RemoteIncidentNotFoundError",
    "ResponseFormatError",
    "NetworkError",
]
