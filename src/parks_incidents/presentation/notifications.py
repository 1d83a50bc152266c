"""User-visible notifications raised by the incident desk."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

import structlog

from ..core.exceptions import (
    ActionInProgressError,
    IncidentDeskError,
    InvalidTransitionError,
    NetworkError,
    RequestError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

GENERIC_FAILURE_MESSAGE = "The request could not be completed. Please try again."


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """A toast: short title, one-line message and a severity level."""

    level: NotificationLevel
    title: str
    message: str
    error_code: str | None = None
    # wire name of the rejected input, when the failure points at one
    field: str | None = None

    @property
    def is_error(self) -> bool:
        return self.level in (NotificationLevel.WARNING, NotificationLevel.ERROR)


def notification_for_error(error: IncidentDeskError, title: str) -> Notification:
    """Turn a failure into the notification shown to the user.

    Transport and HTTP failures share one generic message; input and transition
    problems are reported with their own message.
    """
    if isinstance(error, (RequestError, NetworkError)):
        return Notification(NotificationLevel.ERROR, title, GENERIC_FAILURE_MESSAGE, error.error_code)
    if isinstance(error, ActionInProgressError):
        return Notification(NotificationLevel.INFO, title, error.message, error.error_code)
    if isinstance(error, ValidationError):
        return Notification(NotificationLevel.WARNING, title, error.message, error.error_code, error.field)
    if isinstance(error, InvalidTransitionError):
        return Notification(NotificationLevel.WARNING, title, error.message, error.error_code)
    return Notification(NotificationLevel.ERROR, title, error.message, error.error_code)


class Notifier(ABC):
    """Delivers notifications to the user."""

    @abstractmethod
    def notify(self, notification: Notification) -> None:
        pass


class LoggingNotifier(Notifier):
    """Writes notifications to the structured log."""

    def notify(self, notification: Notification) -> None:
        fields = {"title": notification.title, "error_code": notification.error_code, "field": notification.field}
        if notification.level is NotificationLevel.ERROR:
            logger.error(notification.message, **fields)
        elif notification.level is NotificationLevel.WARNING:
            logger.warning(notification.message, **fields)
        else:
            logger.info(notification.message, **fields)


class RecordingNotifier(Notifier):
    """Keeps every notification in order."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    @property
    def last(self) -> Notification | None:
        return self.notifications[-1] if self.notifications else None

    def clear(self) -> None:
        self.notifications.clear()
