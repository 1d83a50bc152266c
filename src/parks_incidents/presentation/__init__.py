from .desk import ActionResult, IncidentDesk, IncidentDetail
from .notifications import (
    GENERIC_FAILURE_MESSAGE,
    LoggingNotifier,
    Notification,
    NotificationLevel,
    Notifier,
    RecordingNotifier,
    notification_for_error,
)

__all__ = [
    "IncidentDesk",
    "ActionResult",
    "IncidentDetail",
    "Notification",
    "NotificationLevel",
    "Notifier",
    "LoggingNotifier",
    "RecordingNotifier",
    "notification_for_error",
    "GENERIC_FAILURE_MESSAGE",
]
