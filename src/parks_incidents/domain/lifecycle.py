"""Incident lifecycle state machine.

``pending`` is the initial status. ``resolved`` and ``rejected`` are terminal:
no action is available once an incident reaches either of them.
"""

from __future__ import annotations

from types import MappingProxyType

from ..core.exceptions import InvalidTransitionError
from .enums import HistoryAction, IncidentStatus, LifecycleAction

_OPEN = frozenset({IncidentStatus.PENDING, IncidentStatus.IN_PROGRESS})

# action -> statuses it may be taken from
ALLOWED_FROM: MappingProxyType[LifecycleAction, frozenset[IncidentStatus]] = MappingProxyType(
    {
        LifecycleAction.START: frozenset({IncidentStatus.PENDING}),
        LifecycleAction.ASSIGN: _OPEN,
        LifecycleAction.RESOLVE: _OPEN,
        LifecycleAction.REJECT: _OPEN,
        LifecycleAction.COMMENT: _OPEN,
    }
)

# action -> resulting status; None keeps the current status
TARGET_STATUS: MappingProxyType[LifecycleAction, IncidentStatus | None] = MappingProxyType(
    {
        LifecycleAction.START: IncidentStatus.IN_PROGRESS,
        LifecycleAction.ASSIGN: None,
        LifecycleAction.RESOLVE: IncidentStatus.RESOLVED,
        LifecycleAction.REJECT: IncidentStatus.REJECTED,
        LifecycleAction.COMMENT: None,
    }
)

HISTORY_ACTION: MappingProxyType[LifecycleAction, HistoryAction] = MappingProxyType(
    {
        LifecycleAction.START: HistoryAction.STATUS_CHANGED,
        LifecycleAction.ASSIGN: HistoryAction.ASSIGNED,
        LifecycleAction.RESOLVE: HistoryAction.RESOLVED,
        LifecycleAction.REJECT: HistoryAction.STATUS_CHANGED,
        LifecycleAction.COMMENT: HistoryAction.COMMENTED,
    }
)


def available_actions(status: IncidentStatus) -> frozenset[LifecycleAction]:
    """Return the actions offered for an incident in the given status."""
    return frozenset(action for action, sources in ALLOWED_FROM.items() if status in sources)


def can_perform(status: IncidentStatus, action: LifecycleAction) -> bool:
    return status in ALLOWED_FROM[action]


def ensure_action_allowed(status: IncidentStatus, action: LifecycleAction) -> None:
    """Raise ``InvalidTransitionError`` unless ``action`` is allowed from ``status``.

    Args:
        status: Current incident status
        action: Requested action

    Raises:
        InvalidTransitionError: If the action is not available
    """
    if not can_perform(status, action):
        raise InvalidTransitionError(
            f"Cannot {action.value} an incident that is {status.value}",
            current_status=status.value,
            action=action.value,
        )


def next_status(status: IncidentStatus, action: LifecycleAction) -> IncidentStatus:
    """Return the status reached by taking ``action`` from ``status``."""
    ensure_action_allowed(status, action)
    target = TARGET_STATUS[action]
    return status if target is None else target


def action_for_target(current: IncidentStatus, target: IncidentStatus) -> LifecycleAction:
    """Map a requested status change onto the action that performs it.

    Resolution is refused here because it needs notes; callers use the resolve
    action for that.

    Raises:
        InvalidTransitionError: If ``target`` cannot be reached from ``current``
    """
    if target is IncidentStatus.RESOLVED:
        raise InvalidTransitionError(
            "Resolving an incident requires resolution notes",
            current_status=current.value,
            action=LifecycleAction.RESOLVE.value,
        )

    for action, reached in TARGET_STATUS.items():
        if reached is target and can_perform(current, action):
            return action

    raise InvalidTransitionError(
        f"Cannot change status from {current.value} to {target.value}",
        current_status=current.value,
    )
