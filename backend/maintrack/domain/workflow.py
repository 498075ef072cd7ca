# backend/maintrack/domain/workflow.py
"""
Bakım kaydı durum makinesi.

    pending --start--> in_progress --complete--> completed
       |                    |
       +------cancel--------+-----cancel------> cancelled

completed ve cancelled uçtur. Tablo dışındaki her istek InvalidTransition.
"""
from typing import Dict, NamedTuple, Optional, Tuple

from .constants import (
    RECORD_STATUSES,
    STATUS_CANCELLED,
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    STATUS_PENDING,
)
from .errors import InvalidTransition, ValidationError

EVENT_START = "start"
EVENT_COMPLETE = "complete"
EVENT_CANCEL = "cancel"

ACTION_START = "start_work"
ACTION_COMPLETE = "complete_work"
ACTION_CANCEL = "cancel_work"


class Transition(NamedTuple):
    target: str
    action: str


TRANSITIONS: Dict[Tuple[str, str], Transition] = {
    (STATUS_PENDING, EVENT_START): Transition(STATUS_IN_PROGRESS, ACTION_START),
    (STATUS_PENDING, EVENT_CANCEL): Transition(STATUS_CANCELLED, ACTION_CANCEL),
    (STATUS_IN_PROGRESS, EVENT_COMPLETE): Transition(STATUS_COMPLETED, ACTION_COMPLETE),
    (STATUS_IN_PROGRESS, EVENT_CANCEL): Transition(STATUS_CANCELLED, ACTION_CANCEL),
}

TERMINAL_STATUSES = frozenset({STATUS_COMPLETED, STATUS_CANCELLED})


def resolve(current: str, event: str) -> Transition:
    try:
        return TRANSITIONS[(current, event)]
    except KeyError:
        raise InvalidTransition(current, None, event=event) from None


def event_for(current: str, target: str) -> Optional[str]:
    """current -> target geçişini sağlayan olay; yoksa None."""
    if target not in RECORD_STATUSES:
        raise ValidationError(f"Unknown status {target!r}")
    for (source, event), transition in TRANSITIONS.items():
        if source == current and transition.target == target:
            return event
    return None


def allowed_events(current: str) -> Tuple[str, ...]:
    return tuple(event for (source, event) in TRANSITIONS if source == current)
