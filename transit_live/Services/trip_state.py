# transit_live/Services/trip_state.py
"""
Trip status state machine.

    STARTED      --first arrival-->  IN_PROGRESS
    STARTED      --emergency----->  PAUSED
    IN_PROGRESS  --emergency----->  PAUSED
    PAUSED       --resume-------->  IN_PROGRESS
    non-terminal --complete------>  COMPLETED
    non-terminal --cancel-------->  CANCELLED

PAUSED → PAUSED is allowed so a repeated emergency stop is idempotent.
Both tables below must cover every TripStatus; a missing entry fails at
import time.
"""

from datetime import datetime
from typing import Optional

from transit_live.Core.exceptions import TripNotActive
from transit_live.Models.trip_enums import TripStatus, ShiftStatus


TRIP_TRANSITIONS = {
    TripStatus.STARTED: frozenset({
        TripStatus.IN_PROGRESS, TripStatus.PAUSED, TripStatus.COMPLETED, TripStatus.CANCELLED,
    }),
    TripStatus.IN_PROGRESS: frozenset({
        TripStatus.PAUSED, TripStatus.COMPLETED, TripStatus.CANCELLED,
    }),
    TripStatus.PAUSED: frozenset({
        TripStatus.PAUSED, TripStatus.IN_PROGRESS, TripStatus.COMPLETED, TripStatus.CANCELLED,
    }),
    TripStatus.COMPLETED: frozenset(),
    TripStatus.CANCELLED: frozenset(),
}

# Shift status is a function of trip status.
SHIFT_STATUS_BY_TRIP_STATUS = {
    TripStatus.STARTED: ShiftStatus.ACTIVE,
    TripStatus.IN_PROGRESS: ShiftStatus.ACTIVE,
    TripStatus.PAUSED: ShiftStatus.EMERGENCY,
    TripStatus.COMPLETED: ShiftStatus.COMPLETED,
    TripStatus.CANCELLED: ShiftStatus.COMPLETED,
}

for _table in (TRIP_TRANSITIONS, SHIFT_STATUS_BY_TRIP_STATUS):
    _missing = set(TripStatus) - set(_table)
    if _missing:
        raise RuntimeError(f"Trip status table is missing {sorted(s.value for s in _missing)}")


def can_transition(current: TripStatus, target: TripStatus) -> bool:
    return target in TRIP_TRANSITIONS[TripStatus(current)]


def apply_transition(trip, target: TripStatus, now: Optional[datetime] = None) -> None:
    """
    Move ``trip`` to ``target`` or raise TripNotActive if the table forbids it.

    Callers check operation-specific preconditions (e.g. NotPaused for
    resume) before calling this; what is left here is the terminal guard.
    """
    current = TripStatus(trip.status)
    if not can_transition(current, target):
        raise TripNotActive(trip.id, current.value)

    trip.status = target
    if now is not None:
        trip.updated_at = now


def shift_status_for(trip_status: TripStatus) -> ShiftStatus:
    return SHIFT_STATUS_BY_TRIP_STATUS[TripStatus(trip_status)]
