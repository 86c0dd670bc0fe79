"""
Status enumerations for trips, trip stops and driver shifts.

Stored as their string value in non-native ``Enum`` (VARCHAR) columns,
so the database and the Python enum share one vocabulary.
"""

import enum


class TripStatus(str, enum.Enum):
    """Trip status enumeration."""
    STARTED = "STARTED"  # Created, no stop reached since start
    IN_PROGRESS = "IN_PROGRESS"  # First arrival after start has happened
    PAUSED = "PAUSED"  # Emergency stop, resumable
    COMPLETED = "COMPLETED"  # Finished by the driver
    CANCELLED = "CANCELLED"  # Aborted by dispatch

    @property
    def accepts_progress(self) -> bool:
        """Location samples, arrivals and departures are only accepted while moving."""
        return self in MOVING_TRIP_STATUSES


class StopStatus(str, enum.Enum):
    """Trip stop status enumeration."""
    PENDING = "PENDING"  # Not yet reached
    ARRIVED = "ARRIVED"  # Vehicle at the stop
    DEPARTED = "DEPARTED"  # Vehicle left the stop
    SKIPPED = "SKIPPED"  # Trip finished before the stop was reached


class ShiftStatus(str, enum.Enum):
    """Driver shift status enumeration."""
    ACTIVE = "ACTIVE"
    EMERGENCY = "EMERGENCY"
    COMPLETED = "COMPLETED"


MOVING_TRIP_STATUSES = frozenset({TripStatus.STARTED, TripStatus.IN_PROGRESS})
NON_TERMINAL_TRIP_STATUSES = frozenset({TripStatus.STARTED, TripStatus.IN_PROGRESS, TripStatus.PAUSED})
OPEN_SHIFT_STATUSES = frozenset({ShiftStatus.ACTIVE, ShiftStatus.EMERGENCY})


def sql_in(statuses) -> str:
    """Render a status set as a SQL ``IN`` list for CHECK constraints and partial indexes."""
    return "(" + ", ".join(f"'{s.value}'" for s in sorted(statuses, key=lambda s: s.value)) + ")"
