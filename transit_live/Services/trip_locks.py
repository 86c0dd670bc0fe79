# ==========================================================
#  Archivo: transit_live/Services/trip_locks.py
#  Descripción:
#     Per-trip serialization and all-or-nothing commits for every
#     mutation of a trip, its stops and its shift.
# ==========================================================
"""
Trip Locks & Unit of Work

Two layers keep concurrent writers on the same trip from racing:

1. ``TripLockRegistry``: one ``threading.Lock`` per key (``trip:<id>``,
   ``driver:<id>``, ``vehicle:<id>``). Keys are reference-counted and
   dropped when idle, so the registry does not grow with the number of
   trips ever seen. Different keys never block each other.
2. ``trip_unit_of_work``: inside the key lock, the trip row is read with
   ``SELECT ... FOR UPDATE`` (row lock across processes on PostgreSQL) and
   the whole block is committed on success or rolled back on any error.

A location sample, a manual arrival and a driver action on the same trip
therefore run one after the other and each observes the committed result
of the previous one.
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Dict, Iterator
import threading

from sqlalchemy.orm import Session

from transit_live.Core.exceptions import TripNotFound
from transit_live.Repositories.trip import get_trip_by_id


Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock: current instant, timezone-aware UTC."""
    return datetime.now(timezone.utc)


# ==========================================================
# 🔒 Clase TripLockRegistry
# ==========================================================
class TripLockRegistry:
    """
    Keyed mutexes for in-process serialization.

    Características:
    - Thread-safe (guard Lock around the key table)
    - Multiple keys acquired in sorted order (no lock-order deadlocks)
    - Idle keys removed on release
    """

    def __init__(self):
        self._locks: Dict[str, threading.Lock] = {}
        self._refs: Dict[str, int] = {}
        self._guard = threading.Lock()

    def _checkout(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
                self._refs[key] = 0
            self._refs[key] += 1
            return lock

    def _checkin(self, key: str) -> None:
        with self._guard:
            self._refs[key] -= 1
            if self._refs[key] == 0:
                del self._refs[key]
                del self._locks[key]

    @contextmanager
    def hold(self, *keys: str) -> Iterator[None]:
        """
        Hold every key for the duration of the block.
        """
        ordered = sorted(set(keys))
        acquired = []
        try:
            for key in ordered:
                lock = self._checkout(key)
                lock.acquire()
                acquired.append((key, lock))
            yield
        finally:
            for key, lock in reversed(acquired):
                lock.release()
                self._checkin(key)

    def active_keys(self) -> int:
        """Number of keys currently held or waited on."""
        with self._guard:
            return len(self._locks)


trip_locks = TripLockRegistry()


# ==========================================================
# UNIT OF WORK
# ==========================================================

@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Commit the block on success, roll back and re-raise on any error.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


@contextmanager
def trip_unit_of_work(
    db: Session,
    trip_id: str,
    locks: TripLockRegistry = trip_locks
):
    """
    Serialized, atomic mutation scope for one trip.

    Yields the trip row freshly loaded under a row lock. Everything written
    through ``db`` inside the block (trip, stops, shift, location samples)
    commits together when the block exits normally.

    Raises:
        TripNotFound: No trip with this id (nothing is written)

    Example:
        with trip_unit_of_work(db, trip_id) as trip:
            trip.notes = "Flat tyre"
    """
    with locks.hold(f"trip:{trip_id}"):
        # Work starts from committed state only.
        db.expire_all()
        with transaction(db):
            trip = get_trip_by_id(db, trip_id, for_update=True)
            if trip is None:
                raise TripNotFound(trip_id)
            yield trip
