"""
transit_live/DB/types.py
========================
Custom column types.

UTCDateTime
-----------
All timestamps in the service are timezone-aware UTC instants. PostgreSQL's
``timestamptz`` keeps the offset, but SQLite stores naive strings and hands
back naive datetimes, which would break delay arithmetic
(``arrived_at - scheduled_at``) with a TypeError. This decorator normalizes
both directions:

- bind:   naive values are assumed UTC; aware values are converted to UTC
- result: naive values coming back from the driver are tagged as UTC
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return ``value`` as an aware UTC datetime (naive input is treated as UTC)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Timezone-aware DateTime that always round-trips as UTC."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return ensure_utc(value)

    def process_result_value(self, value, dialect):
        return ensure_utc(value)
