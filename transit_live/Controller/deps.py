# transit_live/Controller/deps.py

from typing import Generator
from transit_live.DB.session import SessionLocal
from transit_live.Services.trip_locks import Clock, utc_now


def get_DB() -> Generator:
    DB = SessionLocal()
    try:
        yield DB
    finally:
        DB.close()


def get_clock() -> Clock:
    """Clock used by the write endpoints; overridden in tests."""
    return utc_now
