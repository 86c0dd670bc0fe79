"""
transit_live/DB/session.py
======================================
Database Session Configuration Module
======================================

Creates the SQLAlchemy engine and the session factory used by every
request handler and background job.

Usage Example:
-------------
    from transit_live.DB.session import SessionLocal

    with SessionLocal() as db:
        trip = db.get(Trip, trip_id)

Session Configuration:
---------------------
- autocommit=False: Transactions must be explicitly committed
- autoflush=False: Changes are flushed explicitly by repositories
- expire_on_commit=True: Objects reload after commit, so a trip read after
  another unit of work always reflects the committed state
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from transit_live.Core.config import settings


def _engine_kwargs(url: str) -> dict:
    """
    Dialect specific engine options.

    SQLite connections are shared across FastAPI worker threads, so the
    same-thread check is disabled and a busy timeout lets concurrent writers
    queue instead of failing immediately.
    """
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False, "timeout": 30}}
    return {"pool_pre_ping": True}


# ============================================================
# DATABASE ENGINE CONFIGURATION
# ============================================================
engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))


# ============================================================
# SESSION FACTORY CONFIGURATION
# ============================================================
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)
