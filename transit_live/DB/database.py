"""
transit_live/DB/database.py

Database Operational Helpers

Connectivity check and development table creation, used by the application
lifespan in main.py. Request sessions come from
``transit_live.Controller.deps.get_DB``.

Write paths never commit through these helpers: every trip mutation goes
through the trip unit of work (``transit_live.Services.trip_locks``), which
commits or rolls back as a whole.

Usage Examples:
    if not test_db_connection():
        print("[DB] database unreachable")

    if settings.AUTO_CREATE_TABLES:
        create_all_tables()
"""

from sqlalchemy import text
from transit_live.DB.session import SessionLocal, engine


# ============================================================
# Database Health Check Utilities
# ============================================================

def test_db_connection() -> bool:
    """
    Test database connectivity with a simple query.

    Returns:
        bool: True if database is reachable and responsive, False otherwise

    Notes:
        - Does not raise; logs the error and returns False
    """
    db = None
    try:
        db = SessionLocal()
        value = db.execute(text("SELECT 1")).scalar()
        return value == 1
    except Exception as e:
        print(f"[DB] ❌ Connection test failed: {e}")
        return False
    finally:
        if db:
            db.close()


# ============================================================
# Development Utilities
# ============================================================

def create_all_tables():
    """
    Create all database tables defined in models.

    WARNING: Only use in development environments.
    In production, use Alembic migrations instead.
    """
    from transit_live.DB.base import Base
    print("[DB] 🔨 Creating all tables...")
    Base.metadata.create_all(bind=engine)
    print("[DB] ✅ Tables created successfully")


__all__ = [
    "test_db_connection",
    "create_all_tables"
]
