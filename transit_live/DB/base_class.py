"""
transit_live/DB/base_class.py
=================================
SQLAlchemy Base Model Definition
=================================

Declarative base for every table of the trip tracking service.

Architecture:
------------
- Extends SQLAlchemy's DeclarativeBase (2.0 style)
- Default table name is the lowercase class name; models that need a plural
  or snake_case name override ``__tablename__`` with their own directive
- Naming convention on the metadata so Alembic produces stable constraint
  names on every backend

Usage Example:
-------------
    from transit_live.DB.base_class import Base
    from sqlalchemy import Column, String

    class Driver(Base):
        # Table name automatically becomes 'driver'
        id = Column(String(36), primary_key=True)
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase, declared_attr


NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models in the application.

    Features:
        - Automatic table naming: Converts class name to lowercase
        - Metadata registration: All models are registered in Base.metadata
        - Constraint naming convention shared with Alembic migrations
    """

    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    @declared_attr.directive
    def __tablename__(cls) -> str:
        """
        Generate table name from class name using lowercase convention.

        Examples:
            Driver → 'driver'
        """
        return cls.__name__.lower()
