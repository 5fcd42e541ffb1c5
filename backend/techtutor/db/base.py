"""SQLAlchemy Declarative Base — shared base class for the state store tables.

Invariants:
    - All row models inherit from Base
    - Base is the single source of truth for table metadata

Design Decisions:
    - Separate file for Base: avoids circular imports between row models
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all TechTutor ORM rows."""
    pass
