"""Database Infrastructure — SQLAlchemy Base for the transactional store backend.

Invariants:
    - All ORM rows inherit from Base (db/base.py)
"""
