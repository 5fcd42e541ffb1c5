"""ORM Models — one table per persisted Snapshot collection.

Invariants:
    - All models inherit from Base (db/base.py)
    - Every table carries `seq`: the row's position in its Snapshot list

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all
      or alembic autogenerate runs
"""

from techtutor.models.account import AccountRow  # noqa: F401
from techtutor.models.preferences import PreferencesRow  # noqa: F401
from techtutor.models.progress import ProgressRow  # noqa: F401
from techtutor.models.interaction import InteractionRow  # noqa: F401
