"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - User is the ownership root; every row is reachable from a user_id

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs (ADR: standard SQLAlchemy pattern)
"""

from kondo.models.language import Language  # noqa: F401
from kondo.models.user import User  # noqa: F401
from kondo.models.collection import Collection, content_item_collections  # noqa: F401
from kondo.models.content_item import ContentItem  # noqa: F401
from kondo.models.published_post import PublishedPost  # noqa: F401
from kondo.models.import_record import ImportRecord  # noqa: F401
from kondo.models.streak_state import StreakState  # noqa: F401
