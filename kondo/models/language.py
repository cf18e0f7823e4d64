"""Language ORM — a learnable language, referenced by users, items and collections.

Invariants:
    - code is unique (ISO-ish short code: ja, ko, es, ...)
    - code drives prompt and voice selection for generated artifacts
"""

import uuid

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from kondo.db.base import Base


class Language(Base):
    """Language entity — code + display name."""
    __tablename__ = "languages"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    code: Mapped[str] = mapped_column(String(10), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
