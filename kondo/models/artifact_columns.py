"""Artifact Columns — cached derived-artifact columns shared by ContentItem and PublishedPost.

Invariants:
    - One nullable column per artifact payload (audio adds its MIME type)
    - Column names match core/artifacts.py VARIANT_COLUMNS
    - Written once by the derivation cache, copied verbatim by publish/import
"""

from sqlalchemy import LargeBinary, String, Text
from sqlalchemy.orm import Mapped, mapped_column


class ArtifactColumnsMixin:
    """Nullable artifact columns; empty means "not generated yet"."""
    breakdown_desktop: Mapped[str | None] = mapped_column(Text, nullable=True)
    breakdown_mobile: Mapped[str | None] = mapped_column(Text, nullable=True)
    phonetic: Mapped[str | None] = mapped_column(Text, nullable=True)
    audio: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    audio_mime_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
