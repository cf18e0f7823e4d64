"""Artifact Map — tagged {variant -> artifact | absent} view over an entity's cached columns.

Invariants:
    - VARIANT_COLUMNS is the single mapping from ArtifactVariant to storage columns
    - An artifact is present only when every one of its columns is non-empty
      (audio needs both bytes and MIME type)
    - All functions are PURE: no IO, no DB, attribute reads only

Design Decisions:
    - Columns stay flat on the ORM row so a single-variant UPDATE never touches siblings;
      the tagged map is built on read (ADR: write-once columns, no JSON read-modify-write)
    - Entities are duck-typed (ContentItem and PublishedPost both carry the columns)
"""

from dataclasses import dataclass

from kondo.core.domain_types import ArtifactVariant


@dataclass(frozen=True)
class Artifact:
    """One derived output. `payload` is text, or raw bytes for audio."""
    variant: ArtifactVariant
    payload: str | bytes
    mime_type: str | None = None

    def column_values(self) -> dict[str, object]:
        """Values keyed by storage column, ready for an UPDATE."""
        columns = VARIANT_COLUMNS[self.variant]
        if self.variant == ArtifactVariant.AUDIO:
            return {columns[0]: self.payload, columns[1]: self.mime_type}
        return {columns[0]: self.payload}


# variant -> storage columns (payload first)
VARIANT_COLUMNS: dict[ArtifactVariant, tuple[str, ...]] = {
    ArtifactVariant.BREAKDOWN_DESKTOP: ("breakdown_desktop",),
    ArtifactVariant.BREAKDOWN_MOBILE: ("breakdown_mobile",),
    ArtifactVariant.PHONETIC: ("phonetic",),
    ArtifactVariant.AUDIO: ("audio", "audio_mime_type"),
}

# Every column that publish/import copy verbatim
ARTIFACT_COLUMNS: tuple[str, ...] = tuple(
    column for columns in VARIANT_COLUMNS.values() for column in columns
)


def read_artifact(entity: object, variant: ArtifactVariant) -> Artifact | None:
    """Return the stored artifact for `variant`, or None when absent/empty."""
    columns = VARIANT_COLUMNS[variant]
    values = [getattr(entity, column, None) for column in columns]
    if any(not v for v in values):
        return None
    mime_type = values[1] if len(values) > 1 else None
    return Artifact(variant=variant, payload=values[0], mime_type=mime_type)


def artifact_map(entity: object) -> dict[ArtifactVariant, Artifact | None]:
    """Tagged map of every variant for an entity."""
    return {variant: read_artifact(entity, variant) for variant in ArtifactVariant}


def copy_artifact_columns(source: object) -> dict[str, object]:
    """Column values to copy verbatim from one artifact-carrying entity to another."""
    return {column: getattr(source, column, None) for column in ARTIFACT_COLUMNS}
