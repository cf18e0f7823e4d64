"""Derivation Cache — generate each artifact variant once, then serve it forever.

Invariants:
    - Lookup order: ContentItem, then PublishedPost (both carry artifact columns)
    - Empty source text only blocks generation; a stored variant is still served
    - Cache hit: stored artifact returned, no provider call, no write
    - Unknown id (ephemeral content): generated and returned, never persisted
    - Generation runs OUTSIDE any transaction; persist is one conditional
      single-column UPDATE ... WHERE <column> IS NULL (siblings untouched)
    - A stored variant is never overwritten: when a concurrent writer won,
      the stored value is re-read and returned
    - ExternalProviderError propagates; nothing is written

Design Decisions:
    - Duplicate concurrent generation tolerated over locking: provider cost only,
      no lost writes (ADR: no cross-request locks)
    - Variant -> column via VARIANT_COLUMNS (core/artifacts.py), never field-name strings
"""

import logging
from uuid import UUID

from sqlalchemy import update

from kondo.core.artifacts import Artifact, VARIANT_COLUMNS, read_artifact
from kondo.core.domain_types import ArtifactVariant
from kondo.core.errors import KondoError, ValidationError
from kondo.core.repository_protocols import ArtifactGenerator, TransactionalStore
from kondo.models.content_item import ContentItem
from kondo.models.published_post import PublishedPost
from kondo.services.artifact_generators import ArtifactGenerators

logger = logging.getLogger(__name__)

_ARTIFACT_ENTITIES = (ContentItem, PublishedPost)


class DerivationCache:
    """Get-or-generate for derived artifacts."""

    def __init__(self, store: TransactionalStore, generators: ArtifactGenerators):
        self.store = store
        self.generators = generators

    async def get_or_generate(
        self,
        entity_id: UUID,
        variant: ArtifactVariant,
        source_text: str,
        language_code: str | None = None,
        generator: ArtifactGenerator | None = None,
    ) -> Artifact | KondoError:
        """Return the cached artifact, generating and persisting it when absent."""
        model, stored = await self._lookup(entity_id, variant)
        if stored is not None:
            return stored

        if not source_text or not source_text.strip():
            return ValidationError("Source text is required", "source_text")

        generate = generator or self.generators.for_variant(variant, language_code)
        try:
            artifact = await generate(source_text)
        except ValidationError as e:
            return e

        if model is None:
            logger.info(
                f"Entity {entity_id} not found, returning ephemeral {variant.value}",
                extra={"item_id": str(entity_id), "variant": variant.value},
            )
            return artifact
        return await self._persist(model, entity_id, artifact)

    async def _lookup(
        self, entity_id: UUID, variant: ArtifactVariant,
    ) -> tuple[type | None, Artifact | None]:
        """Find the entity carrying `entity_id` and its stored variant."""
        async with self.store.session() as db:
            for model in _ARTIFACT_ENTITIES:
                row = await db.get(model, entity_id)
                if row is not None:
                    return model, read_artifact(row, variant)
        return None, None

    async def _persist(
        self, model: type, entity_id: UUID, artifact: Artifact,
    ) -> Artifact:
        """Write the artifact only if its column is still empty."""
        payload_column = getattr(model, VARIANT_COLUMNS[artifact.variant][0])
        async with self.store.transaction() as db:
            result = await db.execute(
                update(model)
                .where(model.id == entity_id, payload_column.is_(None))
                .values(**artifact.column_values())
                .execution_options(synchronize_session=False)
            )
        if result.rowcount:
            logger.info(
                f"Cached {artifact.variant.value} for {model.__tablename__}",
                extra={"item_id": str(entity_id), "variant": artifact.variant.value},
            )
            return artifact

        # Lost the race (or column held an empty value): serve what is stored
        async with self.store.session() as db:
            row = await db.get(model, entity_id)
            stored = read_artifact(row, artifact.variant) if row else None
        return stored or artifact
