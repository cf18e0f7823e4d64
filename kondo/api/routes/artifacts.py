"""Artifact Routes — get-or-generate a derived artifact for an item or post.

Invariants:
    - Unknown entity ids are served ephemerally (generated, not stored)
    - Provider failures surface as 503 EXTERNAL_PROVIDER_ERROR via the global handler
"""

from uuid import UUID

from fastapi import APIRouter, Depends

from kondo.api.dependencies import get_current_user_id, get_derivation_cache, unwrap
from kondo.core.domain_types import ArtifactVariant
from kondo.schemas.artifacts import ArtifactRequest, ArtifactResponse
from kondo.services.derivation_cache import DerivationCache

router = APIRouter(prefix="/api/v1/artifacts", tags=["artifacts"])


@router.post("/{entity_id}/{variant}", response_model=ArtifactResponse)
async def get_or_generate_artifact(
    entity_id: UUID,
    variant: ArtifactVariant,
    body: ArtifactRequest,
    user_id: UUID = Depends(get_current_user_id),
    cache: DerivationCache = Depends(get_derivation_cache),
):
    artifact = unwrap(await cache.get_or_generate(
        entity_id, variant, body.source_text, body.language_code,
    ))
    return ArtifactResponse.from_artifact(artifact)
