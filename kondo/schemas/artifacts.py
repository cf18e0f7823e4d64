"""Artifact Schemas — get-or-generate request and response.

Invariants:
    - source_text: 1-20000 chars after strip
    - Audio payloads travel base64-encoded; text payloads as-is
"""

import base64

from pydantic import BaseModel, Field, field_validator

from kondo.core.artifacts import Artifact
from kondo.core.domain_types import ArtifactVariant


class ArtifactRequest(BaseModel):
    source_text: str = Field(min_length=1, max_length=20_000)
    language_code: str | None = Field(None, max_length=10)

    @field_validator("source_text")
    @classmethod
    def strip_source_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("source_text cannot be empty or whitespace")
        return v


class ArtifactResponse(BaseModel):
    variant: ArtifactVariant
    content: str | None = None
    audio_base64: str | None = None
    mime_type: str | None = None

    @classmethod
    def from_artifact(cls, artifact: Artifact) -> "ArtifactResponse":
        if isinstance(artifact.payload, bytes):
            return cls(
                variant=artifact.variant,
                audio_base64=base64.b64encode(artifact.payload).decode("ascii"),
                mime_type=artifact.mime_type,
            )
        return cls(variant=artifact.variant, content=artifact.payload)
