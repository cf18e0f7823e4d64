"""Artifact Generators — default `async (source_text) -> Artifact` callables per variant.

Invariants:
    - Breakdowns are generated from the extracted breakdown input, never the raw content
    - Content without a "1/ ... 2/" section raises ValidationError before any provider call
    - Audio voice and speaking rate chosen per language code
    - Provider failures (ExternalProviderError) propagate unmodified

Design Decisions:
    - Generators are closures over the provider: DerivationCache treats every variant the same
      and tests inject plain async functions instead (ADR: variant dispatch is a table lookup)
"""

from kondo.core.artifacts import Artifact
from kondo.core.breakdown_input import extract_breakdown_input
from kondo.core.domain_types import ArtifactVariant
from kondo.core.errors import ValidationError
from kondo.core.generation_prompts import (
    breakdown_system_prompt,
    phonetic_prompt,
    voice_for_language,
)
from kondo.core.repository_protocols import ArtifactGenerator, GenerationProvider


class ArtifactGenerators:
    """Builds the generator for a variant on top of a GenerationProvider."""

    def __init__(self, provider: GenerationProvider):
        self.provider = provider

    def for_variant(
        self, variant: ArtifactVariant, language_code: str | None = None,
    ) -> ArtifactGenerator:
        if variant == ArtifactVariant.AUDIO:
            return self._audio(language_code)
        if variant == ArtifactVariant.PHONETIC:
            return self._phonetic()
        return self._breakdown(variant, language_code)

    def _breakdown(
        self, variant: ArtifactVariant, language_code: str | None,
    ) -> ArtifactGenerator:
        system = breakdown_system_prompt(variant, language_code)

        async def generate(source_text: str) -> Artifact:
            breakdown_input = extract_breakdown_input(source_text)
            if breakdown_input is None:
                raise ValidationError(
                    "Content has no numbered section to break down",
                    "source_text",
                )
            text = await self.provider.complete(breakdown_input, system=system)
            return Artifact(variant=variant, payload=text)

        return generate

    def _phonetic(self) -> ArtifactGenerator:
        async def generate(source_text: str) -> Artifact:
            text = await self.provider.complete(phonetic_prompt(source_text))
            return Artifact(variant=ArtifactVariant.PHONETIC, payload=text)

        return generate

    def _audio(self, language_code: str | None) -> ArtifactGenerator:
        voice = voice_for_language(language_code)

        async def generate(source_text: str) -> Artifact:
            audio, mime_type = await self.provider.synthesize_speech(
                source_text, voice,
            )
            return Artifact(
                variant=ArtifactVariant.AUDIO, payload=audio, mime_type=mime_type,
            )

        return generate
