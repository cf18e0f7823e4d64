"""Generation Provider Client — one handle for text completion and speech synthesis.

Invariants:
    - Implements GenerationProvider (core/repository_protocols.py)
    - No caching and no retries: DerivationCache owns caching, callers own retries
"""

from kondo.config import Settings
from kondo.core.generation_prompts import VoiceParams
from kondo.infrastructure.anthropic_client import AnthropicCompletionClient
from kondo.infrastructure.speech_client import ElevenLabsSpeechClient


class GenerationProviderClient:
    """Facade over the completion and speech clients."""

    def __init__(
        self,
        completion: AnthropicCompletionClient,
        speech: ElevenLabsSpeechClient,
    ):
        self.completion = completion
        self.speech = speech

    @classmethod
    def from_settings(cls, settings: Settings) -> "GenerationProviderClient":
        return cls(
            AnthropicCompletionClient(
                api_key=settings.anthropic_api_key,
                model=settings.completion_model,
                max_tokens=settings.completion_max_tokens,
                timeout_seconds=settings.anthropic_timeout_seconds,
            ),
            ElevenLabsSpeechClient(
                api_key=settings.elevenlabs_api_key,
                base_url=settings.elevenlabs_base_url,
                model_id=settings.elevenlabs_model_id,
                timeout_seconds=settings.elevenlabs_timeout_seconds,
            ),
        )

    async def complete(self, prompt: str, system: str | None = None) -> str:
        return await self.completion.complete(prompt, system)

    async def synthesize_speech(
        self, text: str, voice: VoiceParams,
    ) -> tuple[bytes, str]:
        return await self.speech.synthesize_speech(text, voice)

    async def close(self) -> None:
        await self.speech.close()
