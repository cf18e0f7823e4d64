"""Speech Client — text-to-speech over the ElevenLabs REST API.

Invariants:
    - One POST /v1/text-to-speech/{voice_id} per call, no retries
    - Returns raw audio bytes plus the response MIME type (defaults to audio/mpeg)
    - Every HTTP or transport failure mapped to ExternalProviderError

Design Decisions:
    - httpx.AsyncClient with a configured timeout: no vendor SDK needed for one endpoint
    - Client created lazily and closed by the lifespan (close())
"""

import logging

import httpx

from kondo.core.errors import ExternalProviderError, ErrorContext
from kondo.core.generation_prompts import VoiceParams

logger = logging.getLogger(__name__)

_DEFAULT_MIME_TYPE = "audio/mpeg"


class ElevenLabsSpeechClient:
    """Async HTTP client for speech synthesis."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.elevenlabs.io",
        model_id: str = "eleven_flash_v2_5",
        timeout_seconds: float = 60.0,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.model_id = model_id
        self.timeout_seconds = timeout_seconds
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the shared HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout_seconds, connect=10.0),
                headers={"xi-api-key": self.api_key},
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def synthesize_speech(
        self,
        text: str,
        voice: VoiceParams,
        context: ErrorContext | None = None,
    ) -> tuple[bytes, str]:
        """Synthesize `text` with `voice`. Returns (audio bytes, MIME type)."""
        payload = {
            "text": text,
            "model_id": self.model_id,
            "voice_settings": {
                "stability": voice.stability,
                "similarity_boost": voice.similarity_boost,
                "speed": voice.speed,
            },
        }
        try:
            response = await self._get_client().post(
                f"/v1/text-to-speech/{voice.voice_id}",
                json=payload,
                headers={"Accept": _DEFAULT_MIME_TYPE},
            )
            response.raise_for_status()
        except httpx.TimeoutException:
            raise ExternalProviderError(
                "Speech API timeout", "timeout", context=context,
            )
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            error_type = "rate_limit" if status == 429 else (
                "server_error" if status >= 500 else "client_error"
            )
            raise ExternalProviderError(
                f"HTTP {status}", error_type, context=context,
            )
        except httpx.RequestError as e:
            raise ExternalProviderError(
                f"Request failed: {e}", "connection_error", context=context,
            )

        if not response.content:
            raise ExternalProviderError(
                "Empty audio response", "empty_response", context=context,
            )
        mime_type = response.headers.get("content-type", _DEFAULT_MIME_TYPE)
        mime_type = mime_type.split(";")[0].strip() or _DEFAULT_MIME_TYPE
        logger.info(
            f"Speech synthesized: {len(response.content)} bytes",
        )
        return response.content, mime_type
