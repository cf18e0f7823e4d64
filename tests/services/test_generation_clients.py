"""Generation Clients — error mapping for the completion and speech clients.

Tests cover:
    - completion returns joined text blocks; SDK errors map to ExternalProviderError
    - the SDK client is built with retries disabled
    - speech returns bytes + MIME type; HTTP/transport errors map to ExternalProviderError
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import anthropic
import httpx
import pytest

from kondo.core.errors import ExternalProviderError
from kondo.core.generation_prompts import VoiceParams
from kondo.infrastructure.anthropic_client import AnthropicCompletionClient
from kondo.infrastructure.speech_client import ElevenLabsSpeechClient

_REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def _completion_client(create) -> AnthropicCompletionClient:
    client = AnthropicCompletionClient(api_key="sk-ant-test", model="test-model")
    client.client = SimpleNamespace(messages=SimpleNamespace(create=create))
    return client


def _response(*texts):
    return SimpleNamespace(
        content=[SimpleNamespace(type="text", text=t) for t in texts],
        usage=SimpleNamespace(input_tokens=10, output_tokens=5),
    )


# ─── completion ──────────────────────────────────────────────────

def test_sdk_retries_disabled():
    client = AnthropicCompletionClient(api_key="sk-ant-test", model="test-model")
    assert client.client.max_retries == 0


async def test_complete_joins_text_blocks():
    create = AsyncMock(return_value=_response("こん", "にちは"))
    client = _completion_client(create)

    text = await client.complete("hello", system="be brief")

    assert text == "こんにちは"
    kwargs = create.await_args.kwargs
    assert kwargs["system"] == "be brief"
    assert kwargs["messages"] == [{"role": "user", "content": "hello"}]


async def test_complete_omits_empty_system():
    create = AsyncMock(return_value=_response("ok"))
    await _completion_client(create).complete("hello")
    assert "system" not in create.await_args.kwargs


@pytest.mark.parametrize("error, error_type", [
    (anthropic.APITimeoutError(request=_REQUEST), "timeout"),
    (anthropic.APIConnectionError(request=_REQUEST), "connection_error"),
    (
        anthropic.RateLimitError(
            "slow down", response=httpx.Response(429, request=_REQUEST), body=None,
        ),
        "rate_limit",
    ),
    (
        anthropic.BadRequestError(
            "bad", response=httpx.Response(400, request=_REQUEST), body=None,
        ),
        "client_error",
    ),
])
async def test_complete_maps_sdk_errors(error, error_type):
    client = _completion_client(AsyncMock(side_effect=error))

    with pytest.raises(ExternalProviderError) as exc:
        await client.complete("hello")

    assert exc.value.provider_error_type == error_type


async def test_empty_completion_is_provider_error():
    client = _completion_client(AsyncMock(return_value=_response()))
    with pytest.raises(ExternalProviderError):
        await client.complete("hello")


# ─── speech ──────────────────────────────────────────────────────

def _speech_client(handler) -> ElevenLabsSpeechClient:
    client = ElevenLabsSpeechClient(api_key="xi-test", base_url="https://tts.test")
    client._client = httpx.AsyncClient(
        base_url="https://tts.test",
        transport=httpx.MockTransport(handler),
        headers={"xi-api-key": "xi-test"},
    )
    return client


VOICE = VoiceParams(voice_id="voice-1", speed=0.75)


async def test_speech_returns_audio_and_mime_type():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["key"] = request.headers["xi-api-key"]
        return httpx.Response(
            200, content=b"mp3-bytes", headers={"content-type": "audio/mpeg; charset=binary"},
        )

    client = _speech_client(handler)
    audio, mime_type = await client.synthesize_speech("こんにちは", VOICE)
    await client.close()

    assert audio == b"mp3-bytes"
    assert mime_type == "audio/mpeg"
    assert seen == {"path": "/v1/text-to-speech/voice-1", "key": "xi-test"}


@pytest.mark.parametrize("status, error_type", [
    (401, "client_error"), (429, "rate_limit"), (500, "server_error"),
])
async def test_speech_maps_http_errors(status, error_type):
    client = _speech_client(lambda request: httpx.Response(status))

    with pytest.raises(ExternalProviderError) as exc:
        await client.synthesize_speech("hi", VOICE)

    assert exc.value.provider_error_type == error_type


async def test_speech_maps_transport_errors():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ExternalProviderError) as exc:
        await _speech_client(handler).synthesize_speech("hi", VOICE)

    assert exc.value.provider_error_type == "connection_error"
