"""Completion Client — wraps AsyncAnthropic for single-shot text completion.

Invariants:
    - No retries: the SDK's built-in retry is disabled (max_retries=0)
    - Every SDK failure mapped to ExternalProviderError (core/errors.py)
    - Returns the concatenated text blocks of the first response

Design Decisions:
    - Wrapper over raw client: error mapping lives in one place, services see plain str
    - OverloadedError (529) detected by status code on APIStatusError
      (ADR: not re-exported by every SDK version)
"""

import logging

import anthropic
from anthropic import (
    APIError,
    APIConnectionError,
    APIStatusError,
    RateLimitError,
    APITimeoutError,
    InternalServerError,
)

from kondo.core.errors import ExternalProviderError, ErrorContext

logger = logging.getLogger(__name__)

_OVERLOADED_STATUS = 529


def _is_overloaded(e: APIError) -> bool:
    """Check if error is Anthropic 529 Overloaded."""
    return isinstance(e, APIStatusError) and e.status_code == _OVERLOADED_STATUS


class AnthropicCompletionClient:
    """Text completion over the Anthropic Messages API, failures mapped, never retried."""

    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int = 2048,
        timeout_seconds: int = 120,
    ):
        self.client = anthropic.AsyncAnthropic(
            api_key=api_key,
            timeout=timeout_seconds,
            max_retries=0,
        )
        self.model = model
        self.max_tokens = max_tokens

    async def complete(
        self,
        prompt: str,
        system: str | None = None,
        context: ErrorContext | None = None,
    ) -> str:
        """Send one user prompt, return the response text."""
        kwargs: dict = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system

        try:
            response = await self.client.messages.create(**kwargs)
        except RateLimitError:
            raise ExternalProviderError(
                "Rate limit exceeded", "rate_limit", context=context,
            )
        except APITimeoutError:
            raise ExternalProviderError(
                "API timeout", "timeout", context=context,
            )
        except (APIConnectionError, InternalServerError) as e:
            raise ExternalProviderError(
                f"Connection error: {e}", "connection_error", context=context,
            )
        except APIError as e:
            if _is_overloaded(e):
                raise ExternalProviderError(
                    "Completion API overloaded (529)", "overloaded",
                    context=context,
                )
            raise ExternalProviderError(
                str(e), "client_error", context=context,
            )

        self._log_success(response)
        text = "".join(
            block.text for block in response.content
            if getattr(block, "type", None) == "text"
        )
        if not text:
            raise ExternalProviderError(
                "Empty completion", "empty_response", context=context,
            )
        return text

    def _log_success(self, response) -> None:
        """Log token usage of a successful call."""
        usage = response.usage
        logger.info(
            "Completion API success",
            extra={
                "input_tokens": usage.input_tokens,
                "output_tokens": usage.output_tokens,
            },
        )
