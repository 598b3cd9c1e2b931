"""
Language-model adapter over the OpenAI chat completions API.

Transport failures (rate limits, dropped connections, 5xx) are retried with
exponential backoff. A reply that is empty or not the requested JSON is
never retried; the caller decides what a bad reply means.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, TypeVar

from openai import (
    APIConnectionError,
    AsyncOpenAI,
    AuthenticationError,
    BadRequestError,
    InternalServerError,
    OpenAIError,
    RateLimitError,
)
from pydantic import BaseModel, ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from breaddie.core.errors import LLMParsingError
from breaddie.core.metrics import record_llm_usage_metrics

logger = logging.getLogger("breaddie.services.llm")

ModelT = TypeVar("ModelT", bound=BaseModel)

RETRYABLE_ERRORS = (RateLimitError, APIConnectionError, InternalServerError)


class EmptyCompletionError(Exception):
    """The provider answered without any message content."""


@dataclass
class TokenUsage:
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class LLMService:
    """Thin async client for chat completions with retries and usage accounting."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4-turbo-preview",
        temperature: float = 0.8,
        default_timeout: float = 60.0,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self.model = model
        self.default_temperature = temperature
        self.default_timeout = default_timeout
        self.client = client or AsyncOpenAI(api_key=api_key, timeout=default_timeout)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(RETRYABLE_ERRORS),
        reraise=True,
    )
    async def chat(
        self,
        messages: list[dict[str, str]],
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
        response_format: dict[str, Any] | None = None,
        operation: str | None = None,
    ) -> tuple[str, TokenUsage]:
        """
        Send a chat completion request.

        Returns:
            Tuple of (response_text, token_usage). The text is empty when the
            provider returned no content.

        Raises:
            AuthenticationError / BadRequestError: never retried
            RateLimitError / APIConnectionError / InternalServerError: after retries
        """
        try:
            response = await self.client.chat.completions.create(  # type: ignore[call-overload]
                model=self.model,
                messages=messages,
                temperature=temperature if temperature is not None else self.default_temperature,
                max_tokens=max_tokens,
                response_format=response_format,
            )
        except (AuthenticationError, BadRequestError) as exc:
            logger.error(
                "LLM request rejected",
                extra={"error": str(exc), "error_type": type(exc).__name__, "operation": operation},
            )
            raise
        except RETRYABLE_ERRORS as exc:
            logger.warning(
                "LLM transport error, retrying",
                extra={"error": str(exc), "error_type": type(exc).__name__, "operation": operation},
            )
            raise
        except OpenAIError as exc:
            logger.error("LLM API error", extra={"error": str(exc), "error_type": type(exc).__name__})
            raise

        usage = TokenUsage(
            prompt_tokens=response.usage.prompt_tokens if response.usage else 0,
            completion_tokens=response.usage.completion_tokens if response.usage else 0,
            total_tokens=response.usage.total_tokens if response.usage else 0,
        )
        record_llm_usage_metrics(
            operation=operation,
            model=self.model,
            prompt_tokens=usage.prompt_tokens,
            completion_tokens=usage.completion_tokens,
            total_tokens=usage.total_tokens,
        )
        logger.info(
            "LLM request completed",
            extra={
                "model": self.model,
                "operation": operation,
                "prompt_tokens": usage.prompt_tokens,
                "completion_tokens": usage.completion_tokens,
            },
        )

        content = response.choices[0].message.content if response.choices else None
        return content or "", usage

    async def chat_json(
        self,
        messages: list[dict[str, str]],
        response_model: type[ModelT],
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
        operation: str | None = None,
    ) -> tuple[ModelT, TokenUsage]:
        """
        Request a JSON object reply and validate it into ``response_model``.

        Raises:
            EmptyCompletionError: the provider returned no content
            LLMParsingError: the content is not valid JSON for the model
        """
        text, usage = await self.chat(
            messages,
            temperature=temperature,
            max_tokens=max_tokens,
            response_format={"type": "json_object"},
            operation=operation,
        )
        if not text:
            raise EmptyCompletionError("No response from OpenAI")

        try:
            parsed = response_model.model_validate_json(text)
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.error(
                "Failed to parse LLM response",
                extra={
                    "error": str(exc),
                    "response_model": response_model.__name__,
                    "response_preview": text[:200],
                },
            )
            raise LLMParsingError("Invalid AI response format") from exc

        return parsed, usage


__all__ = ["EmptyCompletionError", "LLMService", "RETRYABLE_ERRORS", "TokenUsage"]
