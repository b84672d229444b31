"""Chat-completion gateway with key lookup, retries and call logging."""

from __future__ import annotations

import hashlib
import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from uuid import uuid4

import httpx

from canvai.application.llm import (
    ChatMessage,
    LLMKeyStore,
    LLMProvider,
    LLMServiceProvider,
    ProviderCallRequest,
)
from canvai.infrastructure.llm.errors import (
    LLMConfigurationError,
    LLMExecutionError,
    LLMRetryExhaustedError,
    MissingApiKeyError,
    ProviderRateLimitError,
    ProviderServerError,
)
from canvai.infrastructure.llm.retry import RetryExecutor, RetryPolicy

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class LLMServiceConfig:
    """Provider/model selection and call limits."""

    provider: LLMServiceProvider
    model: str
    timeout_seconds: float = 30.0
    max_output_tokens: int = 1000
    temperature: float = 0.7
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)


class LLMService:
    """Resolve API key, call the configured provider and normalize failures."""

    def __init__(
        self,
        *,
        providers: Mapping[LLMServiceProvider, LLMProvider],
        key_store: LLMKeyStore,
        config: LLMServiceConfig,
        retry_executor: RetryExecutor | None = None,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._providers = providers
        self._key_store = key_store
        self._config = config
        self._retry_executor = retry_executor or RetryExecutor(config.retry_policy)
        self._monotonic = monotonic

    async def aclose(self) -> None:
        """Close all provider clients."""
        for provider in self._providers.values():
            await provider.aclose()

    async def complete(
        self,
        *,
        system_prompt: str,
        messages: tuple[ChatMessage, ...],
        correlation_id: str,
    ) -> str:
        """Return assistant reply text for the conversation."""
        provider = self._providers.get(self._config.provider)
        if provider is None:
            raise LLMConfigurationError(
                f"Provider client is not configured: {self._config.provider.value}"
            )

        api_key = self._key_store.get_key(self._config.provider)
        if not api_key:
            raise MissingApiKeyError(
                f"Missing API key for provider {self._config.provider.value}. "
                "Run `canvai set-llm-key` first."
            )

        llm_call_id = str(uuid4())
        prompt_hash = _compute_prompt_hash(system_prompt, messages)
        request = ProviderCallRequest(
            model=self._config.model,
            api_key=api_key,
            system_prompt=system_prompt,
            messages=messages,
            max_output_tokens=self._config.max_output_tokens,
            temperature=self._config.temperature,
            timeout_seconds=self._config.timeout_seconds,
        )
        started = self._monotonic()

        try:
            response = await self._retry_executor.run(lambda: provider.generate(request))
        except (
            LLMRetryExhaustedError,
            ProviderRateLimitError,
            ProviderServerError,
            httpx.TimeoutException,
            httpx.TransportError,
        ) as exc:
            LOGGER.warning(
                (
                    "event=llm_call_provider_unavailable correlation_id=%s llm_call_id=%s "
                    "provider=%s model=%s prompt_hash=%s latency_ms=%s error_type=%s"
                ),
                correlation_id,
                llm_call_id,
                self._config.provider.value,
                self._config.model,
                prompt_hash,
                _compute_latency_ms(started, self._monotonic()),
                exc.__class__.__name__,
            )
            raise LLMExecutionError(
                "The AI service is temporarily unavailable. Please try again later."
            ) from exc

        LOGGER.info(
            (
                "event=llm_call_completed correlation_id=%s llm_call_id=%s provider=%s "
                "model=%s prompt_hash=%s latency_ms=%s input_tokens=%s output_tokens=%s"
            ),
            correlation_id,
            llm_call_id,
            self._config.provider.value,
            self._config.model,
            prompt_hash,
            _compute_latency_ms(started, self._monotonic()),
            response.input_tokens if response.input_tokens is not None else "-",
            response.output_tokens if response.output_tokens is not None else "-",
        )
        return response.output_text


def _compute_prompt_hash(system_prompt: str, messages: tuple[ChatMessage, ...]) -> str:
    digest = hashlib.sha256(system_prompt.encode("utf-8"))
    for message in messages:
        digest.update(b"\x00")
        digest.update(message.role.encode("utf-8"))
        digest.update(b"\x00")
        digest.update(message.content.encode("utf-8"))
    return digest.hexdigest()


def _compute_latency_ms(started: float, finished: float) -> int:
    return max(int((finished - started) * 1000), 0)
