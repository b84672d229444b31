"""Retry of course chat and summary calls on rate limits and provider outages.

One CLI invocation makes a single provider call, so the budget is small.
Gemini free-tier quotas answer 429 with a ``Retry-After`` hint; the wait
honors the hint when it is longer than the backoff step, up to
``max_delay_seconds``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

import httpx

from canvai.infrastructure.llm.errors import (
    LLMRetryExhaustedError,
    ProviderRateLimitError,
    ProviderServerError,
)

TResult = TypeVar("TResult")


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay_seconds: float = 1.0
    max_delay_seconds: float = 20.0
    backoff_multiplier: float = 2.0

    def backoff_delay(self, attempt: int) -> float:
        """Delay after failed ``attempt`` (1-based), before any server hint."""
        return min(
            self.max_delay_seconds,
            self.base_delay_seconds * (self.backoff_multiplier ** (attempt - 1)),
        )


def is_retryable_llm_error(error: Exception) -> bool:
    return isinstance(
        error,
        (
            ProviderRateLimitError,
            ProviderServerError,
            httpx.TimeoutException,
            httpx.TransportError,
        ),
    )


class RetryExecutor:
    """Await a provider call, sleeping between retryable failures."""

    def __init__(
        self,
        policy: RetryPolicy,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if policy.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if policy.base_delay_seconds < 0 or policy.max_delay_seconds < 0:
            raise ValueError("retry delays must be >= 0")
        if policy.backoff_multiplier < 1:
            raise ValueError("backoff_multiplier must be >= 1")

        self._policy = policy
        self._sleep = sleep

    async def run(
        self,
        operation: Callable[[], Awaitable[TResult]],
        *,
        is_retryable: Callable[[Exception], bool] = is_retryable_llm_error,
    ) -> TResult:
        attempt = 1
        while True:
            try:
                return await operation()
            except Exception as exc:
                if not is_retryable(exc):
                    raise
                if attempt >= self._policy.max_attempts:
                    raise LLMRetryExhaustedError(
                        f"Provider still failing after {attempt} attempts.",
                        attempts=attempt,
                    ) from exc

                await self._sleep(self._delay_for(attempt, exc))
                attempt += 1

    def _delay_for(self, attempt: int, error: Exception) -> float:
        delay = self._policy.backoff_delay(attempt)
        if isinstance(error, ProviderRateLimitError) and error.retry_after_seconds is not None:
            delay = max(delay, min(error.retry_after_seconds, self._policy.max_delay_seconds))
        return delay
