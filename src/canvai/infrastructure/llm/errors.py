"""Provider-side failures of the Gemini and OpenAI adapters."""

from __future__ import annotations

from canvai.application.llm import (
    LLMError,
    LLMRequestRejectedError,
    LLMTemporaryError,
    MissingApiKeyLLMError,
)


class LLMInfrastructureError(LLMError):
    pass


class LLMConfigurationError(LLMInfrastructureError):
    """No adapter is registered for the configured provider."""


class MissingApiKeyError(MissingApiKeyLLMError, LLMInfrastructureError):
    """The keyring holds no API key for the configured provider."""


class LLMExecutionError(LLMTemporaryError, LLMInfrastructureError):
    """Course chat could not get a reply; safe to show to the student."""


class ProviderResponseError(LLMInfrastructureError):
    """Reply body has no usable candidate or choice text."""


class ProviderRequestError(LLMRequestRejectedError, LLMInfrastructureError):
    """Provider refused the request (4xx other than 429); retrying will not help."""


class ProviderRateLimitError(LLMInfrastructureError):
    """HTTP 429, optionally with the provider's ``Retry-After`` hint in seconds."""

    def __init__(self, message: str, *, retry_after_seconds: float | None = None) -> None:
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds


class ProviderServerError(LLMInfrastructureError):
    """HTTP 5xx from the provider."""


class LLMRetryExhaustedError(LLMInfrastructureError):
    def __init__(self, message: str, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts
