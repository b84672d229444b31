"""Application-level contracts for LLM providers and chat completion."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Literal, Protocol


class LLMServiceProvider(StrEnum):
    """Supported LLM providers."""

    GEMINI = "gemini"
    OPENAI = "openai"


class LLMError(RuntimeError):
    """Base class for LLM failures visible to application code."""


class MissingApiKeyLLMError(LLMError):
    """Raised when the provider API key is not configured."""


class LLMTemporaryError(LLMError):
    """Raised when the provider is temporarily unavailable."""


class LLMRequestRejectedError(LLMError):
    """Raised when the provider rejects the request as invalid."""


@dataclass(frozen=True)
class ChatMessage:
    """One turn of a conversation."""

    role: Literal["user", "assistant"]
    content: str


@dataclass(frozen=True)
class ProviderCallRequest:
    """Provider-agnostic DTO for concrete provider clients."""

    model: str
    api_key: str
    system_prompt: str
    messages: tuple[ChatMessage, ...]
    max_output_tokens: int
    temperature: float
    timeout_seconds: float


@dataclass(frozen=True)
class ProviderCallResponse:
    """Provider-agnostic DTO for normalized provider responses."""

    output_text: str
    input_tokens: int | None
    output_tokens: int | None


class LLMProvider(Protocol):
    """Provider protocol implemented by infrastructure HTTP clients."""

    @property
    def provider(self) -> LLMServiceProvider:
        """Return provider identity."""
        ...

    async def generate(self, request: ProviderCallRequest) -> ProviderCallResponse:
        """Call provider and return provider-agnostic response DTO."""
        ...

    async def aclose(self) -> None:
        """Release transport resources."""
        ...


class LLMGateway(Protocol):
    """Port used by use-cases to obtain one chat completion."""

    async def complete(
        self,
        *,
        system_prompt: str,
        messages: tuple[ChatMessage, ...],
        correlation_id: str,
    ) -> str:
        """Return assistant reply text."""
        ...


class LLMKeyStore(Protocol):
    """Storage port for provider API keys."""

    def set_key(self, provider: LLMServiceProvider, api_key: str) -> None:
        """Persist API key for provider."""
        ...

    def get_key(self, provider: LLMServiceProvider) -> str | None:
        """Load API key for provider if present."""
        ...

    def delete_key(self, provider: LLMServiceProvider) -> None:
        """Delete provider key from storage."""
        ...
