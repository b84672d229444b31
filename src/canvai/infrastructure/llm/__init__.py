"""LLM infrastructure package."""

from canvai.infrastructure.llm.clients import GeminiClient, OpenAIClient
from canvai.infrastructure.llm.retry import RetryExecutor, RetryPolicy
from canvai.infrastructure.llm.service import LLMService, LLMServiceConfig

__all__ = [
    "GeminiClient",
    "LLMService",
    "LLMServiceConfig",
    "OpenAIClient",
    "RetryExecutor",
    "RetryPolicy",
]
