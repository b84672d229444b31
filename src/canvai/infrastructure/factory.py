"""Factory helpers wiring application services to default adapters."""

from __future__ import annotations

from canvai.application.content_resolver import ByteFetcher, ContentResolver
from canvai.application.dashboard import DashboardAggregator
from canvai.application.dashboard_cache import DashboardCache
from canvai.application.llm import LLMKeyStore, LLMServiceProvider
from canvai.domain.canvas import CanvasCredentials
from canvai.infrastructure.canvas import CanvasClient
from canvai.infrastructure.config import AppConfig
from canvai.infrastructure.db import (
    SqlAlchemyKeyValueStore,
    create_session_factory,
    create_sqlite_engine,
)
from canvai.infrastructure.documents import default_extractors
from canvai.infrastructure.llm import GeminiClient, LLMService, LLMServiceConfig, OpenAIClient
from canvai.infrastructure.security import KeyringCredentialStore


def create_credential_store(config: AppConfig) -> KeyringCredentialStore:
    """Keyring store falling back to the configured Canvas domain."""
    return KeyringCredentialStore(default_domain=config.canvas_domain)


def create_canvas_client(credentials: CanvasCredentials, config: AppConfig) -> CanvasClient:
    return CanvasClient(credentials, timeout_seconds=config.http_timeout_seconds)


def create_key_value_store(config: AppConfig) -> SqlAlchemyKeyValueStore:
    """SQLite store at the configured database path."""
    engine = create_sqlite_engine(config.database_path)
    return SqlAlchemyKeyValueStore(create_session_factory(engine))


def create_dashboard_cache(config: AppConfig) -> DashboardCache:
    """Construct the dashboard cache over a keyring-backed aggregator."""
    aggregator = DashboardAggregator(
        create_credential_store(config),
        lambda resolved: create_canvas_client(resolved, config),
        current_term_marker=config.current_term_marker,
    )
    return DashboardCache(
        aggregator,
        create_key_value_store(config),
        ttl=config.cache_ttl,
    )


def create_content_resolver(fetcher: ByteFetcher) -> ContentResolver:
    return ContentResolver(fetcher, default_extractors())


def create_llm_service(config: AppConfig, key_store: LLMKeyStore) -> LLMService:
    """Construct gateway with both provider clients and the configured model."""
    return LLMService(
        providers={
            LLMServiceProvider.GEMINI: GeminiClient(),
            LLMServiceProvider.OPENAI: OpenAIClient(),
        },
        key_store=key_store,
        config=LLMServiceConfig(
            provider=config.llm_provider,
            model=config.model_for(config.llm_provider),
            timeout_seconds=config.http_timeout_seconds,
        ),
    )
