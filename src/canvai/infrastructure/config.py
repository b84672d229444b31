"""Environment-driven application configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from canvai.application.course_chat import DEFAULT_PROMPT_MAX_CHARS
from canvai.application.dashboard_cache import DEFAULT_CACHE_TTL
from canvai.application.errors import CanvaiError
from canvai.application.llm import LLMServiceProvider

CANVAS_DOMAIN_ENV_VAR = "CANVAI_CANVAS_DOMAIN"
DB_PATH_ENV_VAR = "CANVAI_DB_PATH"
CURRENT_TERM_ENV_VAR = "CANVAI_CURRENT_TERM"
CACHE_TTL_ENV_VAR = "CANVAI_CACHE_TTL_MINUTES"
PROMPT_MAX_CHARS_ENV_VAR = "CANVAI_PROMPT_MAX_CHARS"
HTTP_TIMEOUT_ENV_VAR = "CANVAI_HTTP_TIMEOUT_SECONDS"
LLM_PROVIDER_ENV_VAR = "CANVAI_LLM_PROVIDER"
GEMINI_MODEL_ENV_VAR = "CANVAI_GEMINI_MODEL"
OPENAI_MODEL_ENV_VAR = "CANVAI_OPENAI_MODEL"

DEFAULT_DB_FILENAME = "canvai.db"
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0
DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"


class ConfigurationError(CanvaiError):
    """Raised when an environment setting cannot be parsed."""


@dataclass(frozen=True)
class AppConfig:
    """Resolved runtime settings."""

    database_path: Path
    canvas_domain: str | None = None
    current_term_marker: str | None = None
    cache_ttl: timedelta = DEFAULT_CACHE_TTL
    prompt_max_chars: int = DEFAULT_PROMPT_MAX_CHARS
    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    llm_provider: LLMServiceProvider = LLMServiceProvider.GEMINI
    gemini_model: str = DEFAULT_GEMINI_MODEL
    openai_model: str = DEFAULT_OPENAI_MODEL

    def model_for(self, provider: LLMServiceProvider) -> str:
        if provider is LLMServiceProvider.OPENAI:
            return self.openai_model
        return self.gemini_model


def load_app_config(environ: Mapping[str, str] | None = None) -> AppConfig:
    """Build configuration from environment variables; blanks mean defaults."""
    env = os.environ if environ is None else environ

    ttl_minutes = _positive_number(env, CACHE_TTL_ENV_VAR, DEFAULT_CACHE_TTL.total_seconds() / 60)
    provider_value = _read(env, LLM_PROVIDER_ENV_VAR) or LLMServiceProvider.GEMINI.value
    try:
        provider = LLMServiceProvider(provider_value.lower())
    except ValueError as exc:
        raise ConfigurationError(
            f"{LLM_PROVIDER_ENV_VAR} must be one of: "
            + ", ".join(item.value for item in LLMServiceProvider)
        ) from exc

    return AppConfig(
        database_path=get_database_path(env),
        canvas_domain=_read(env, CANVAS_DOMAIN_ENV_VAR),
        current_term_marker=_read(env, CURRENT_TERM_ENV_VAR),
        cache_ttl=timedelta(minutes=ttl_minutes),
        prompt_max_chars=int(
            _positive_number(env, PROMPT_MAX_CHARS_ENV_VAR, DEFAULT_PROMPT_MAX_CHARS)
        ),
        http_timeout_seconds=_positive_number(
            env, HTTP_TIMEOUT_ENV_VAR, DEFAULT_HTTP_TIMEOUT_SECONDS
        ),
        llm_provider=provider,
        gemini_model=_read(env, GEMINI_MODEL_ENV_VAR) or DEFAULT_GEMINI_MODEL,
        openai_model=_read(env, OPENAI_MODEL_ENV_VAR) or DEFAULT_OPENAI_MODEL,
    )


def get_database_path(environ: Mapping[str, str] | None = None) -> Path:
    """Return configured SQLite database path."""
    env = os.environ if environ is None else environ
    configured = _read(env, DB_PATH_ENV_VAR)
    if configured:
        return Path(configured).expanduser().resolve()
    return (Path.home() / ".canvai" / DEFAULT_DB_FILENAME).resolve()


def _read(env: Mapping[str, str], name: str) -> str | None:
    value = env.get(name, "").strip()
    return value or None


def _positive_number(env: Mapping[str, str], name: str, default: float) -> float:
    raw = _read(env, name)
    if raw is None:
        return float(default)
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}.") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}.")
    return value
