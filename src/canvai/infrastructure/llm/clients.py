"""HTTP clients for Gemini and OpenAI behind a unified DTO contract."""

from __future__ import annotations

from typing import cast

import httpx

from canvai.application.llm import (
    LLMServiceProvider,
    ProviderCallRequest,
    ProviderCallResponse,
)
from canvai.infrastructure.llm.errors import (
    ProviderRateLimitError,
    ProviderRequestError,
    ProviderResponseError,
    ProviderServerError,
)

_GEMINI_ROLES = {"user": "user", "assistant": "model"}


class GeminiClient:
    """Gemini ``generateContent`` REST adapter."""

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient | None = None,
        base_url: str = "https://generativelanguage.googleapis.com",
    ) -> None:
        self._http_client = http_client or httpx.AsyncClient(base_url=base_url)
        self._owns_client = http_client is None

    @property
    def provider(self) -> LLMServiceProvider:
        return LLMServiceProvider.GEMINI

    async def aclose(self) -> None:
        """Close owned HTTP client."""
        if self._owns_client:
            await self._http_client.aclose()

    async def generate(self, request: ProviderCallRequest) -> ProviderCallResponse:
        """Execute one Gemini generateContent call."""
        payload: dict[str, object] = {
            "systemInstruction": {"parts": [{"text": request.system_prompt}]},
            "contents": [
                {"role": _GEMINI_ROLES[message.role], "parts": [{"text": message.content}]}
                for message in request.messages
            ],
            "generationConfig": {
                "temperature": request.temperature,
                "maxOutputTokens": request.max_output_tokens,
                "topP": 0.8,
                "topK": 40,
            },
        }
        response = await self._http_client.post(
            f"/v1beta/models/{request.model}:generateContent",
            headers={"x-goog-api-key": request.api_key, "content-type": "application/json"},
            json=payload,
            timeout=request.timeout_seconds,
        )
        _raise_for_status(self.provider, response)

        payload_obj = _read_json_object(response, provider=self.provider)
        input_tokens, output_tokens = _extract_usage_tokens(
            payload_obj.get("usageMetadata"),
            input_key="promptTokenCount",
            output_key="candidatesTokenCount",
        )
        return ProviderCallResponse(
            output_text=_extract_gemini_text(payload_obj),
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )


class OpenAIClient:
    """OpenAI chat-completions API adapter."""

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient | None = None,
        base_url: str = "https://api.openai.com",
    ) -> None:
        self._http_client = http_client or httpx.AsyncClient(base_url=base_url)
        self._owns_client = http_client is None

    @property
    def provider(self) -> LLMServiceProvider:
        return LLMServiceProvider.OPENAI

    async def aclose(self) -> None:
        """Close owned HTTP client."""
        if self._owns_client:
            await self._http_client.aclose()

    async def generate(self, request: ProviderCallRequest) -> ProviderCallResponse:
        """Execute one chat-completions call."""
        messages: list[dict[str, str]] = [{"role": "system", "content": request.system_prompt}]
        messages.extend(
            {"role": message.role, "content": message.content} for message in request.messages
        )
        payload: dict[str, object] = {
            "model": request.model,
            "temperature": request.temperature,
            "max_tokens": request.max_output_tokens,
            "messages": messages,
        }
        response = await self._http_client.post(
            "/v1/chat/completions",
            headers={
                "Authorization": f"Bearer {request.api_key}",
                "content-type": "application/json",
            },
            json=payload,
            timeout=request.timeout_seconds,
        )
        _raise_for_status(self.provider, response)

        payload_obj = _read_json_object(response, provider=self.provider)
        input_tokens, output_tokens = _extract_usage_tokens(
            payload_obj.get("usage"),
            input_key="prompt_tokens",
            output_key="completion_tokens",
        )
        return ProviderCallResponse(
            output_text=_extract_openai_text(payload_obj),
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )


def _raise_for_status(provider: LLMServiceProvider, response: httpx.Response) -> None:
    status_code = response.status_code
    if status_code < 400:
        return

    message = f"{provider.value} request failed with status={status_code}."
    detail = _extract_error_detail(response)
    if detail:
        message = f"{message} detail={detail}"
    if status_code == 429:
        raise ProviderRateLimitError(message, retry_after_seconds=_retry_after_seconds(response))
    if 500 <= status_code <= 599:
        raise ProviderServerError(message)
    raise ProviderRequestError(message)


def _retry_after_seconds(response: httpx.Response) -> float | None:
    # Only the delta-seconds form; HTTP-date values are ignored.
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        seconds = float(value.strip())
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


def _extract_error_detail(response: httpx.Response) -> str | None:
    try:
        payload = response.json()
    except ValueError:
        text = response.text.strip()
        return _truncate_error_detail(text) if text else None

    if not isinstance(payload, dict):
        return None
    error_obj = cast(dict[str, object], payload).get("error")
    if isinstance(error_obj, str) and error_obj.strip():
        return _truncate_error_detail(error_obj.strip())
    if isinstance(error_obj, dict):
        error_message = cast(dict[str, object], error_obj).get("message")
        if isinstance(error_message, str) and error_message.strip():
            return _truncate_error_detail(error_message.strip())
    return None


def _truncate_error_detail(value: str, *, max_length: int = 300) -> str:
    if len(value) <= max_length:
        return value
    return f"{value[:max_length]}..."


def _read_json_object(
    response: httpx.Response,
    *,
    provider: LLMServiceProvider,
) -> dict[str, object]:
    try:
        payload = response.json()
    except ValueError as exc:
        raise ProviderResponseError(f"{provider.value} returned invalid JSON payload.") from exc

    if not isinstance(payload, dict):
        raise ProviderResponseError(f"{provider.value} response root must be a JSON object.")
    return {str(key): value for key, value in cast(dict[object, object], payload).items()}


def _extract_gemini_text(payload: dict[str, object]) -> str:
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        raise ProviderResponseError("gemini response is missing candidates.")
    first = cast(list[object], candidates)[0]
    if not isinstance(first, dict):
        raise ProviderResponseError("gemini first candidate has unexpected type.")
    content = cast(dict[str, object], first).get("content")
    if not isinstance(content, dict):
        raise ProviderResponseError("gemini candidate is missing content object.")
    parts = cast(dict[str, object], content).get("parts")
    if not isinstance(parts, list):
        raise ProviderResponseError("gemini candidate content is missing parts.")

    chunks: list[str] = []
    for part in cast(list[object], parts):
        if isinstance(part, dict):
            text = cast(dict[str, object], part).get("text")
            if isinstance(text, str):
                chunks.append(text)

    combined = "".join(chunks).strip()
    if not combined:
        raise ProviderResponseError("gemini response contains no text content.")
    return combined


def _extract_openai_text(payload: dict[str, object]) -> str:
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        raise ProviderResponseError("openai response is missing choices.")
    first_choice = cast(list[object], choices)[0]
    if not isinstance(first_choice, dict):
        raise ProviderResponseError("openai first choice has unexpected type.")
    message = cast(dict[str, object], first_choice).get("message")
    if not isinstance(message, dict):
        raise ProviderResponseError("openai first choice is missing message object.")
    content = cast(dict[str, object], message).get("content")
    if not isinstance(content, str) or not content.strip():
        raise ProviderResponseError("openai message content is empty or invalid.")
    return content.strip()


def _extract_usage_tokens(
    usage_obj: object,
    *,
    input_key: str,
    output_key: str,
) -> tuple[int | None, int | None]:
    if not isinstance(usage_obj, dict):
        return None, None
    usage = cast(dict[str, object], usage_obj)
    return _as_optional_int(usage.get(input_key)), _as_optional_int(usage.get(output_key))


def _as_optional_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    return None
