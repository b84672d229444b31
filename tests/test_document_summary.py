"""Unit tests for single-file summaries."""

from __future__ import annotations

import asyncio

import pytest

from canvai.application.content_resolver import (
    EXTRACTION_FALLBACKS,
    MISSING_URL_MESSAGE,
    ContentResolver,
)
from canvai.application.document_summary import summarize_file
from canvai.application.file_selection import FileSelection
from canvai.application.llm import ChatMessage
from canvai.application.truncation import TRUNCATION_NOTE
from canvai.domain.documents import DocumentKind, SourceFile
from canvai.infrastructure.documents import default_extractors


class RecordingGateway:
    def __init__(self, reply: str) -> None:
        self._reply = reply
        self.calls: list[dict[str, object]] = []

    async def complete(
        self,
        *,
        system_prompt: str,
        messages: tuple[ChatMessage, ...],
        correlation_id: str,
    ) -> str:
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "messages": messages,
                "correlation_id": correlation_id,
            }
        )
        return self._reply


class StaticFetcher:
    def __init__(self, payload: bytes) -> None:
        self._payload = payload
        self.calls = 0

    async def download(self, url: str) -> bytes:
        self.calls += 1
        return self._payload


def _selection(fetcher: StaticFetcher, *files: SourceFile) -> FileSelection:
    return FileSelection(ContentResolver(fetcher, default_extractors()), files)


def _notes(url: str = "https://f/10") -> SourceFile:
    return SourceFile(id="10", name="notes.txt", url=url, mime_type="text/plain")


def test_summarize_file_sends_document_text_as_user_message() -> None:
    gateway = RecordingGateway("## Summary\n- Exam on Friday\n")
    selection = _selection(StaticFetcher(b"Exam on Friday"), _notes())

    summary = asyncio.run(
        summarize_file(gateway, selection, "10", course_name="Biology 101")
    )

    assert summary == "## Summary\n- Exam on Friday"
    call = gateway.calls[0]
    messages = call["messages"]
    assert isinstance(messages, tuple) and len(messages) == 1
    assert messages[0].role == "user"
    assert messages[0].content.startswith(
        "I need you to summarize the following document: notes.txt\n\n"
        "Here is the content:\nExam on Friday\n\n"
    )
    assert "for the course Biology 101" in str(call["system_prompt"])
    assert "Context from selected files" not in str(call["system_prompt"])
    assert call["correlation_id"]


def test_summarize_file_caps_long_documents() -> None:
    gateway = RecordingGateway("Short.")
    selection = _selection(StaticFetcher(b"a" * 50), _notes())

    asyncio.run(
        summarize_file(gateway, selection, "10", course_name="Biology", max_chars=10)
    )

    content = gateway.calls[0]["messages"][0].content  # type: ignore[index]
    assert f"Here is the content:\n{'a' * 10}{TRUNCATION_NOTE}\n\n" in content


def test_summarize_file_reuses_loaded_content() -> None:
    fetcher = StaticFetcher(b"Exam on Friday")
    selection = _selection(fetcher, _notes())
    asyncio.run(selection.select("10"))

    asyncio.run(summarize_file(RecordingGateway("ok"), selection, "10", course_name="Bio"))

    assert fetcher.calls == 1


def test_summarize_file_returns_load_failure_without_calling_llm() -> None:
    gateway = RecordingGateway("unused")
    selection = _selection(StaticFetcher(b""), _notes(url=""))

    summary = asyncio.run(summarize_file(gateway, selection, "10", course_name="Bio"))

    assert summary == MISSING_URL_MESSAGE
    assert gateway.calls == []


def test_summarize_file_returns_extraction_fallback_without_calling_llm() -> None:
    gateway = RecordingGateway("unused")
    selection = _selection(
        StaticFetcher(b"not a zip"),
        SourceFile(id="11", name="deck.pptx", url="https://f/11", mime_type="application/pptx"),
    )

    summary = asyncio.run(summarize_file(gateway, selection, "11", course_name="Bio"))

    assert summary == EXTRACTION_FALLBACKS[DocumentKind.PPTX]
    assert gateway.calls == []


def test_summarize_file_names_file_when_reply_is_empty() -> None:
    selection = _selection(StaticFetcher(b"Exam on Friday"), _notes())

    summary = asyncio.run(
        summarize_file(RecordingGateway("  "), selection, "10", course_name="Bio")
    )

    assert summary == "Unable to generate summary for notes.txt"


def test_summarize_file_rejects_unknown_file_id() -> None:
    selection = _selection(StaticFetcher(b""), _notes())

    with pytest.raises(KeyError):
        asyncio.run(summarize_file(RecordingGateway("x"), selection, "99", course_name="Bio"))
