"""Unit tests for the course chat use-case."""

from __future__ import annotations

import asyncio

import pytest

from canvai.application.content_resolver import ContentResolver
from canvai.application.course_chat import (
    CourseChatCommand,
    CourseChatUseCase,
    build_system_prompt,
)
from canvai.application.file_selection import FileSelection
from canvai.application.llm import ChatMessage
from canvai.domain.documents import SourceFile
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
    async def download(self, url: str) -> bytes:
        return b"Exam on Friday"


def test_build_system_prompt_includes_course_name_and_context() -> None:
    prompt = build_system_prompt("Biology 101", "Context from selected files:\nX")

    assert "for the course Biology 101" in prompt
    assert prompt.endswith("\n\nContext from selected files:\nX")
    assert build_system_prompt("Biology 101", None).endswith("academic integrity.")


def test_execute_sends_history_with_selected_file_context() -> None:
    gateway = RecordingGateway("The exam is on Friday.")
    selection = FileSelection(
        ContentResolver(StaticFetcher(), default_extractors()),
        [SourceFile(id="10", name="notes.txt", url="https://f/10", mime_type="text/plain")],
    )
    asyncio.run(selection.select("10"))
    history = [ChatMessage(role="user", content="When is the exam?")]

    reply = asyncio.run(
        CourseChatUseCase(gateway, selection).execute(
            CourseChatCommand(course_name="Biology 101", history=history)
        )
    )

    assert reply == ChatMessage(role="assistant", content="The exam is on Friday.")
    call = gateway.calls[0]
    assert call["messages"] == tuple(history)
    assert "Content from notes.txt:\nExam on Friday" in str(call["system_prompt"])
    assert call["correlation_id"]


def test_execute_without_selection_uses_plain_prompt() -> None:
    gateway = RecordingGateway("Hello!")

    asyncio.run(
        CourseChatUseCase(gateway).execute(
            CourseChatCommand(
                course_name="History",
                history=[ChatMessage(role="user", content="Hi")],
            )
        )
    )

    assert "Context from selected files" not in str(gateway.calls[0]["system_prompt"])


@pytest.mark.parametrize(
    "history",
    [
        [],
        [ChatMessage(role="user", content="Hi"), ChatMessage(role="assistant", content="Hello")],
    ],
)
def test_execute_rejects_invalid_history(history: list[ChatMessage]) -> None:
    gateway = RecordingGateway("unused")

    with pytest.raises(ValueError):
        asyncio.run(
            CourseChatUseCase(gateway).execute(
                CourseChatCommand(course_name="History", history=history)
            )
        )
    assert gateway.calls == []
