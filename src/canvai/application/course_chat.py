"""Use-case for answering student questions with selected course files as context."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from uuid import uuid4

from canvai.application.file_selection import FileSelection
from canvai.application.llm import ChatMessage, LLMGateway

LOGGER = logging.getLogger(__name__)

DEFAULT_PROMPT_MAX_CHARS = 15_000

_SYSTEM_PROMPT_TEMPLATE = (
    "You are a helpful AI course instructor assistant for the course {course_name}.\n"
    "Your goal is to help students understand the course material and answer their "
    "questions.\n"
    "If context from course files is provided, use it to give more specific and accurate "
    "answers.\n"
    "If no context is provided, give general guidance based on the topic.\n"
    "Always be encouraging and supportive, while maintaining academic integrity."
)


@dataclass(frozen=True)
class CourseChatCommand:
    """Input contract for one chat turn."""

    course_name: str
    history: Sequence[ChatMessage]


def build_system_prompt(course_name: str, context: str | None) -> str:
    """Combine assistant instructions with optional file context."""
    prompt = _SYSTEM_PROMPT_TEMPLATE.format(course_name=course_name)
    if context:
        return f"{prompt}\n\n{context}"
    return prompt


class CourseChatUseCase:
    """Send conversation plus selected file text to the LLM gateway."""

    def __init__(
        self,
        gateway: LLMGateway,
        selection: FileSelection | None = None,
        *,
        prompt_max_chars: int = DEFAULT_PROMPT_MAX_CHARS,
    ) -> None:
        self._gateway = gateway
        self._selection = selection
        self._prompt_max_chars = prompt_max_chars

    async def execute(self, command: CourseChatCommand) -> ChatMessage:
        """Return the assistant reply for the latest user message."""
        history = tuple(command.history)
        if not history:
            raise ValueError("Conversation history is empty.")
        if history[-1].role != "user":
            raise ValueError("Last message must come from the user.")

        context = (
            self._selection.context_message(self._prompt_max_chars)
            if self._selection is not None
            else None
        )
        correlation_id = str(uuid4())
        LOGGER.info(
            "event=course_chat_started correlation_id=%s turns=%s context_files=%s",
            correlation_id,
            len(history),
            len(self._selection.selected_files()) if self._selection is not None else 0,
        )
        reply = await self._gateway.complete(
            system_prompt=build_system_prompt(command.course_name, context),
            messages=history,
            correlation_id=correlation_id,
        )
        return ChatMessage(role="assistant", content=reply)
