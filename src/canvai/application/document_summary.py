"""Use-case for summarizing one course file with the LLM gateway."""

from __future__ import annotations

import logging
from uuid import uuid4

from canvai.application.content_resolver import is_degraded_content
from canvai.application.course_chat import DEFAULT_PROMPT_MAX_CHARS, build_system_prompt
from canvai.application.file_selection import FileSelection
from canvai.application.llm import ChatMessage, LLMGateway
from canvai.application.truncation import truncate

LOGGER = logging.getLogger(__name__)

_SUMMARY_REQUEST_TEMPLATE = (
    "I need you to summarize the following document: {name}\n\n"
    "Here is the content:\n{content}\n\n"
    "Please provide a comprehensive but concise summary that covers the main points, "
    "key concepts, and important details.\n"
    "Format your response with clear sections and bullet points where appropriate."
)


def build_summary_request(name: str, content: str) -> str:
    return _SUMMARY_REQUEST_TEMPLATE.format(name=name, content=content)


async def summarize_file(
    gateway: LLMGateway,
    selection: FileSelection,
    file_id: str,
    *,
    course_name: str,
    max_chars: int = DEFAULT_PROMPT_MAX_CHARS,
) -> str:
    """Return a summary of ``file_id``.

    Files whose content could not be loaded are not sent to the LLM; the
    failure message is returned as is. Raises ``KeyError`` for unknown ids.
    """
    file = await selection.select(file_id)
    content = file.content or ""
    if not content.strip() or is_degraded_content(file, content):
        LOGGER.info("event=document_summary_skipped file_id=%s", file.id)
        return content or f"Unable to generate summary for {file.name}"

    capped = truncate(content, max_chars)
    correlation_id = str(uuid4())
    LOGGER.info(
        "event=document_summary_started correlation_id=%s file_id=%s length=%s truncated=%s",
        correlation_id,
        file.id,
        len(capped.text),
        capped.truncated,
    )
    reply = await gateway.complete(
        system_prompt=build_system_prompt(course_name, None),
        messages=(
            ChatMessage(role="user", content=build_summary_request(file.name, capped.text)),
        ),
        correlation_id=correlation_id,
    )
    return reply.strip() or f"Unable to generate summary for {file.name}"
