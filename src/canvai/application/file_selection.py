"""Selection of course files used as chat context."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from canvai.application.content_resolver import ContentResolver
from canvai.application.truncation import truncate
from canvai.domain.documents import SourceFile

LOGGER = logging.getLogger(__name__)


class FileSelection:
    """Track selected files and resolve each file's content at most once.

    Concurrent toggles of the same file await one shared in-flight task
    instead of starting a second extraction.
    """

    def __init__(self, resolver: ContentResolver, files: Iterable[SourceFile]) -> None:
        self._resolver = resolver
        self._files = {file.id: file for file in files}
        self._selected: set[str] = set()
        self._in_flight: dict[str, asyncio.Task[str]] = {}

    @property
    def files(self) -> list[SourceFile]:
        return list(self._files.values())

    def is_selected(self, file_id: str) -> bool:
        return file_id in self._selected

    def selected_files(self) -> list[SourceFile]:
        """Return selected files in listing order."""
        return [file for file in self._files.values() if file.id in self._selected]

    async def toggle(self, file_id: str) -> bool:
        """Flip selection of ``file_id``; return whether it is now selected."""
        file = self._files.get(file_id)
        if file is None:
            raise KeyError(f"Unknown file id: {file_id}")

        if file_id in self._selected:
            self._selected.discard(file_id)
            return False

        await self.select(file_id)
        return True

    async def select(self, file_id: str) -> SourceFile:
        """Select ``file_id`` and make sure its content is loaded."""
        file = self._files.get(file_id)
        if file is None:
            raise KeyError(f"Unknown file id: {file_id}")

        self._selected.add(file_id)
        if file.content is None:
            await self._load(file)
        return file

    def deselect(self, file_id: str) -> None:
        self._selected.discard(file_id)

    async def _load(self, file: SourceFile) -> None:
        task = self._in_flight.get(file.id)
        if task is None:
            task = asyncio.create_task(self._resolver.resolve(file))
            self._in_flight[file.id] = task
            LOGGER.debug("event=file_content_requested file_id=%s", file.id)
        try:
            content = await task
        finally:
            if self._in_flight.get(file.id) is task and task.done():
                del self._in_flight[file.id]
        if file.content is None:
            file.content = content

    def context_message(self, max_chars: int) -> str | None:
        """Render selected files as one context block, each capped at ``max_chars``."""
        blocks: list[str] = []
        for file in self.selected_files():
            if file.content is None:
                continue
            capped = truncate(file.content, max_chars)
            blocks.append(f"Content from {file.name}:\n{capped.text}")
        if not blocks:
            return None
        return "Context from selected files:\n" + "\n\n".join(blocks)
