"""Unit tests for resolving course files into chat-ready text."""

from __future__ import annotations

import asyncio

import httpx

from canvai.application.content_resolver import (
    EXTRACTION_FALLBACKS,
    MISSING_URL_MESSAGE,
    ContentResolver,
)
from canvai.application.errors import NotFoundError, TransportError
from canvai.application.truncation import TRUNCATION_NOTE
from canvai.domain.canvas import CanvasCredentials
from canvai.domain.documents import DocumentKind, SourceFile
from canvai.infrastructure.canvas import CanvasClient
from canvai.infrastructure.documents import default_extractors
from tests.document_fixture_utils import build_corrupt_deflate_pptx, build_docx


class FakeFetcher:
    def __init__(self, payloads: dict[str, bytes], *, error: Exception | None = None) -> None:
        self._payloads = payloads
        self._error = error
        self.calls: list[str] = []

    async def download(self, url: str) -> bytes:
        self.calls.append(url)
        if self._error is not None:
            raise self._error
        return self._payloads[url]


def _file(name: str, url: str = "https://files.example/1", mime_type: str = "text/plain") -> SourceFile:
    return SourceFile(id="1", name=name, url=url, mime_type=mime_type)


def test_resolver_returns_plain_text_unchanged() -> None:
    fetcher = FakeFetcher({"https://files.example/1": b"hello"})
    resolver = ContentResolver(fetcher, default_extractors())

    text = asyncio.run(resolver.resolve(_file("notes.txt")))

    assert text == "hello"


def test_resolver_short_circuits_on_existing_content() -> None:
    fetcher = FakeFetcher({})
    resolver = ContentResolver(fetcher, default_extractors())
    file = _file("notes.txt")
    file.content = "already loaded"

    text = asyncio.run(resolver.resolve(file))

    assert text == "already loaded"
    assert fetcher.calls == []


def test_resolver_returns_placeholder_for_unknown_kind_without_fetching() -> None:
    fetcher = FakeFetcher({})
    resolver = ContentResolver(fetcher, default_extractors())

    text = asyncio.run(resolver.resolve(_file("diagram.png", mime_type="image/png")))

    assert text == "This file (diagram.png, image/png) cannot be displayed as text."
    assert fetcher.calls == []


def test_resolver_reports_missing_url() -> None:
    resolver = ContentResolver(FakeFetcher({}), default_extractors())

    text = asyncio.run(resolver.resolve(_file("notes.txt", url="")))

    assert text == MISSING_URL_MESSAGE


def test_resolver_converts_fetch_failure_into_message() -> None:
    fetcher = FakeFetcher({}, error=NotFoundError("File not found.", status_code=404))
    resolver = ContentResolver(fetcher, default_extractors())

    text = asyncio.run(resolver.resolve(_file("notes.txt")))

    assert text == "Error loading file content: File not found."


def test_resolver_uses_fallback_for_corrupt_pdf() -> None:
    fetcher = FakeFetcher({"https://files.example/1": b"garbage bytes, definitely not a pdf"})
    resolver = ContentResolver(fetcher, default_extractors())

    text = asyncio.run(resolver.resolve(_file("scan.pdf", mime_type="application/pdf")))

    assert text == EXTRACTION_FALLBACKS[DocumentKind.PDF]
    assert "could not be processed" in text


def test_resolver_extracts_docx_text() -> None:
    fetcher = FakeFetcher({"https://files.example/1": build_docx(["Lab safety rules"])})
    resolver = ContentResolver(fetcher, default_extractors())

    text = asyncio.run(resolver.resolve(_file("syllabus.docx")))

    assert text == "Lab safety rules"


def test_resolver_truncates_long_text() -> None:
    fetcher = FakeFetcher({"https://files.example/1": b"x" * 50})
    resolver = ContentResolver(fetcher, default_extractors(), max_chars=10)

    text = asyncio.run(resolver.resolve(_file("long.txt")))

    assert text == "x" * 10 + TRUNCATION_NOTE


def test_resolver_never_raises_on_transport_failure() -> None:
    fetcher = FakeFetcher({}, error=TransportError("Unable to connect to Canvas."))
    resolver = ContentResolver(fetcher, default_extractors())

    text = asyncio.run(resolver.resolve(_file("slides.pptx")))

    assert text.startswith("Error loading file content: ")


def test_resolver_uses_fallback_for_damaged_pptx_archive() -> None:
    fetcher = FakeFetcher({"https://files.example/1": build_corrupt_deflate_pptx()})
    resolver = ContentResolver(fetcher, default_extractors())

    text = asyncio.run(resolver.resolve(_file("slides.pptx")))

    assert text == EXTRACTION_FALLBACKS[DocumentKind.PPTX]


def test_resolver_reports_download_redirect_loop() -> None:
    url = "https://canvas.test/files/7/download"

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(302, headers={"Location": url})

    async def scenario() -> str:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = CanvasClient(
            CanvasCredentials(domain="canvas.test", token="tok"),
            http_client=http_client,
        )
        try:
            return await ContentResolver(client, default_extractors()).resolve(
                _file("notes.txt", url=url)
            )
        finally:
            await http_client.aclose()

    text = asyncio.run(scenario())

    assert text == "Error loading file content: Canvas redirected too many times."
