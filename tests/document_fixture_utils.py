"""Utilities for building lightweight in-memory document fixtures."""

from __future__ import annotations

import io
import struct
import zipfile
from xml.sax.saxutils import escape

import docx


def build_simple_text_pdf(text: str) -> bytes:
    """Return a minimal one-page PDF with plain text content."""
    escaped_text = (
        text.replace("\\", "\\\\")
        .replace("(", "\\(")
        .replace(")", "\\)")
    )
    stream = f"BT /F1 14 Tf 72 720 Td ({escaped_text}) Tj ET".encode("latin-1", errors="replace")

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        (
            b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            b"/Resources << /Font << /F1 5 0 R >> >> /Contents 4 0 R >>"
        ),
        (
            f"<< /Length {len(stream)} >>\nstream\n".encode("ascii")
            + stream
            + b"\nendstream"
        ),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]

    pdf_parts: list[bytes] = [b"%PDF-1.4\n"]
    offsets: list[int] = []

    for index, obj in enumerate(objects, start=1):
        offsets.append(sum(len(part) for part in pdf_parts))
        pdf_parts.append(f"{index} 0 obj\n".encode("ascii"))
        pdf_parts.append(obj + b"\n")
        pdf_parts.append(b"endobj\n")

    xref_offset = sum(len(part) for part in pdf_parts)
    pdf_parts.append(f"xref\n0 {len(objects) + 1}\n".encode("ascii"))
    pdf_parts.append(b"0000000000 65535 f \n")
    for offset in offsets:
        pdf_parts.append(f"{offset:010d} 00000 n \n".encode("ascii"))

    pdf_parts.append(f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\n".encode("ascii"))
    pdf_parts.append(f"startxref\n{xref_offset}\n%%EOF\n".encode("ascii"))
    return b"".join(pdf_parts)


def build_docx(paragraphs: list[str], *, table_rows: list[list[str]] | None = None) -> bytes:
    """Return a Word document with the given paragraphs and optional table."""
    document = docx.Document()
    for paragraph in paragraphs:
        document.add_paragraph(paragraph)
    if table_rows:
        table = document.add_table(rows=len(table_rows), cols=len(table_rows[0]))
        for row_index, row in enumerate(table_rows):
            for column_index, value in enumerate(row):
                table.cell(row_index, column_index).text = value
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def build_pptx(slides: list[list[str]]) -> bytes:
    """Return a zip package with one slide part per entry holding ``<a:t>`` runs.

    Slide parts are written in reverse order so readers must sort by number.
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("[Content_Types].xml", "<Types/>")
        for number in range(len(slides), 0, -1):
            runs = "".join(
                f'<a:r><a:rPr lang="en-US"/><a:t>{escape(text)}</a:t></a:r>'
                for text in slides[number - 1]
            )
            archive.writestr(
                f"ppt/slides/slide{number}.xml",
                (
                    '<p:sld xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main" '
                    'xmlns:p="http://schemas.openxmlformats.org/presentationml/2006/main">'
                    f"<p:cSld><p:spTree><p:sp><p:txBody><a:p>{runs}</a:p>"
                    "</p:txBody></p:sp></p:spTree></p:cSld></p:sld>"
                ),
            )
    return buffer.getvalue()


def build_corrupt_deflate_pptx() -> bytes:
    """Return a package whose directory is intact but whose slide data is damaged."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr(
            "ppt/slides/slide1.xml",
            "<p:sld>" + "<a:t>Cell membranes and transport</a:t>" * 200 + "</p:sld>",
        )
    data = bytearray(buffer.getvalue())

    with zipfile.ZipFile(io.BytesIO(bytes(data))) as archive:
        info = archive.getinfo("ppt/slides/slide1.xml")
    name_length, extra_length = struct.unpack_from("<HH", data, info.header_offset + 26)
    start = info.header_offset + 30 + name_length + extra_length
    for index in range(start + 2, start + info.compress_size - 2):
        data[index] ^= 0x5A
    return bytes(data)
