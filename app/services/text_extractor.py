# app/services/text_extractor.py
"""
Text extraction layer.

path | bytes  ->  ExtractedText

• application/pdf ...... PyMuPDF text layer, page by page
• text/plain ........... UTF-8 decode, undecodable bytes replaced

Blocking; callers on the event loop should run it via `asyncio.to_thread`.
"""
from __future__ import annotations

import logging
from pathlib import Path

import fitz  # PyMuPDF

from app.models.response import ExtractedText
from app.utils.errors import (
    EmptyContent,
    ExtractionFailure,
    SourceUnavailable,
    UnsupportedFormat,
)

logger = logging.getLogger(__name__)

PDF = "application/pdf"
TEXT = "text/plain"


def _read_source(source: Path | str | bytes) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    path = Path(source)
    try:
        return path.read_bytes()
    except OSError as exc:
        logger.error("Cannot read upload %s: %s", path, exc)
        raise SourceUnavailable("File not found or unreadable", exc) from exc


def extract_pdf_text(data: bytes) -> str:
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as exc:  # PyMuPDF raises several unrelated types for bad input
        logger.warning("PyMuPDF could not open document: %s", exc)
        raise ExtractionFailure("Invalid or corrupted PDF file", exc) from exc

    try:
        if doc.needs_pass:
            raise ExtractionFailure("PDF file is password protected")
        if doc.page_count == 0:
            raise ExtractionFailure("PDF file has no pages")
        page_texts = [page.get_text("text") for page in doc]
    except ExtractionFailure:
        raise
    except Exception as exc:
        logger.warning("PyMuPDF failed while reading pages: %s", exc)
        raise ExtractionFailure("Failed to extract text from PDF file", exc) from exc
    finally:
        doc.close()

    text = "\n".join(page_texts)
    if not text.strip():
        raise EmptyContent("PDF file appears to be empty or contains no extractable text")
    return text


def extract_plain_text(data: bytes) -> str:
    # undecodable bytes become U+FFFD; a leading BOM is dropped
    text = data.decode("utf-8-sig", errors="replace")

    if not text.strip():
        raise EmptyContent("Text file is empty")
    return text


class TextExtractor:
    """Turns an uploaded document into plain text. Knows nothing about classification."""

    _handlers = {
        PDF: extract_pdf_text,
        TEXT: extract_plain_text,
    }

    def supports(self, content_kind: str) -> bool:
        return content_kind in self._handlers

    def extract(self, source: Path | str | bytes, content_kind: str) -> ExtractedText:
        handler = self._handlers.get(content_kind)
        if handler is None:
            raise UnsupportedFormat(f"Unsupported file type: {content_kind}")

        data = _read_source(source)
        text = handler(data)
        logger.debug("Extracted %d characters (%s)", len(text), content_kind)
        return ExtractedText(text=text, original_length=len(text))
