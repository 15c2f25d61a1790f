"""Test the end-to-end classification pipeline with a mocked LLM."""

from dataclasses import replace
from pathlib import Path
from unittest.mock import patch

import pytest

from app.config import TRUNCATION_MARKER
from app.models.request import FileClassificationRequest
from app.services.document_service import DocumentService
from app.services.llm_service import CLASSIFICATION_PROMPT, ClassifierGateway
from app.services.text_extractor import TextExtractor
from app.utils.errors import (
    ClassificationUnavailable,
    EmptyContent,
    ExtractionFailure,
    InternalFailure,
    InvalidInput,
)
from app.utils.preprocess import truncate_text
from conftest import make_client, write_pdf


def upload(path: Path, content_kind="text/plain") -> FileClassificationRequest:
    return FileClassificationRequest(
        path=path,
        content_kind=content_kind,
        original_name=path.name,
        size=path.stat().st_size,
    )


def sent_text(client) -> str:
    prompt = client.chat.completions.create.call_args.kwargs["messages"][0]["content"]
    return prompt[len(CLASSIFICATION_PROMPT):]


def test_truncate_text():
    assert truncate_text("abc", 3) == "abc"
    cut = truncate_text("abcdef", 3)
    assert cut == "abc" + TRUNCATION_MARKER
    assert len(cut) == 3 + len(TRUNCATION_MARKER)


@pytest.mark.asyncio
async def test_text_invoice_upload_routes_to_finance(service, client, tmp_path):
    path = tmp_path / "invoice.txt"
    path.write_text("Invoice #123, Amount: $500", encoding="utf-8")

    result = await service.process_document(upload(path))

    assert result.document_type == "invoice"
    assert result.confidence == 0.92
    assert result.confidence_level == "high"
    assert "automatic routing" in result.routing_recommendation
    assert "Finance Department" in result.routing_recommendation
    assert result.file_name == "invoice.txt"
    assert result.file_size == len("Invoice #123, Amount: $500")
    assert result.mime_type == "text/plain"
    assert result.uploaded_at is not None
    assert sent_text(client) == "Invoice #123, Amount: $500"
    assert not path.exists()


@pytest.mark.asyncio
async def test_pdf_upload(service, tmp_path):
    path = write_pdf(tmp_path / "invoice.pdf", "Invoice #123, Amount: $500")

    result = await service.process_document(upload(path, "application/pdf"))

    assert result.document_type == "invoice"
    assert result.mime_type == "application/pdf"
    assert not path.exists()


@pytest.mark.asyncio
async def test_oversized_upload_rejected_before_extraction(settings, client, tmp_path):
    service = DocumentService(
        replace(settings, max_file_size=10), TextExtractor(), ClassifierGateway(settings, client=client)
    )
    path = tmp_path / "big.txt"
    path.write_text("x" * 11, encoding="utf-8")

    with patch.object(TextExtractor, "extract") as extract:
        with pytest.raises(InvalidInput):
            await service.process_document(upload(path))
        extract.assert_not_called()

    client.chat.completions.create.assert_not_called()
    assert not path.exists()


@pytest.mark.asyncio
async def test_disallowed_content_kind_rejected(service, client, tmp_path):
    path = tmp_path / "page.html"
    path.write_text("<p>hi</p>", encoding="utf-8")

    with pytest.raises(InvalidInput):
        await service.process_document(upload(path, "text/html"))

    client.chat.completions.create.assert_not_called()
    assert not path.exists()


@pytest.mark.asyncio
async def test_extraction_errors_propagate_and_clean_up(service, client, tmp_path):
    blank = tmp_path / "blank.txt"
    blank.write_text("   ", encoding="utf-8")
    broken = tmp_path / "broken.pdf"
    broken.write_bytes(b"not a pdf")

    with pytest.raises(EmptyContent):
        await service.process_document(upload(blank))
    with pytest.raises(ExtractionFailure):
        await service.process_document(upload(broken, "application/pdf"))

    client.chat.completions.create.assert_not_called()
    assert not blank.exists()
    assert not broken.exists()


@pytest.mark.asyncio
async def test_llm_failure_is_unavailable_and_file_removed(settings, tmp_path):
    client = make_client(error=ConnectionError("upstream closed connection"))
    service = DocumentService(settings, TextExtractor(), ClassifierGateway(settings, client=client))
    path = tmp_path / "invoice.txt"
    path.write_text("Invoice #123, Amount: $500", encoding="utf-8")

    with pytest.raises(ClassificationUnavailable):
        await service.process_document(upload(path))

    assert not path.exists()


@pytest.mark.asyncio
async def test_cleanup_failure_is_swallowed(service, tmp_path):
    path = tmp_path / "invoice.txt"
    path.write_text("Invoice #123, Amount: $500", encoding="utf-8")

    with patch.object(Path, "unlink", side_effect=PermissionError("locked")):
        result = await service.process_document(upload(path))

    assert result.document_type == "invoice"


@pytest.mark.asyncio
async def test_unexpected_error_becomes_internal_failure(service, tmp_path):
    path = tmp_path / "invoice.txt"
    path.write_text("Invoice", encoding="utf-8")

    with patch.object(TextExtractor, "extract", side_effect=RuntimeError("boom")):
        with pytest.raises(InternalFailure):
            await service.process_document(upload(path))

    assert not path.exists()


@pytest.mark.asyncio
@pytest.mark.parametrize("content", ["", "   \n", None, 123])
async def test_classify_text_requires_content(service, client, content):
    with pytest.raises(InvalidInput):
        await service.classify_text(content)

    client.chat.completions.create.assert_not_called()


@pytest.mark.asyncio
async def test_classify_text(service):
    result = await service.classify_text("Invoice #123, Amount: $500")

    assert result.department == "finance"
    assert result.content_length == len("Invoice #123, Amount: $500")
    assert result.classified_at is not None
    assert result.file_name is None


@pytest.mark.asyncio
async def test_long_text_is_truncated(settings, client):
    service = DocumentService(
        replace(settings, max_text_length=100), TextExtractor(), ClassifierGateway(
            replace(settings, max_text_length=100), client=client
        )
    )

    result = await service.classify_text("a" * 250)

    text = sent_text(client)
    assert len(text) == 100 + len(TRUNCATION_MARKER)
    assert text.endswith(TRUNCATION_MARKER)
    assert result.content_length == 250


@pytest.mark.asyncio
async def test_default_cap_classifies_long_documents(service, client):
    result = await service.classify_text("a" * 60_000)

    text = sent_text(client)
    assert len(text) == 50_000 + len(TRUNCATION_MARKER)
    assert text.endswith(TRUNCATION_MARKER)
    assert result.document_type == "invoice"
    assert result.content_length == 60_000


@pytest.mark.asyncio
async def test_text_at_cap_is_unchanged(settings, client):
    service = DocumentService(
        replace(settings, max_text_length=100), TextExtractor(), ClassifierGateway(
            replace(settings, max_text_length=100), client=client
        )
    )

    await service.classify_text("b" * 100)

    assert sent_text(client) == "b" * 100


@pytest.mark.asyncio
async def test_prose_reply_yields_fallback_result(settings):
    client = make_client("I think this is probably an invoice, but I can't be sure.")
    service = DocumentService(settings, TextExtractor(), ClassifierGateway(settings, client=client))

    result = await service.classify_text("Invoice #123")

    assert result.document_type == "other"
    assert result.department == "general"
    assert result.confidence == 0.3
    assert result.confidence_level == "low"
    assert result.suggested_actions == ["Manual review required", "Check document format and content"]


def test_supported_types(service):
    info = service.supported_types()

    assert [f.mime_type for f in info.supported_formats] == ["application/pdf", "text/plain"]
    assert info.max_file_size == 10 * 1024 * 1024
    assert info.max_file_size_mb == "10.00"
    assert "purchase_order" in info.document_types
    assert info.departments[-1] == "general"
    assert info.confidence_threshold == 0.7
