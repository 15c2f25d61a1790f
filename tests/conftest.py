# tests/conftest.py
import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock

import fitz
import pytest

# Setup sys path
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from app.config import Settings
from app.services.document_service import DocumentService
from app.services.llm_service import ClassifierGateway
from app.services.text_extractor import TextExtractor

INVOICE_REPLY = """{
    "documentType": "invoice",
    "confidence": 0.92,
    "department": "finance",
    "routingConfidence": 0.9,
    "extractedData": {"invoiceNumber": "123", "amount": "$500"},
    "reasoning": "Contains an invoice number and an amount due",
    "suggestedActions": ["Forward to accounts payable"]
}"""


def chat_reply(content):
    """Shape of an OpenAI chat completion as far as the gateway reads it."""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def make_client(reply=INVOICE_REPLY, error=None):
    create = AsyncMock(side_effect=error) if error else AsyncMock(return_value=chat_reply(reply))
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def write_pdf(path: Path, text: str | None) -> Path:
    doc = fitz.open()
    page = doc.new_page()
    if text:
        page.insert_text((72, 72), text)
    doc.save(str(path))
    doc.close()
    return path


@pytest.fixture
def settings(tmp_path):
    return Settings(openai_api_key="test-key", temp_upload_path=str(tmp_path / "uploads"))


@pytest.fixture
def client():
    return make_client()


@pytest.fixture
def service(settings, client):
    return DocumentService(settings, TextExtractor(), ClassifierGateway(settings, client=client))
