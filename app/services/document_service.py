# app/services/document_service.py
"""
Classification pipeline
=======================
1. Validates the request against the configured size / type policy
2. Extracts text (file uploads only) in a worker thread
3. Truncates oversized text and asks the LLM for a classification
4. Sanitizes the reply and derives the routing recommendation
5. Attaches request metadata

The transient upload is removed on every exit path.
"""
import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path

from app.config import Settings
from app.models.request import FileClassificationRequest
from app.models.response import (
    ClassificationResult,
    ClassifiedDocument,
    SupportedFormat,
    SupportedTypes,
)
from app.services.llm_service import ClassifierGateway
from app.services.result_sanitizer import sanitize
from app.services.text_extractor import TextExtractor
from app.utils.errors import DocumentClassificationError, InternalFailure, InvalidInput
from app.utils.preprocess import truncate_text

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = [
    SupportedFormat(
        type="PDF",
        mime_type="application/pdf",
        extension=".pdf",
        description="Portable Document Format",
    ),
    SupportedFormat(
        type="Text",
        mime_type="text/plain",
        extension=".txt",
        description="Plain Text File",
    ),
]


def cleanup_temp_file(path: Path) -> None:
    try:
        Path(path).unlink()
        logger.info("Cleaned up temporary file: %s", path)
    except OSError as e:
        logger.error("Failed to delete temporary file %s: %s", path, e)


class DocumentService:
    def __init__(self, settings: Settings, extractor: TextExtractor, gateway: ClassifierGateway):
        self.settings = settings
        self.extractor = extractor
        self.gateway = gateway

    def _validate_upload(self, request: FileClassificationRequest) -> None:
        if request.size > self.settings.max_file_size:
            raise InvalidInput(
                f"File size exceeds maximum limit of {self.settings.max_file_size_mb:g}MB"
            )
        if request.content_kind not in self.settings.allowed_file_types:
            raise InvalidInput(
                f"File type {request.content_kind} is not supported. "
                f"Allowed types: {', '.join(self.settings.allowed_file_types)}"
            )

    async def _classify(self, text: str) -> ClassificationResult:
        candidate = await self.gateway.classify(truncate_text(text, self.settings.max_text_length))
        return sanitize(candidate, self.settings)

    async def process_document(self, request: FileClassificationRequest) -> ClassifiedDocument:
        try:
            self._validate_upload(request)

            logger.info("Extracting text from %s (%s)...", request.original_name, request.content_kind)
            extracted = await asyncio.to_thread(
                self.extractor.extract, request.path, request.content_kind
            )
            logger.info("Text extracted (%d characters). Classifying...", extracted.original_length)

            result = await self._classify(extracted.text)
            document = ClassifiedDocument(
                **result.model_dump(),
                file_name=request.original_name,
                file_size=request.size,
                mime_type=request.content_kind,
                uploaded_at=datetime.now(timezone.utc),
            )
        except DocumentClassificationError:
            raise
        except Exception as e:
            logger.exception("Document processing error")
            raise InternalFailure("Failed to process document", e) from e
        finally:
            cleanup_temp_file(request.path)

        logger.info(
            "Document classified as %s with %.1f%% confidence",
            document.document_type, document.confidence * 100,
        )
        return document

    async def classify_text(self, content) -> ClassifiedDocument:
        if not isinstance(content, str) or not content:
            raise InvalidInput("Text content is required")
        if not content.strip():
            raise InvalidInput("Text content cannot be empty")

        logger.info("Classifying text content (%d characters)...", len(content))
        try:
            result = await self._classify(content)
        except DocumentClassificationError:
            raise
        except Exception as e:
            logger.exception("Text classification error")
            raise InternalFailure("Failed to classify text content", e) from e

        document = ClassifiedDocument(
            **result.model_dump(),
            content_length=len(content),
            classified_at=datetime.now(timezone.utc),
        )
        logger.info(
            "Text classified as %s with %.1f%% confidence",
            document.document_type, document.confidence * 100,
        )
        return document

    def supported_types(self) -> SupportedTypes:
        return SupportedTypes(
            supported_formats=SUPPORTED_FORMATS,
            max_file_size=self.settings.max_file_size,
            max_file_size_mb=f"{self.settings.max_file_size_mb:.2f}",
            document_types=list(self.settings.document_types),
            departments=list(self.settings.departments),
            confidence_threshold=self.settings.confidence_threshold,
        )


def build_document_service(settings: Settings) -> DocumentService:
    return DocumentService(settings, TextExtractor(), ClassifierGateway(settings))
