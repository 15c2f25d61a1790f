# app/routers/classification.py
"""
Classification router
=====================
POST /api/documents/upload
    1. Validates the upload (present, supported extension, non-empty)
    2. Writes it to transient storage
    3. Hands it to `DocumentService.process_document()`, which cleans it up
POST /api/documents/classify-text
GET  /api/documents/supported-types
GET  /api/documents/health
"""
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.responses import JSONResponse

from app.models.request import FileClassificationRequest, TextClassificationRequest
from app.models.response import ApiResponse
from app.services.document_service import DocumentService
from app.utils.errors import InvalidInput

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/documents", tags=["documents"])


def get_document_service(request: Request) -> DocumentService:
    return request.app.state.document_service


def _store_upload(data: bytes, original_name: str, temp_dir: str) -> Path:
    directory = Path(temp_dir)
    directory.mkdir(parents=True, exist_ok=True)
    name = Path(original_name)
    path = directory / f"{name.stem}-{uuid.uuid4().hex}{name.suffix.lower()}"
    path.write_bytes(data)
    return path


@router.post("/upload", response_model=ApiResponse, response_model_exclude_none=True)
async def upload_and_classify_document(
    document: UploadFile | None = File(None),
    service: DocumentService = Depends(get_document_service),
):
    if document is None or not document.filename:
        raise InvalidInput("Please upload a document file")

    extension = Path(document.filename).suffix.lower()
    if extension not in service.settings.supported_extensions:
        raise InvalidInput(
            f"File extension '{extension}' is not supported. "
            f"Allowed extensions: {', '.join(service.settings.supported_extensions)}"
        )

    data = await document.read()
    if not data:
        raise InvalidInput("Uploaded file is empty")

    logger.info("Processing uploaded file: %s", document.filename)
    path = _store_upload(data, document.filename, service.settings.temp_upload_path)
    result = await service.process_document(
        FileClassificationRequest(
            path=path,
            content_kind=document.content_type or "",
            original_name=document.filename,
            size=len(data),
        )
    )
    return ApiResponse(data=result, message="Document uploaded and classified successfully")


@router.post("/classify-text", response_model=ApiResponse, response_model_exclude_none=True)
async def classify_text_content(
    body: TextClassificationRequest,
    service: DocumentService = Depends(get_document_service),
):
    result = await service.classify_text(body.content)
    return ApiResponse(data=result, message="Text content classified successfully")


@router.get("/supported-types", response_model=ApiResponse)
async def get_supported_file_types(service: DocumentService = Depends(get_document_service)):
    return ApiResponse(
        data=service.supported_types(),
        message="Supported file types retrieved successfully",
    )


@router.get("/health")
async def check_ai_service_health(service: DocumentService = Depends(get_document_service)):
    healthy = await service.gateway.check_connection()
    if not healthy:
        return JSONResponse(
            status_code=503,
            content=ApiResponse(
                status_code=503,
                data={"healthy": False, "service": "LLM"},
                message="AI service is not responding",
                success=False,
            ).model_dump(by_alias=True),
        )
    return ApiResponse(
        data={
            "healthy": True,
            "service": "LLM",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        message="AI service is healthy",
    )
