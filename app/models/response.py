# app/models/response.py
"""
Pipeline data model.

`ModelCandidate` / `FallbackCandidate` are the two shapes a classification
reply can take before sanitization. `ClassificationResult` is the validated
output; `ClassifiedDocument` adds the request metadata the API returns.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


@dataclass(frozen=True)
class ExtractedText:
    text: str
    original_length: int


@dataclass(frozen=True)
class ModelCandidate:
    """Decoded JSON object from the model reply. Nothing about it is trusted."""
    payload: dict[str, Any]


@dataclass(frozen=True)
class FallbackCandidate:
    """Substituted when the model reply holds no usable JSON object."""
    reason: str
    payload: dict[str, Any] = field(default_factory=lambda: {
        "documentType": "other",
        "confidence": 0.3,
        "department": "general",
        "routingConfidence": 0.3,
        "extractedData": {"note": "AI could not classify this document properly"},
        "reasoning": "Classification failed due to non-JSON response from AI model",
        "suggestedActions": ["Manual review required", "Check document format and content"],
    })


Candidate = Union[ModelCandidate, FallbackCandidate]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class ClassificationResult(_CamelModel):
    document_type: Literal[
        "invoice", "purchase_order", "contract", "receipt", "proposal", "agreement", "other"
    ] = Field(..., description="Detected document type")
    confidence: float = Field(..., ge=0, le=1, description="Classification confidence")
    department: Literal["finance", "procurement", "legal", "operations", "general"] = Field(
        ..., description="Department the document should be routed to"
    )
    routing_confidence: float = Field(..., ge=0, le=1, description="Routing confidence")
    extracted_data: dict[str, Any] = Field(default_factory=dict)
    reasoning: str = Field(..., min_length=1)
    suggested_actions: list[str] = Field(default_factory=list)
    confidence_level: Literal["high", "medium", "low"]
    routing_recommendation: str


class ClassifiedDocument(ClassificationResult):
    # file upload flow
    file_name: str | None = None
    file_size: int | None = None
    mime_type: str | None = None
    uploaded_at: datetime | None = None
    # raw text flow
    content_length: int | None = None
    classified_at: datetime | None = None


class SupportedFormat(_CamelModel):
    type: str
    mime_type: str
    extension: str
    description: str


class SupportedTypes(_CamelModel):
    supported_formats: list[SupportedFormat]
    max_file_size: int
    max_file_size_mb: str
    document_types: list[str]
    departments: list[str]
    confidence_threshold: float


class ApiResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status_code: int = 200
    data: Any = None
    message: str = "Success"
    success: bool = True
