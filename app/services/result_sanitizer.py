# app/services/result_sanitizer.py
"""
Trust boundary between the model reply and the rest of the pipeline.

`sanitize()` accepts either branch of `Candidate` and always returns a valid
`ClassificationResult`: unknown labels are coerced to the catch-all value,
bad scores to 0.5, missing fields to their defaults.
"""
import logging
import math
from collections.abc import Mapping
from typing import Any

from app.config import Settings
from app.models.response import Candidate, ClassificationResult, FallbackCandidate
from app.services.routing_advisor import confidence_level, routing_recommendation

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 0.5
DEFAULT_REASONING = "Classification completed"


def coerce_label(value: Any, allowed, default: str) -> str:
    if not isinstance(value, str):
        return default
    label = value.lower()
    return label if label in allowed else default


def coerce_confidence(value: Any) -> float:
    # bool is an int subclass; a JSON true is not a score
    if isinstance(value, bool):
        return DEFAULT_CONFIDENCE
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_CONFIDENCE
    if not math.isfinite(number) or not 0.0 <= number <= 1.0:
        return DEFAULT_CONFIDENCE
    return number


def _coerce_actions(value: Any) -> list[str]:
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return list(value)
    return []


def sanitize(candidate: Candidate, settings: Settings) -> ClassificationResult:
    if isinstance(candidate, FallbackCandidate):
        logger.info("Sanitizing fallback classification (%s)", candidate.reason)
    payload = candidate.payload if isinstance(candidate.payload, Mapping) else {}

    document_type = coerce_label(payload.get("documentType"), settings.document_types, "other")
    department = coerce_label(payload.get("department"), settings.departments, "general")
    confidence = coerce_confidence(payload.get("confidence"))
    routing_confidence = coerce_confidence(payload.get("routingConfidence"))

    extracted_data = payload.get("extractedData")
    if not isinstance(extracted_data, Mapping):
        extracted_data = {}

    reasoning = payload.get("reasoning")
    if not isinstance(reasoning, str) or not reasoning.strip():
        reasoning = DEFAULT_REASONING

    return ClassificationResult(
        document_type=document_type,
        confidence=confidence,
        department=department,
        routing_confidence=routing_confidence,
        extracted_data=dict(extracted_data),
        reasoning=reasoning,
        suggested_actions=_coerce_actions(payload.get("suggestedActions")),
        confidence_level=confidence_level(confidence, settings.confidence_levels),
        routing_recommendation=routing_recommendation(
            department, routing_confidence, settings.confidence_levels
        ),
    )
