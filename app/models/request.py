# app/models/request.py
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class FileClassificationRequest:
    """An upload already written to transient storage by the serving layer."""
    path: Path
    content_kind: str
    original_name: str
    size: int


class TextClassificationRequest(BaseModel):
    content: str = Field(..., description="Raw text to classify")
