# app/utils/preprocess.py
from app.config import TRUNCATION_MARKER


def truncate_text(text: str, max_length: int, marker: str = TRUNCATION_MARKER) -> str:
    """Cut `text` to `max_length` characters and append `marker` if it was longer."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + marker
