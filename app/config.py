# app/config.py
"""
Process configuration.

Values come from the environment (or a local `.env`), are read once at
startup by `load_settings()` and handed to every service as an immutable
`Settings` value.
"""
import math
import os
from dataclasses import dataclass, field
from types import MappingProxyType

from dotenv import load_dotenv

from app.utils.errors import ConfigurationError

# --- Fixed enumerations ---
DOCUMENT_TYPES = {
    "INVOICE": "invoice",
    "PURCHASE_ORDER": "purchase_order",
    "CONTRACT": "contract",
    "RECEIPT": "receipt",
    "PROPOSAL": "proposal",
    "AGREEMENT": "agreement",
    "OTHER": "other",
}

DEPARTMENTS = {
    "FINANCE": "finance",
    "PROCUREMENT": "procurement",
    "LEGAL": "legal",
    "OPERATIONS": "operations",
    "GENERAL": "general",
}

CONFIDENCE_LEVELS = MappingProxyType({
    "HIGH": 0.8,
    "MEDIUM": 0.6,
    "LOW": 0.4,
})

SUPPORTED_EXTENSIONS = (".pdf", ".txt")
TRUNCATION_MARKER = "\n...(truncated)"

MB = 1024 * 1024


@dataclass(frozen=True)
class Settings:
    openai_api_key: str | None = None
    openai_base_url: str | None = None
    classification_model: str = "gpt-4o-mini"
    llm_timeout: float = 60.0

    max_file_size: int = 10 * MB
    allowed_file_types: tuple[str, ...] = ("application/pdf", "text/plain")
    supported_extensions: tuple[str, ...] = SUPPORTED_EXTENSIONS
    temp_upload_path: str = "./public/temp"

    confidence_threshold: float = 0.7
    max_concurrent_requests: int = 10
    max_text_length: int = 50_000

    document_types: tuple[str, ...] = tuple(DOCUMENT_TYPES.values())
    departments: tuple[str, ...] = tuple(DEPARTMENTS.values())
    confidence_levels: MappingProxyType = field(default_factory=lambda: CONFIDENCE_LEVELS)

    log_level: str = "INFO"

    def __post_init__(self):
        for name in (
            "llm_timeout",
            "max_file_size",
            "max_concurrent_requests",
            "max_text_length",
            "confidence_threshold",
        ):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ConfigurationError(f"{name.upper()} must be positive, got {value!r}")
        if not isinstance(self.confidence_levels, MappingProxyType):
            object.__setattr__(self, "confidence_levels", MappingProxyType(dict(self.confidence_levels)))

    @property
    def max_file_size_mb(self) -> float:
        return self.max_file_size / MB


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}", e) from e


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if not raw:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def load_settings() -> Settings:
    """Build `Settings` from the environment, reading `.env` first if present."""
    load_dotenv()

    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        openai_base_url=os.getenv("OPENAI_BASE_URL") or None,
        classification_model=os.getenv("CLASSIFICATION_MODEL", "gpt-4o-mini"),
        llm_timeout=_env_number("LLM_TIMEOUT", 60.0, float),
        max_file_size=_env_number("MAX_FILE_SIZE", 10 * MB, int),
        allowed_file_types=_env_list("ALLOWED_FILE_TYPES", ("application/pdf", "text/plain")),
        temp_upload_path=os.getenv("TEMP_UPLOAD_PATH", "./public/temp"),
        confidence_threshold=_env_number("CONFIDENCE_THRESHOLD", 0.7, float),
        max_concurrent_requests=_env_number("MAX_CONCURRENT_REQUESTS", 10, int),
        max_text_length=_env_number("MAX_TEXT_LENGTH", 50_000, int),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
