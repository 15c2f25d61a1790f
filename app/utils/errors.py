# app/utils/errors.py
"""
Error taxonomy of the classification pipeline.

Every error carries a machine-readable `kind`, the pipeline `stage` it came
from and the HTTP status the serving layer answers with. The caller-facing
message never contains raw third-party exception text; the underlying
exception is kept on `original_error` for logging.
"""


class DocumentClassificationError(Exception):
    """Base exception for pipeline errors."""

    kind = "internal_failure"
    stage = "pipeline"
    status_code = 500

    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class InvalidInput(DocumentClassificationError):
    """Missing, empty, oversized or wrong-kind input."""
    kind = "invalid_input"
    stage = "validation"
    status_code = 400


class UnsupportedFormat(InvalidInput):
    """Content kind is not one the extractor understands."""
    kind = "unsupported_format"
    stage = "extraction"


class SourceUnavailable(DocumentClassificationError):
    """The uploaded bytes cannot be read."""
    kind = "source_unavailable"
    stage = "extraction"
    status_code = 404


class EmptyContent(DocumentClassificationError):
    """Extraction produced nothing but whitespace."""
    kind = "empty_content"
    stage = "extraction"
    status_code = 400


class ExtractionFailure(DocumentClassificationError):
    """Format-specific decode error, e.g. a corrupt PDF."""
    kind = "extraction_failure"
    stage = "extraction"
    status_code = 422


class ClassificationUnavailable(DocumentClassificationError):
    """The external model could not be reached or refused the call."""
    kind = "classification_unavailable"
    stage = "classification"
    status_code = 503


class InternalFailure(DocumentClassificationError):
    """Anything unanticipated."""
    pass


class ConfigurationError(DocumentClassificationError):
    """Raised when configuration is invalid or missing."""
    kind = "configuration_error"
    stage = "startup"
