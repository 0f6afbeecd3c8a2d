"""Error taxonomy for intake operations."""

from __future__ import annotations


class IntakeError(Exception):
    """Base class for errors surfaced to the person doing intake."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationFailure(IntakeError):
    """Input rejected locally; no external call was attempted."""


class ImageValidationError(ValidationFailure):
    """Uploaded file is not an image or is too large."""


class ServiceError(IntakeError):
    """An external call (extraction, OCR) failed."""


class ExtractionError(ServiceError):
    """The extraction service answered with an explicit error."""


class PersistenceError(IntakeError):
    """The report table rejected a write or read."""
