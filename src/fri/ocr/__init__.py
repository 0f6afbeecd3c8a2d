"""OCR of uploaded post screenshots."""

from fri.ocr.client import NO_TEXT_SENTINEL, OcrClient, validate_image

__all__ = ["NO_TEXT_SENTINEL", "OcrClient", "validate_image"]
