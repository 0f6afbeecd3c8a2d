"""OCR client with client-side image checks."""

from __future__ import annotations

import base64
import binascii
from typing import Any, Optional, Protocol

from fri.config import Settings
from fri.errors import ImageValidationError, ServiceError
from fri.extraction.functions import EdgeFunctionsClient
from fri.extraction.gemini import GeminiClient, InlineImage, build_gemini_client
from fri.extraction.prompt_loader import load_prompt
from fri.utils.logging import get_logger
from fri.utils.text import normalize_text


logger = get_logger(__name__)

NO_TEXT_SENTINEL = "ไม่พบข้อความในรูปภาพ"
NOT_AN_IMAGE_ERROR = "กรุณาเลือกไฟล์รูปภาพเท่านั้น"
IMAGE_TOO_LARGE_ERROR = "ไฟล์รูปภาพต้องมีขนาดไม่เกิน 10MB"
DEFAULT_MAX_IMAGE_BYTES = 10 * 1024 * 1024


def validate_image(
    content_type: Optional[str],
    size: int,
    max_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
) -> None:
    """Reject non-image uploads and files over the size limit."""
    if not content_type or not content_type.startswith("image/"):
        raise ImageValidationError(NOT_AN_IMAGE_ERROR)
    if size > max_bytes:
        raise ImageValidationError(IMAGE_TOO_LARGE_ERROR)


def to_data_url(data: bytes, content_type: str) -> str:
    """Encode image bytes as a base64 data URL."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


def parse_data_url(url: str) -> InlineImage:
    """Split a base64 data URL into its media type and payload."""
    header, sep, data = url.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise ValueError("expected a base64 data URL")
    mime_type = header[len("data:") : -len(";base64")]
    try:
        base64.b64decode(data, validate=True)
    except binascii.Error as exc:
        raise ValueError("data URL payload is not valid base64") from exc
    return InlineImage(mime_type=mime_type, data=data)


class OcrBackend(Protocol):
    """Anything that turns ``{image}`` into ``{text}``."""

    def read(self, image_data_url: str) -> dict[str, Any]:
        """Return the raw response payload."""


class FunctionsOcrBackend:
    """Delegate OCR to the ``ocr-image`` backend function."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        functions: Optional[EdgeFunctionsClient] = None,
    ) -> None:
        self.settings = settings or Settings()
        self.functions = functions or EdgeFunctionsClient(self.settings)

    def read(self, image_data_url: str) -> dict[str, Any]:
        return self.functions.invoke(self.settings.ocr_function_name, {"image": image_data_url})


class GeminiOcrBackend:
    """Read text from the image with Gemini directly."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[GeminiClient] = None,
    ) -> None:
        self.settings = settings or Settings()
        self._client = client
        self.prompt = load_prompt(kind="ocr", prompt_version=self.settings.ocr_prompt_version)

    @property
    def client(self) -> GeminiClient:
        if self._client is None:
            self._client = build_gemini_client(self.settings)
        return self._client

    def read(self, image_data_url: str) -> dict[str, Any]:
        image = parse_data_url(image_data_url)
        return {"text": self.client.generate_text(self.prompt, image=image)}


def build_backend(settings: Optional[Settings] = None) -> OcrBackend:
    """Return the backend selected by ``EXTRACTION_BACKEND``."""
    settings = settings or Settings()
    if settings.extraction_backend == "gemini":
        return GeminiOcrBackend(settings)
    return FunctionsOcrBackend(settings)


class OcrClient:
    """Validate an image, send it for OCR and clean the returned text."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        backend: Optional[OcrBackend] = None,
    ) -> None:
        self.settings = settings or Settings()
        self.backend = backend or build_backend(self.settings)

    def read_image(self, data: bytes, content_type: Optional[str]) -> Optional[str]:
        """Return normalized text, or ``None`` when the image has no legible text."""
        validate_image(content_type, len(data), max_bytes=self.settings.max_image_bytes)
        return self.read_data_url(to_data_url(data, content_type or ""))

    def read_data_url(self, image_data_url: str) -> Optional[str]:
        logger.info("ocr.start", extra={"chars": len(image_data_url)})
        payload = self.backend.read(image_data_url)
        if payload.get("error"):
            raise ServiceError(str(payload["error"]))

        text = payload.get("text")
        if text is not None and not isinstance(text, str):
            raise ServiceError("OCR response 'text' is not a string")

        extracted = (text or "").strip()
        if not extracted or extracted == NO_TEXT_SENTINEL:
            logger.info("ocr.no_text")
            return None

        cleaned = normalize_text(extracted)
        logger.info("ocr.complete", extra={"chars": len(cleaned)})
        return cleaned or None
