"""Extraction client and cardinality routing."""

from __future__ import annotations

from typing import Any, Literal, Optional, Protocol, Union

from pydantic import BaseModel, Field, ValidationError

from fri.config import Settings
from fri.errors import ExtractionError, ServiceError, ValidationFailure
from fri.extraction.functions import EdgeFunctionsClient
from fri.extraction.gemini import GeminiClient, build_gemini_client
from fri.extraction.prompt_loader import load_prompt
from fri.extraction.schemas import ExtractionOutput
from fri.models import ReportCandidate
from fri.utils.hashing import hash_text
from fri.utils.logging import get_logger
from fri.utils.phone import format_phone_list
from fri.utils.text import normalize_text


logger = get_logger(__name__)

EMPTY_MESSAGE_ERROR = "กรุณาวางข้อความที่ต้องการประมวลผล"


class EmptyExtraction(BaseModel):
    """Nothing extractable was found in the message."""

    kind: Literal["empty"] = "empty"


class SingleExtraction(BaseModel):
    """Exactly one report; goes straight to review."""

    kind: Literal["single"] = "single"
    candidate: ReportCandidate


class MultipleExtraction(BaseModel):
    """Several reports; one must be selected before review."""

    kind: Literal["multiple"] = "multiple"
    candidates: list[ReportCandidate] = Field(min_length=2)


ExtractionOutcome = Union[EmptyExtraction, SingleExtraction, MultipleExtraction]


class ExtractionBackend(Protocol):
    """Anything that turns ``{rawMessage}`` into ``{reports}`` or ``{error}``."""

    def extract(self, raw_message: str) -> dict[str, Any]:
        """Return the raw response payload."""


class FunctionsExtractionBackend:
    """Delegate extraction to the ``extract-report`` backend function."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        functions: Optional[EdgeFunctionsClient] = None,
    ) -> None:
        self.settings = settings or Settings()
        self.functions = functions or EdgeFunctionsClient(self.settings)

    def extract(self, raw_message: str) -> dict[str, Any]:
        return self.functions.invoke(
            self.settings.extract_function_name, {"rawMessage": raw_message}
        )


class GeminiExtractionBackend:
    """Run the extraction prompt against Gemini directly."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[GeminiClient] = None,
    ) -> None:
        self.settings = settings or Settings()
        self._client = client
        self.prompt = load_prompt(kind="extract", prompt_version=self.settings.extract_prompt_version)

    @property
    def client(self) -> GeminiClient:
        if self._client is None:
            self._client = build_gemini_client(self.settings)
        return self._client

    def extract(self, raw_message: str) -> dict[str, Any]:
        full_prompt = f"{self.prompt}\n\nINPUT:\n{raw_message}\n"
        output, latency_ms, attempts, error = self.client.generate_structured(
            full_prompt, ExtractionOutput
        )
        if output is None:
            logger.warning(
                "extract.gemini.failed",
                extra={"attempts": attempts, "latency_ms": latency_ms, "error": error},
            )
            raise ServiceError(error or "Gemini extraction failed")
        return output.model_dump()


def build_backend(settings: Optional[Settings] = None) -> ExtractionBackend:
    """Return the backend selected by ``EXTRACTION_BACKEND``."""
    settings = settings or Settings()
    if settings.extraction_backend == "gemini":
        return GeminiExtractionBackend(settings)
    return FunctionsExtractionBackend(settings)


def classify_candidates(candidates: list[ReportCandidate]) -> ExtractionOutcome:
    """Map a candidate list onto the empty/single/multiple outcome."""
    if not candidates:
        return EmptyExtraction()
    if len(candidates) == 1:
        return SingleExtraction(candidate=candidates[0])
    return MultipleExtraction(candidates=candidates)


def _with_formatted_phones(candidate: ReportCandidate) -> ReportCandidate:
    phone = candidate.phone
    if isinstance(phone, str):
        phone = [phone]
    return candidate.model_copy(update={"phone": format_phone_list(phone)})


def parse_extraction_response(payload: dict[str, Any]) -> list[ReportCandidate]:
    """Validate a ``{reports}`` / ``{error}`` response into candidates."""
    if payload.get("error"):
        raise ExtractionError(str(payload["error"]))

    reports = payload.get("reports") or []
    if not isinstance(reports, list):
        raise ServiceError("extraction response 'reports' is not a list")

    candidates: list[ReportCandidate] = []
    for item in reports:
        try:
            candidate = ReportCandidate.model_validate(item)
        except ValidationError as exc:
            raise ServiceError(f"invalid report candidate: {exc}") from exc
        candidates.append(_with_formatted_phones(candidate))
    return candidates


class ExtractionClient:
    """Send a normalized message for extraction and classify the result."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        backend: Optional[ExtractionBackend] = None,
    ) -> None:
        self.settings = settings or Settings()
        self.backend = backend or build_backend(self.settings)

    def extract(self, raw_message: str) -> ExtractionOutcome:
        message = normalize_text(raw_message)
        if not message:
            raise ValidationFailure(EMPTY_MESSAGE_ERROR)

        input_hash = hash_text(message)
        logger.info("extract.start", extra={"input_hash": input_hash, "chars": len(message)})

        payload = self.backend.extract(message)
        candidates = parse_extraction_response(payload)
        outcome = classify_candidates(candidates)

        logger.info(
            "extract.complete",
            extra={"input_hash": input_hash, "outcome": outcome.kind, "count": len(candidates)},
        )
        return outcome
