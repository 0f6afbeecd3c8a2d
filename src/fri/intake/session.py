"""Screen sessions: each owns its own state and discards it when dropped.

Every session runs at most one external call at a time. A second trigger
while one is in flight is ignored, and loading flags are always reset when
the call finishes, whether it succeeded or not.
"""

from __future__ import annotations

from typing import Any, Optional

from fri.errors import ImageValidationError, IntakeError, ValidationFailure
from fri.extraction.client import (
    EMPTY_MESSAGE_ERROR,
    EmptyExtraction,
    ExtractionClient,
    ExtractionOutcome,
    MultipleExtraction,
    SingleExtraction,
)
from fri.intake import notices
from fri.intake.notices import Notice
from fri.models import Report, ReportCandidate
from fri.ocr.client import OcrClient, to_data_url, validate_image
from fri.pipeline.merge import HelpCategorySet, build_new_report, build_report_update
from fri.store.reports import ReportStore
from fri.utils.logging import get_logger
from fri.utils.text import append_pasted_text, append_staged_text, normalize_text


logger = get_logger(__name__)

INVALID_SELECTION_ERROR = "กรุณาเลือกรายงานที่ต้องการบันทึก"


class IntakeSession:
    """State of the input screen: staged text, preview image and flags."""

    def __init__(self, extraction_client: ExtractionClient, ocr_client: OcrClient) -> None:
        self.extraction_client = extraction_client
        self.ocr_client = ocr_client
        self.raw_message = ""
        self.preview_image: Optional[str] = None
        self.error = ""
        self.is_processing = False
        self.is_ocr_processing = False
        self.notices: list[Notice] = []

    @property
    def busy(self) -> bool:
        return self.is_processing or self.is_ocr_processing

    @property
    def can_submit(self) -> bool:
        return not self.busy and bool(normalize_text(self.raw_message))

    def type_text(self, text: str) -> None:
        self.raw_message = text
        self.error = ""

    def paste_text(self, text: str) -> None:
        self.raw_message = append_pasted_text(self.raw_message, text)
        self.error = ""

    def clear_preview_image(self) -> None:
        self.preview_image = None

    def upload_image(self, data: bytes, content_type: Optional[str]) -> Optional[str]:
        """OCR an image and append its text to the staged message.

        Returns the appended text, or ``None`` when nothing was added.
        """
        if self.busy:
            logger.info("intake.ocr.ignored_busy")
            return None

        try:
            validate_image(content_type, len(data), max_bytes=self.ocr_client.settings.max_image_bytes)
        except ImageValidationError as exc:
            self.error = exc.message
            return None

        self.error = ""
        self.is_ocr_processing = True
        try:
            image_url = to_data_url(data, content_type or "")
            self.preview_image = image_url
            self.notices.append(notices.OCR_STARTED)

            text = self.ocr_client.read_data_url(image_url)
            if text:
                self.raw_message = append_staged_text(self.raw_message, text)
                self.notices.append(notices.OCR_SUCCEEDED)
            else:
                self.notices.append(notices.OCR_NO_TEXT)
            return text
        except IntakeError as exc:
            logger.error("intake.ocr.failed: %s", exc)
            self.error = notices.OCR_FAILED_MESSAGE
            self.notices.append(notices.OCR_FAILED)
            return None
        finally:
            self.is_ocr_processing = False

    def process(self) -> Optional[ExtractionOutcome]:
        """Extract reports from the staged message.

        Returns the outcome for routing; an empty outcome also sets
        ``error``. Returns ``None`` when the call was skipped or failed.
        """
        if self.busy:
            logger.info("intake.process.ignored_busy")
            return None

        if not normalize_text(self.raw_message):
            self.error = EMPTY_MESSAGE_ERROR
            return None

        self.is_processing = True
        self.error = ""
        try:
            outcome = self.extraction_client.extract(self.raw_message)
            if isinstance(outcome, EmptyExtraction):
                self._fail(notices.NOTHING_EXTRACTED_MESSAGE)
            return outcome
        except IntakeError as exc:
            logger.error("intake.process.failed: %s", exc)
            self._fail(exc.message or notices.PROCESS_FAILED_FALLBACK)
            return None
        finally:
            self.is_processing = False

    def _fail(self, message: str) -> None:
        self.error = message
        self.notices.append(Notice("error", notices.PROCESS_FAILED_TITLE, message))


class _ReportForm:
    """Editable copy of a report plus the comma-separated phone field."""

    form: ReportCandidate
    phone_input: str

    def _load(self, candidate: ReportCandidate) -> None:
        self.form = candidate
        phone = candidate.phone
        if isinstance(phone, str):
            self.phone_input = phone
        else:
            self.phone_input = ", ".join(p for p in phone or [] if p)

    def set_field(self, name: str, value: Any) -> None:
        if name == "phone":
            self.phone_input = value or ""
            return
        if name == "help_categories":
            raise ValueError("use toggle_category to change help categories")
        if name not in ReportCandidate.model_fields:
            raise ValueError(f"unknown report field: {name!r}")
        self.form = self.form.model_copy(update={name: value})

    def toggle_category(self, tag: str, checked: bool) -> None:
        categories = HelpCategorySet(self.form.help_categories)
        categories.toggle(tag, checked)
        self.form = self.form.model_copy(update={"help_categories": categories.to_list()})


class ReviewSession(_ReportForm):
    """Candidate selection and creation of the stored report."""

    def __init__(
        self,
        candidates: list[ReportCandidate],
        raw_message: str,
        store: ReportStore,
    ) -> None:
        if not candidates:
            raise ValidationFailure(notices.NOTHING_EXTRACTED_MESSAGE)
        self.candidates = candidates
        self.raw_message = raw_message
        self.store = store
        self.selected_index: Optional[int] = None
        self.is_saving = False
        self.notices: list[Notice] = []
        self.form = ReportCandidate()
        self.phone_input = ""
        if len(candidates) == 1:
            self.select(0)

    @classmethod
    def from_outcome(
        cls,
        outcome: ExtractionOutcome,
        raw_message: str,
        store: ReportStore,
    ) -> "ReviewSession":
        if isinstance(outcome, SingleExtraction):
            return cls([outcome.candidate], raw_message, store)
        if isinstance(outcome, MultipleExtraction):
            return cls(list(outcome.candidates), raw_message, store)
        raise ValidationFailure(notices.NOTHING_EXTRACTED_MESSAGE)

    @property
    def needs_selection(self) -> bool:
        return self.selected_index is None

    def select(self, index: int) -> ReportCandidate:
        if not 0 <= index < len(self.candidates):
            raise ValidationFailure(INVALID_SELECTION_ERROR)
        self.selected_index = index
        self._load(self.candidates[index])
        return self.form

    def save(self) -> Optional[Report]:
        """Insert the reviewed candidate; returns the stored report."""
        if self.is_saving:
            return None
        if self.needs_selection:
            self.notices.append(Notice("error", notices.SAVE_FAILED_TITLE, INVALID_SELECTION_ERROR))
            return None

        self.is_saving = True
        try:
            new_report = build_new_report(self.form, self.raw_message, phone_input=self.phone_input)
            stored = self.store.insert(new_report)
            self.notices.append(notices.SAVE_SUCCEEDED)
            return stored
        except IntakeError as exc:
            logger.error("review.save.failed: %s", exc)
            self.notices.append(
                Notice("error", notices.SAVE_FAILED_TITLE, exc.message or notices.RETRY_HINT)
            )
            return None
        finally:
            self.is_saving = False


class EditSession(_ReportForm):
    """State of the edit dialog for one stored report."""

    def __init__(self, report: Report, store: ReportStore) -> None:
        self.report = report
        self.store = store
        self.is_saving = False
        self.notices: list[Notice] = []
        self._load(report.to_candidate())

    def reset(self, report: Report) -> None:
        """Reload the form when a different report is opened."""
        self.report = report
        self._load(report.to_candidate())

    def save(self) -> bool:
        """Write the edited fields; the original message is never sent."""
        if self.is_saving:
            return False

        self.is_saving = True
        try:
            fields = build_report_update(self.form, self.phone_input)
            self.report = self.store.update(self.report.id, fields)
            self.notices.append(notices.UPDATE_SUCCEEDED)
            return True
        except IntakeError as exc:
            logger.error("edit.save.failed: %s", exc, extra={"report_id": self.report.id})
            self.notices.append(
                Notice("error", notices.UPDATE_FAILED_TITLE, exc.message or notices.RETRY_HINT)
            )
            return False
        finally:
            self.is_saving = False
