"""Core data models for report intake and storage."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

UNSPECIFIED_NAME = "ไม่ระบุชื่อ"
NAME_PLACEHOLDER = "-"
DEFAULT_STATUS = "pending"

HELP_CATEGORIES: dict[str, str] = {
    "drowning": "จมน้ำ",
    "trapped": "ติดขัง",
    "unreachable": "ติดต่อไม่ได้",
    "water": "ขาดน้ำดื่ม",
    "food": "ขาดอาหาร",
    "electricity": "ขาดไฟฟ้า",
    "shelter": "ต้องการที่พักพิง",
    "medical": "คนเจ็บ/ต้องการรักษา",
    "medicine": "ขาดยา",
    "evacuation": "ต้องการอพยพ",
    "missing": "คนหาย",
    "clothes": "เสื้อผ้า",
    "other": "อื่นๆ",
}

URGENCY_LEVELS: dict[int, str] = {
    1: "ยังไม่โดนน้ำ / แจ้งเตือน",
    2: "ผู้ใหญ่ทั้งหมด น้ำท่วมชั้นล่าง (ไม่มีเด็ก/ผู้สูงอายุ/ทารก/ผู้ป่วย)",
    3: "มีเด็ก หรือผู้สูงอายุ หรือน้ำถึงชั้นสอง",
    4: "เด็กเล็กมาก หรือทารก หรือมีคนไข้/ป่วยติดเตียง หรือคนช่วยตัวเองไม่ได้",
    5: "วิกฤต: น้ำถึงหลังคา/ติดบนหลังคา ทารกในอันตราย คนไข้อาการหนัก มีคนตาย",
}
MIN_URGENCY = min(URGENCY_LEVELS)
MAX_URGENCY = max(URGENCY_LEVELS)

COUNT_FIELDS: tuple[str, ...] = (
    "number_of_adults",
    "number_of_children",
    "number_of_infants",
    "number_of_seniors",
    "number_of_patients",
)


class ReportCandidate(BaseModel):
    """Semi-structured report as produced by extraction or an edit form.

    Numeric fields keep whatever the AI or the form supplied; coercion
    happens in the merge pipeline.
    """

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    lastname: Optional[str] = None
    reporter_name: Optional[str] = None
    address: Optional[str] = None
    phone: Union[list[Optional[str]], str, None] = None
    number_of_adults: Any = None
    number_of_children: Any = None
    number_of_infants: Any = None
    number_of_seniors: Any = None
    number_of_patients: Any = None
    health_condition: Optional[str] = None
    help_needed: Optional[str] = None
    help_categories: Optional[list[str]] = None
    additional_info: Optional[str] = None
    urgency_level: Any = None
    location_lat: Any = None
    location_long: Any = None
    map_link: Optional[str] = None
    status: Optional[str] = None

    @field_validator(
        "name",
        "lastname",
        "reporter_name",
        "address",
        "health_condition",
        "help_needed",
        "additional_info",
        "map_link",
        "status",
        mode="before",
    )
    @classmethod
    def _stringify_scalars(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("phone", mode="before")
    @classmethod
    def _stringify_phones(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, list):
            return [
                str(item) if isinstance(item, (int, float)) and not isinstance(item, bool) else item
                for item in value
            ]
        return value

    @field_validator("help_categories", mode="before")
    @classmethod
    def _listify_categories(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        if isinstance(value, list):
            return [str(item).strip() for item in value if item is not None and str(item).strip()]
        return value


class ReportFields(BaseModel):
    """Fully defaulted report fields, ready to be written."""

    model_config = ConfigDict(extra="ignore")

    name: str = UNSPECIFIED_NAME
    lastname: str = ""
    reporter_name: str = ""
    address: str = ""
    phone: list[str] = Field(default_factory=list)
    number_of_adults: int = Field(default=0, ge=0)
    number_of_children: int = Field(default=0, ge=0)
    number_of_infants: int = Field(default=0, ge=0)
    number_of_seniors: int = Field(default=0, ge=0)
    number_of_patients: int = Field(default=0, ge=0)
    health_condition: str = ""
    help_needed: str = ""
    help_categories: list[str] = Field(default_factory=list)
    additional_info: str = ""
    urgency_level: int = Field(default=MIN_URGENCY, ge=MIN_URGENCY, le=MAX_URGENCY)
    location_lat: Optional[float] = None
    location_long: Optional[float] = None
    map_link: Optional[str] = None
    status: str = DEFAULT_STATUS

    @field_validator("help_categories")
    @classmethod
    def _reject_duplicate_categories(cls, value: list[str]) -> list[str]:
        if len(set(value)) != len(value):
            raise ValueError("help_categories must not contain duplicates")
        return value

    def column_values(self) -> dict[str, Any]:
        """Return the editable columns in declaration order."""
        return {name: getattr(self, name) for name in ReportFields.model_fields}


class NewReport(ReportFields):
    """Report about to be inserted; carries the original message."""

    raw_message: str = ""


class Report(NewReport):
    """Stored report row."""

    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> str:
        return str(value)

    def to_candidate(self) -> ReportCandidate:
        """Seed an edit form from the stored values."""
        return ReportCandidate.model_validate(self.model_dump())
