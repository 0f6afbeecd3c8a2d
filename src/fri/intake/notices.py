"""User-facing notices and their Thai wording."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

NoticeLevel = Literal["info", "success", "warning", "error"]


@dataclass(frozen=True)
class Notice:
    level: NoticeLevel
    title: str
    description: str = ""


OCR_STARTED = Notice("info", "กำลังอ่านข้อความจากรูปภาพด้วย AI...", "กระบวนการนี้อาจใช้เวลาสักครู่")
OCR_SUCCEEDED = Notice("success", "อ่านข้อความสำเร็จ", "ข้อความถูกเพิ่มในช่องด้านล่างแล้ว")
OCR_NO_TEXT = Notice(
    "warning", "ไม่พบข้อความในรูปภาพ", "กรุณาลองใช้รูปภาพที่มีข้อความชัดเจนกว่านี้"
)
OCR_FAILED_MESSAGE = "ไม่สามารถอ่านข้อความจากรูปภาพได้"
OCR_FAILED = Notice("error", "เกิดข้อผิดพลาด", OCR_FAILED_MESSAGE)

NOTHING_EXTRACTED_MESSAGE = "ไม่พบข้อมูลที่สามารถแยกได้"
PROCESS_FAILED_TITLE = "ไม่สามารถประมวลผลได้"
PROCESS_FAILED_FALLBACK = "เกิดข้อผิดพลาดในการประมวลผล"

SAVE_SUCCEEDED = Notice("success", "บันทึกข้อมูลสำเร็จ", "รายงานถูกบันทึกในระบบแล้ว")
SAVE_FAILED_TITLE = "ไม่สามารถบันทึกข้อมูลได้"
UPDATE_SUCCEEDED = Notice("success", "แก้ไขข้อมูลสำเร็จ", "ข้อมูลได้รับการอัปเดตแล้ว")
UPDATE_FAILED_TITLE = "ไม่สามารถแก้ไขข้อมูลได้"
RETRY_HINT = "กรุณาลองใหม่อีกครั้ง"
