"""Report normalization and merge pipeline."""

from fri.pipeline.merge import (
    HelpCategorySet,
    build_new_report,
    build_report_fields,
    build_report_update,
)

__all__ = [
    "HelpCategorySet",
    "build_new_report",
    "build_report_fields",
    "build_report_update",
]
