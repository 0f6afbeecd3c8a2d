"""Report persistence."""

from fri.store.reports import ReportStore

__all__ = ["ReportStore"]
