"""Structured output schemas for the extraction model."""

from __future__ import annotations

from pydantic import BaseModel, Field

from fri.models import ReportCandidate


class ExtractionOutput(BaseModel):
    """Structured output of the extraction prompt."""

    reports: list[ReportCandidate] = Field(default_factory=list)
