"""Report extraction from free text."""

from fri.extraction.client import (
    EmptyExtraction,
    ExtractionClient,
    ExtractionOutcome,
    MultipleExtraction,
    SingleExtraction,
    classify_candidates,
)

__all__ = [
    "EmptyExtraction",
    "ExtractionClient",
    "ExtractionOutcome",
    "MultipleExtraction",
    "SingleExtraction",
    "classify_candidates",
]
