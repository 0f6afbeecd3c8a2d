"""Flood report intake: OCR, AI extraction and report merge pipeline."""

__version__ = "0.1.0"
