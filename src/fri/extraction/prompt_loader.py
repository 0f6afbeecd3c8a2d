"""Prompt loading utilities."""

from __future__ import annotations

from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[3]

PROMPT_KINDS: dict[str, str] = {
    "extract": "ex_",
    "ocr": "ocr_",
}


def prompt_path(kind: str, prompt_version: str) -> Path:
    """Resolve a prompt file path from a prompt_version like 'ex_v001'."""
    prefix = PROMPT_KINDS.get(kind)
    if prefix is None:
        raise ValueError(f"kind must be one of {sorted(PROMPT_KINDS)}")

    if not prompt_version.startswith(prefix):
        raise ValueError(f"prompt_version must start with {prefix!r}")

    file_stub = prompt_version.removeprefix(prefix)
    return PROJECT_ROOT / "prompts" / kind / f"{file_stub}.md"


def load_prompt(kind: str, prompt_version: str) -> str:
    """Load a prompt file as UTF-8 text."""
    path = prompt_path(kind=kind, prompt_version=prompt_version)
    if not path.exists():
        raise FileNotFoundError(f"Prompt file not found: {path}")
    return path.read_text(encoding="utf-8").strip()
