"""Recover generation prompts embedded in PNG text metadata."""

from comfyprompt.extraction import (
    ExtractionError,
    ExtractionResult,
    FailureCategory,
    PromptExtractor,
    extract_prompt,
)

__all__ = [
    "ExtractionError",
    "ExtractionResult",
    "FailureCategory",
    "PromptExtractor",
    "extract_prompt",
]
