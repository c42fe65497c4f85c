"""Prompt extraction pipeline interfaces."""

from .extractor import PromptExtractor, extract_prompt
from .miner import MinedMetadata, iter_string_leaves, longest_string, mine_metadata
from .models import ExtractionError, ExtractionResult, FailureCategory

__all__ = [
    "ExtractionError",
    "ExtractionResult",
    "FailureCategory",
    "MinedMetadata",
    "PromptExtractor",
    "extract_prompt",
    "iter_string_leaves",
    "longest_string",
    "mine_metadata",
]
