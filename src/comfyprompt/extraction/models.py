"""Result and failure types returned by prompt extraction."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FailureCategory(Enum):
    INVALID_SIGNATURE = "invalid_signature"
    NOT_PNG = "not_png"
    MALFORMED_CHUNK = "malformed_chunk"
    NO_METADATA = "no_metadata"
    NO_PROMPT_FOUND = "no_prompt_found"


@dataclass(slots=True)
class ExtractionError(Exception):
    """Categorized, terminal failure for one extraction call."""

    category: FailureCategory
    message: str

    def __str__(self) -> str:
        return f"{self.message} (category={self.category.value})"


@dataclass(frozen=True, slots=True)
class ExtractionResult:
    """Selected prompt plus every keyword's parsed value or raw text."""

    selected_text: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"selected_text": self.selected_text, "metadata": self.metadata}
