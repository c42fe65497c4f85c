"""Async per-file extraction: read bytes off-loop, extract, optionally save."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Any, Callable

from comfyprompt.extraction.extractor import PromptExtractor
from comfyprompt.extraction.models import ExtractionError
from comfyprompt.extraction.naming import base_name, prompt_filename


LOGGER = logging.getLogger(__name__)

ExtractedCallback = Callable[[str, str, dict[str, Any]], None]
ErrorCallback = Callable[[str], None]


@dataclass(frozen=True, slots=True)
class ExtractionPipelineResult:
    success: bool
    source_path: str
    base_name: str
    prompt: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    output_path: str | None = None
    stage: str = "unknown"
    category: str | None = None
    error: str | None = None


def prompt_path(source: Path, output_dir: Path | None = None) -> Path:
    """Where the prompt file for ``source`` is written."""

    target_dir = output_dir if output_dir is not None else source.parent
    return target_dir / prompt_filename(source.name)


def _save_prompt(prompt: str, source: Path, output_dir: Path | None) -> Path:
    target = prompt_path(source, output_dir)
    # JSON escapes can leave lone surrogates in the prompt; encode before touching the file.
    encoded = prompt.encode("utf-8", errors="replace")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(encoded)
    return target


async def run_extraction_pipeline(
    file_path: Path,
    *,
    output_dir: Path | None = None,
    save_prompt: bool = True,
    extractor: PromptExtractor | None = None,
    on_extracted: ExtractedCallback | None = None,
    on_error: ErrorCallback | None = None,
) -> ExtractionPipelineResult:
    source = Path(file_path)
    stem = base_name(source.name)
    active_extractor = extractor or PromptExtractor()

    def _fail(stage: str, message: str, category: str | None = None) -> ExtractionPipelineResult:
        LOGGER.warning("Extraction failed for %s at %s: %s", source, stage, message)
        if on_error is not None:
            on_error(message)
        return ExtractionPipelineResult(
            success=False,
            source_path=str(source),
            base_name=stem,
            stage=stage,
            category=category,
            error=message,
        )

    try:
        buffer = await asyncio.to_thread(source.read_bytes)
    except OSError as exc:
        return _fail("read", f"Failed to read source file: {exc}")

    try:
        result = active_extractor.extract(buffer)
    except ExtractionError as exc:
        return _fail("extract", exc.message, exc.category.value)

    output_path: str | None = None
    if save_prompt:
        try:
            saved = await asyncio.to_thread(_save_prompt, result.selected_text, source, output_dir)
        except (OSError, UnicodeError) as exc:
            return _fail("save", f"Failed to write prompt file: {exc}")
        output_path = str(saved)
        LOGGER.info("Saved prompt for %s to %s", source.name, saved)

    if on_extracted is not None:
        on_extracted(result.selected_text, stem, result.metadata)

    return ExtractionPipelineResult(
        success=True,
        source_path=str(source),
        base_name=stem,
        prompt=result.selected_text,
        metadata=result.metadata,
        output_path=output_path,
        stage="done",
    )
