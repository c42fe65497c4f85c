"""Orchestrates signature checks, framing, decoding and mining for one buffer."""

from __future__ import annotations

import logging

from comfyprompt.extraction.miner import CandidateSelector, longest_string, mine_metadata
from comfyprompt.extraction.models import ExtractionError, ExtractionResult, FailureCategory
from comfyprompt.png.framing import MalformedChunkError, read_chunks
from comfyprompt.png.signature import has_png_prefix, has_png_signature
from comfyprompt.png.text_chunks import build_text_chunk_map, count_text_chunks

logger = logging.getLogger(__name__)


class PromptExtractor:
    """Stateless extractor; one instance can serve any number of buffers."""

    def __init__(self, *, selector: CandidateSelector = longest_string) -> None:
        self._selector = selector

    def extract(self, buffer: bytes) -> ExtractionResult:
        if not has_png_prefix(buffer):
            raise ExtractionError(
                FailureCategory.NOT_PNG,
                "File is not a PNG. Generation metadata is only embedded in PNG files; "
                "this appears to be a JPEG or other format.",
            )
        if not has_png_signature(buffer):
            raise ExtractionError(FailureCategory.INVALID_SIGNATURE, "Not a valid PNG file")

        try:
            chunks = read_chunks(buffer)
        except MalformedChunkError as exc:
            raise ExtractionError(FailureCategory.MALFORMED_CHUNK, f"Malformed PNG chunk: {exc}") from exc

        text_chunks = build_text_chunk_map(chunks)
        if not text_chunks:
            text_chunk_count = count_text_chunks(chunks)
            if text_chunk_count:
                raise ExtractionError(
                    FailureCategory.MALFORMED_CHUNK,
                    f"None of the {text_chunk_count} text chunks could be decoded",
                )
            raise ExtractionError(
                FailureCategory.NO_METADATA,
                "No metadata found in PNG. This image may not have been generated by a "
                "node-based pipeline or the metadata was stripped.",
            )

        mined = mine_metadata(text_chunks, selector=self._selector)
        if not mined.selected_text:
            raise ExtractionError(FailureCategory.NO_PROMPT_FOUND, "No text prompts found in metadata.")

        logger.debug(
            "Selected %d-character prompt from %d metadata keys", len(mined.selected_text), len(mined.metadata)
        )
        return ExtractionResult(selected_text=mined.selected_text, metadata=mined.metadata)


_DEFAULT_EXTRACTOR = PromptExtractor()


def extract_prompt(buffer: bytes) -> ExtractionResult:
    """Extract the longest-string prompt from a PNG buffer or raise ``ExtractionError``."""

    return _DEFAULT_EXTRACTOR.extract(buffer)
