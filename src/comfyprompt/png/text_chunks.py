"""Decoding of ``tEXt`` and ``iTXt`` chunks into a keyword map.

Both decoders return ``None`` for a payload they cannot split instead of
raising; :func:`build_text_chunk_map` drops those chunks and keeps going.

Compressed ``iTXt`` payloads are not inflated; their bytes are decoded as
UTF-8 like any other text.
"""

from __future__ import annotations

import logging
from typing import Iterable

from .framing import Chunk

logger = logging.getLogger(__name__)

TEXT_CHUNK_TYPE = "tEXt"
INTERNATIONAL_TEXT_CHUNK_TYPE = "iTXt"
TEXT_CHUNK_TYPES = (TEXT_CHUNK_TYPE, INTERNATIONAL_TEXT_CHUNK_TYPE)

_SEPARATOR = 0
_KEYWORD_ENCODING = "latin-1"


def _decode_text(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


def decode_text_payload(payload: bytes) -> tuple[str, str] | None:
    """Split a ``tEXt`` payload into ``(keyword, text)``."""

    separator = payload.find(_SEPARATOR)
    if separator == -1:
        return None
    keyword = payload[:separator].decode(_KEYWORD_ENCODING)
    return keyword, _decode_text(payload[separator + 1 :])


def decode_international_text_payload(payload: bytes) -> tuple[str, str] | None:
    """Split an ``iTXt`` payload into ``(keyword, text)``.

    Layout: keyword, NUL, compression flag, compression method, language tag,
    NUL, translated keyword, NUL, text.
    """

    keyword_end = payload.find(_SEPARATOR)
    if keyword_end == -1:
        return None
    keyword = payload[:keyword_end].decode(_KEYWORD_ENCODING)

    flags_start = keyword_end + 1
    if flags_start + 2 > len(payload):
        return None
    if payload[flags_start]:
        logger.debug("iTXt chunk %r is flagged compressed; decoding bytes as-is", keyword)
    cursor = flags_start + 2

    language_end = payload.find(_SEPARATOR, cursor)
    if language_end == -1:
        return None
    cursor = language_end + 1

    translated_end = payload.find(_SEPARATOR, cursor)
    if translated_end == -1:
        return None

    return keyword, _decode_text(payload[translated_end + 1 :])


_DECODERS = {
    TEXT_CHUNK_TYPE: decode_text_payload,
    INTERNATIONAL_TEXT_CHUNK_TYPE: decode_international_text_payload,
}


def build_text_chunk_map(chunks: Iterable[Chunk]) -> dict[str, str]:
    """Decode every text-bearing chunk into a keyword -> text mapping.

    A repeated keyword replaces the earlier value but keeps its position.
    """

    text_map: dict[str, str] = {}
    for chunk in chunks:
        decoder = _DECODERS.get(chunk.type)
        if decoder is None:
            continue
        decoded = decoder(chunk.payload)
        if decoded is None:
            logger.debug("Skipping %s chunk without field separators (%d bytes)", chunk.type, chunk.length)
            continue
        keyword, text = decoded
        text_map[keyword] = text
    return text_map


def count_text_chunks(chunks: Iterable[Chunk]) -> int:
    """Number of chunks whose type is text-bearing, decodable or not."""

    return sum(1 for chunk in chunks if chunk.type in _DECODERS)
