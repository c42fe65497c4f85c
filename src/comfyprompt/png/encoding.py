"""Chunk builders, the inverse of the framing and text decoders."""

from __future__ import annotations

import struct
from typing import Iterable
import zlib

from .framing import TERMINAL_CHUNK_TYPE
from .signature import PNG_SIGNATURE
from .text_chunks import INTERNATIONAL_TEXT_CHUNK_TYPE, TEXT_CHUNK_TYPE


def encode_text_payload(keyword: str, text: str) -> bytes:
    """Build a ``tEXt`` payload: Latin-1 keyword, NUL, UTF-8 text."""

    return keyword.encode("latin-1") + b"\x00" + text.encode("utf-8")


def encode_international_text_payload(
    keyword: str,
    text: str,
    *,
    language_tag: str = "",
    translated_keyword: str = "",
    compressed: bool = False,
) -> bytes:
    """Build an ``iTXt`` payload.

    ``compressed`` only sets the flag byte; the text is never deflated.
    """

    return (
        keyword.encode("latin-1")
        + b"\x00"
        + bytes([1 if compressed else 0, 0])
        + language_tag.encode("ascii")
        + b"\x00"
        + translated_keyword.encode("utf-8")
        + b"\x00"
        + text.encode("utf-8")
    )


def pack_chunk(chunk_type: str, payload: bytes) -> bytes:
    """Frame a payload as length + type + payload + CRC-32."""

    raw_type = chunk_type.encode("latin-1")
    if len(raw_type) != 4:
        raise ValueError(f"Chunk type must be exactly 4 bytes: {chunk_type!r}")
    crc = zlib.crc32(raw_type + payload) & 0xFFFFFFFF
    return struct.pack(">I", len(payload)) + raw_type + payload + struct.pack(">I", crc)


def text_chunk(keyword: str, text: str) -> bytes:
    return pack_chunk(TEXT_CHUNK_TYPE, encode_text_payload(keyword, text))


def international_text_chunk(
    keyword: str,
    text: str,
    *,
    language_tag: str = "",
    translated_keyword: str = "",
    compressed: bool = False,
) -> bytes:
    payload = encode_international_text_payload(
        keyword,
        text,
        language_tag=language_tag,
        translated_keyword=translated_keyword,
        compressed=compressed,
    )
    return pack_chunk(INTERNATIONAL_TEXT_CHUNK_TYPE, payload)


def build_png(chunks: Iterable[bytes]) -> bytes:
    """Concatenate the signature and packed chunks, appending ``IEND`` if absent."""

    body = b"".join(chunks)
    terminal = pack_chunk(TERMINAL_CHUNK_TYPE, b"")
    if not body.endswith(terminal):
        body += terminal
    return PNG_SIGNATURE + body
