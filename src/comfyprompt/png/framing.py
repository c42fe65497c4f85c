"""Length-prefixed chunk framing for PNG buffers."""

from __future__ import annotations

from dataclasses import dataclass
import struct
from typing import Iterator

from .signature import PNG_SIGNATURE

TERMINAL_CHUNK_TYPE = "IEND"

_HEADER = struct.Struct(">I4s")
_CRC_SIZE = 4


class MalformedChunkError(ValueError):
    """Raised when chunk framing runs past the end of the buffer."""

    def __init__(self, message: str, *, offset: int) -> None:
        super().__init__(f"{message} (offset={offset})")
        self.offset = offset


@dataclass(frozen=True, slots=True)
class Chunk:
    """One framed chunk; CRC bytes are not retained."""

    type: str
    length: int
    payload: bytes


def iter_chunks(buffer: bytes, offset: int = len(PNG_SIGNATURE)) -> Iterator[Chunk]:
    """Yield chunks from ``offset`` until ``IEND`` or the end of the buffer.

    CRC bytes are skipped without verification. A chunk whose trailing CRC is
    cut off is still yielded; only the header and payload must be present.
    """

    view = memoryview(buffer)
    total = len(view)
    cursor = offset

    while cursor < total:
        if cursor + _HEADER.size > total:
            raise MalformedChunkError("Truncated chunk header", offset=cursor)

        length, raw_type = _HEADER.unpack_from(view, cursor)
        payload_start = cursor + _HEADER.size
        payload_end = payload_start + length
        chunk_type = raw_type.decode("latin-1")
        if payload_end > total:
            raise MalformedChunkError(
                f"Chunk {chunk_type!r} declares {length} bytes but only {total - payload_start} remain",
                offset=cursor,
            )

        yield Chunk(type=chunk_type, length=length, payload=bytes(view[payload_start:payload_end]))

        cursor = payload_end + _CRC_SIZE
        if chunk_type == TERMINAL_CHUNK_TYPE:
            break


def read_chunks(buffer: bytes, offset: int = len(PNG_SIGNATURE)) -> list[Chunk]:
    """Frame the whole buffer eagerly so framing errors surface before decoding."""

    return list(iter_chunks(buffer, offset))
