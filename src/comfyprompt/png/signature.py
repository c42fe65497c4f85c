"""PNG magic-number checks."""

from __future__ import annotations

PNG_SIGNATURE = bytes([137, 80, 78, 71, 13, 10, 26, 10])
PNG_PREFIX = PNG_SIGNATURE[:4]


def has_png_signature(buffer: bytes) -> bool:
    """Return True when the buffer starts with the full 8-byte PNG signature."""

    return bytes(buffer[: len(PNG_SIGNATURE)]) == PNG_SIGNATURE


def has_png_prefix(buffer: bytes) -> bool:
    """Return True when the leading bytes do not rule out a PNG file.

    Buffers shorter than the prefix count as consistent when every byte they
    have matches, so truncated PNGs are reported as bad signatures rather than
    as some other format.
    """

    return PNG_PREFIX.startswith(bytes(buffer[: len(PNG_PREFIX)]))
