"""PNG container primitives: signature, chunk framing and text chunks."""

from .framing import Chunk, MalformedChunkError, iter_chunks, read_chunks
from .signature import PNG_PREFIX, PNG_SIGNATURE, has_png_prefix, has_png_signature
from .text_chunks import TEXT_CHUNK_TYPES, build_text_chunk_map

__all__ = [
    "Chunk",
    "MalformedChunkError",
    "PNG_PREFIX",
    "PNG_SIGNATURE",
    "TEXT_CHUNK_TYPES",
    "build_text_chunk_map",
    "has_png_prefix",
    "has_png_signature",
    "iter_chunks",
    "read_chunks",
]
