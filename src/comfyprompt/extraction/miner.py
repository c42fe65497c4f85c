"""Candidate mining over decoded text chunks.

Each value is parsed as JSON when possible and every string leaf becomes a
candidate; values that do not parse are kept raw and count as one candidate.
The default selector picks the longest candidate, which for node-graph image
tools is usually the positive prompt. Pass another ``selector`` to
:func:`mine_metadata` for a different policy.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
from typing import Any, Callable, Iterable, Iterator, Mapping

CandidateSelector = Callable[[Iterable[str]], str]

_UNPARSED = object()


@dataclass(frozen=True, slots=True)
class MinedMetadata:
    selected_text: str
    metadata: dict[str, Any]


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


def parse_structured(text: str) -> Any:
    """Parse strict JSON, returning a sentinel object when the text is not JSON."""

    try:
        return json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return _UNPARSED


def iter_string_leaves(value: Any) -> Iterator[str]:
    """Yield string leaves in depth-first pre-order.

    Mappings are walked in insertion order, sequences in index order. Numbers,
    booleans and ``None`` are not candidates.
    """

    stack = [value]
    while stack:
        node = stack.pop()
        if isinstance(node, str):
            yield node
        elif isinstance(node, Mapping):
            stack.extend(reversed(list(node.values())))
        elif isinstance(node, (list, tuple)):
            stack.extend(reversed(node))


def longest_string(candidates: Iterable[str]) -> str:
    """Longest candidate by character count; the first one wins ties."""

    best = ""
    for candidate in candidates:
        if len(candidate) > len(best):
            best = candidate
    return best


def mine_metadata(text_chunks: Mapping[str, str], *, selector: CandidateSelector = longest_string) -> MinedMetadata:
    """Parse every chunk value and select one candidate across all keywords."""

    metadata: dict[str, Any] = {}
    candidates: list[str] = []
    for keyword, text in text_chunks.items():
        parsed = parse_structured(text)
        if parsed is _UNPARSED:
            metadata[keyword] = text
            candidates.append(text)
            continue
        metadata[keyword] = parsed
        candidates.extend(iter_string_leaves(parsed))

    return MinedMetadata(selected_text=selector(candidates), metadata=metadata)
