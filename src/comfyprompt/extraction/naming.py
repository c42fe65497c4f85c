"""Filename helpers for naming saved prompt files."""

from __future__ import annotations

import re

_EXTENSION_RE = re.compile(r"\.[^/.]+$")

PROMPT_SUFFIX = ".txt"


def base_name(filename: str) -> str:
    """Strip the final extension; names that would become empty are kept whole."""

    stripped = _EXTENSION_RE.sub("", filename)
    return stripped or filename


def prompt_filename(filename: str) -> str:
    return f"{base_name(filename)}{PROMPT_SUFFIX}"
