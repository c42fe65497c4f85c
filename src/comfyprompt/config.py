"""Runtime configuration for the extraction CLIs and folder watcher."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import Mapping


DEFAULT_DEBOUNCE_SECONDS = 2.0
DEFAULT_LOG_LEVEL = "INFO"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(*, name: str, raw_value: str) -> bool:
    value = raw_value.casefold()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be one of: {', '.join(sorted(_TRUE_VALUES | _FALSE_VALUES))}")


def _parse_positive_float(*, name: str, raw_value: str, minimum: float = 0.0) -> float:
    try:
        value = float(raw_value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number") from exc
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


@dataclass(frozen=True, slots=True)
class ExtractorSettings:
    """Validated settings; CLI flags take precedence over these values."""

    output_dir: Path | None = None
    save_prompts: bool = True
    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ExtractorSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        output_dir_raw = source.get("COMFYPROMPT_OUTPUT_DIR", "").strip()
        save_raw = source.get("COMFYPROMPT_SAVE_PROMPTS", "true").strip()
        debounce_raw = source.get("COMFYPROMPT_DEBOUNCE_SECONDS", str(DEFAULT_DEBOUNCE_SECONDS)).strip()
        log_level = source.get("COMFYPROMPT_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()

        if not save_raw:
            raise ValueError("COMFYPROMPT_SAVE_PROMPTS cannot be empty")
        if not debounce_raw:
            raise ValueError("COMFYPROMPT_DEBOUNCE_SECONDS cannot be empty")
        if not isinstance(logging.getLevelName(log_level), int):
            raise ValueError(f"COMFYPROMPT_LOG_LEVEL is not a logging level: {log_level or '<empty>'}")

        return cls(
            output_dir=Path(output_dir_raw) if output_dir_raw else None,
            save_prompts=_parse_bool(name="COMFYPROMPT_SAVE_PROMPTS", raw_value=save_raw),
            debounce_seconds=_parse_positive_float(name="COMFYPROMPT_DEBOUNCE_SECONDS", raw_value=debounce_raw),
            log_level=log_level,
        )
