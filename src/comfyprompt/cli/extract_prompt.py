"""CLI command for extracting prompts from one PNG or a folder of PNGs."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path

from dotenv import load_dotenv

from comfyprompt.automation.extraction_service import ExtractionPipelineResult, run_extraction_pipeline
from comfyprompt.config import ExtractorSettings

_SUPPORTED_SUFFIXES = {".png"}


def _collect_inputs(target: Path) -> list[Path]:
    if target.is_file():
        return [target]
    if target.is_dir():
        return sorted(
            path for path in target.rglob("*") if path.is_file() and path.suffix.lower() in _SUPPORTED_SUFFIXES
        )
    return []


def _result_row(result: ExtractionPipelineResult, *, include_metadata: bool) -> dict[str, object]:
    row: dict[str, object] = {
        "source_path": result.source_path,
        "base_name": result.base_name,
        "prompt": result.prompt,
        "output_path": result.output_path,
    }
    if include_metadata:
        row["metadata"] = result.metadata
    return row


def _output_dir_for(file_path: Path, *, source_root: Path, output_dir: Path | None) -> Path | None:
    """Mirror the image's folder under ``output_dir`` so same-named images never collide."""

    if output_dir is None or not source_root.is_dir():
        return output_dir
    return output_dir / file_path.parent.relative_to(source_root)


async def _run_batch(
    files: list[Path],
    *,
    source_root: Path,
    output_dir: Path | None,
    save_prompt: bool,
) -> list[ExtractionPipelineResult]:
    return [
        await run_extraction_pipeline(
            file_path,
            output_dir=_output_dir_for(file_path, source_root=source_root, output_dir=output_dir),
            save_prompt=save_prompt,
        )
        for file_path in files
    ]


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    settings = ExtractorSettings.from_env()

    parser = argparse.ArgumentParser(description="Extract embedded generation prompts from PNG metadata")
    parser.add_argument("--path", required=True, help="PNG file or directory of PNG files")
    parser.add_argument(
        "--output-dir",
        default=str(settings.output_dir) if settings.output_dir else None,
        help="Directory for saved <name>.txt prompt files (default: next to each image)",
    )
    parser.add_argument(
        "--save",
        action=argparse.BooleanOptionalAction,
        default=settings.save_prompts,
        help="Write each extracted prompt to a text file",
    )
    parser.add_argument(
        "--include-metadata",
        action="store_true",
        help="Include the full parsed metadata mapping for each image",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(message)s")

    source_path = Path(args.path)
    output_dir = Path(args.output_dir) if args.output_dir else None
    files = _collect_inputs(source_path)

    outcomes = asyncio.run(_run_batch(files, source_root=source_path, output_dir=output_dir, save_prompt=args.save))

    results: list[dict[str, object]] = []
    errors: list[dict[str, object]] = []
    for outcome in outcomes:
        if outcome.success:
            results.append(_result_row(outcome, include_metadata=args.include_metadata))
        else:
            errors.append(
                {
                    "source_path": outcome.source_path,
                    "stage": outcome.stage,
                    "category": outcome.category,
                    "error": outcome.error,
                }
            )

    if not files:
        errors.append(
            {"source_path": str(source_path), "stage": "collect", "category": None, "error": "No PNG files found"}
        )

    payload = {
        "path": str(source_path),
        "processed": len(results),
        "results": results,
        "errors": errors,
    }
    print(json.dumps(payload, ensure_ascii=True, indent=2))
    return 0 if not errors else 1


if __name__ == "__main__":
    raise SystemExit(main())
