"""CLI entrypoint for drop-folder prompt extraction."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from dotenv import load_dotenv

from comfyprompt.automation.extraction_service import ExtractionPipelineResult
from comfyprompt.automation.watcher import ImageFolderWatcher
from comfyprompt.config import ExtractorSettings


load_dotenv()

LOGGER = logging.getLogger(__name__)


def _parse_args(settings: ExtractorSettings, argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Watch a folder and extract prompts from new PNG files")
    parser.add_argument("--watch-dir", required=True, help="Directory to watch for new images")
    parser.add_argument(
        "--output-dir",
        default=str(settings.output_dir) if settings.output_dir else None,
        help="Directory for saved prompt files (default: the watch directory)",
    )
    parser.add_argument(
        "--save",
        action=argparse.BooleanOptionalAction,
        default=settings.save_prompts,
        help="Write each extracted prompt to a text file",
    )
    parser.add_argument(
        "--process-existing",
        action="store_true",
        help="Also extract PNGs already in the folder that have no prompt file yet",
    )
    parser.add_argument("--debounce", type=float, default=settings.debounce_seconds, help="Debounce delay in seconds")
    return parser.parse_args(argv)


def _build_watcher(args: argparse.Namespace) -> ImageFolderWatcher:
    def _report(result: ExtractionPipelineResult) -> None:
        if not result.success:
            LOGGER.error("Extraction failed for %s: %s", result.source_path, result.error or "unknown error")

    return ImageFolderWatcher(
        Path(args.watch_dir),
        output_dir=Path(args.output_dir) if args.output_dir else None,
        save_prompt=args.save,
        process_existing=args.process_existing,
        debounce_seconds=float(args.debounce),
        on_result=_report,
    )


async def _run_watcher(args: argparse.Namespace) -> int:
    watch_dir = Path(args.watch_dir)
    if not watch_dir.exists() or not watch_dir.is_dir():
        LOGGER.error("watch-dir must exist and be a directory: %s", watch_dir)
        return 2

    watcher = _build_watcher(args)
    await watcher.start()
    LOGGER.info("Watching %s (debounce %.1fs, save=%s)", watch_dir, float(args.debounce), args.save)

    try:
        while True:
            await asyncio.sleep(1.0)
    finally:
        watcher.stop()
        LOGGER.info("Watcher stopped cleanly")


def main(argv: list[str] | None = None) -> int:
    settings = ExtractorSettings.from_env()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(message)s")
    args = _parse_args(settings, argv)
    try:
        return asyncio.run(_run_watcher(args))
    except KeyboardInterrupt:
        LOGGER.info("Shutdown requested")
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
