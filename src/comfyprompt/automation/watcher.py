"""Drop-folder prompt extraction: debounced PNG events feed the extraction pipeline.

Images whose prompt file already exists are skipped, so restarting the watcher
with ``process_existing`` only picks up the backlog that was never extracted.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
import threading
from typing import Callable

from watchdog.events import PatternMatchingEventHandler
from watchdog.observers import Observer

from comfyprompt.automation.extraction_service import ExtractionPipelineResult, prompt_path, run_extraction_pipeline
from comfyprompt.extraction.extractor import PromptExtractor


LOGGER = logging.getLogger(__name__)

IMAGE_PATTERNS = ["*.png"]

ResultCallback = Callable[[ExtractionPipelineResult], None]


class DebouncedImageHandler(PatternMatchingEventHandler):
    """Emit each new PNG path once its writes have been quiet for the debounce window."""

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        queue: asyncio.Queue[Path],
        debounce_seconds: float = 2.0,
    ) -> None:
        super().__init__(
            patterns=IMAGE_PATTERNS,
            ignore_patterns=["*.tmp", "*.part", ".*", "*~"],
            ignore_directories=True,
            case_sensitive=False,
        )
        self._loop = loop
        self._queue = queue
        self._debounce_seconds = debounce_seconds
        self._timers: dict[str, threading.Timer] = {}
        self._lock = threading.Lock()

    def _emit_path(self, raw_path: str) -> None:
        with self._lock:
            self._timers.pop(raw_path, None)
        self._loop.call_soon_threadsafe(self._queue.put_nowait, Path(raw_path))

    def _schedule(self, raw_path: str) -> None:
        with self._lock:
            existing = self._timers.pop(raw_path, None)
            if existing is not None:
                existing.cancel()

            timer = threading.Timer(self._debounce_seconds, self._emit_path, args=(raw_path,))
            timer.daemon = True
            self._timers[raw_path] = timer
            timer.start()

    def on_created(self, event) -> None:  # type: ignore[override]
        self._schedule(str(event.src_path))

    def on_moved(self, event) -> None:  # type: ignore[override]
        # Downloads land under a temporary name and are renamed to *.png.
        destination = str(event.dest_path)
        if destination.lower().endswith(".png"):
            self._schedule(destination)

    def close(self) -> None:
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()


class ImageFolderWatcher:
    """Extract prompts from PNGs dropped into ``watch_dir``."""

    def __init__(
        self,
        watch_dir: str | Path,
        *,
        output_dir: Path | None = None,
        save_prompt: bool = True,
        process_existing: bool = False,
        debounce_seconds: float = 2.0,
        extractor: PromptExtractor | None = None,
        on_result: ResultCallback | None = None,
    ) -> None:
        self._watch_dir = Path(watch_dir)
        self._output_dir = output_dir
        self._save_prompt = save_prompt
        self._process_existing = process_existing
        self._debounce_seconds = debounce_seconds
        self._extractor = extractor or PromptExtractor()
        self._on_result = on_result
        self._queue: asyncio.Queue[Path] | None = None
        self._handler: DebouncedImageHandler | None = None
        self._observer: Observer | None = None
        self._consumer_task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._observer is not None

    def already_extracted(self, image: Path) -> bool:
        """True when saving is on and the image's prompt file is already on disk."""

        return self._save_prompt and prompt_path(image, self._output_dir).exists()

    def pending_images(self) -> list[Path]:
        """PNGs currently in the folder that still need a prompt file."""

        return sorted(
            path
            for path in self._watch_dir.iterdir()
            if path.is_file() and path.suffix.lower() == ".png" and not self.already_extracted(path)
        )

    async def process_image(self, image: Path) -> ExtractionPipelineResult | None:
        """Run one image through the pipeline; ``None`` means it was skipped."""

        if self.already_extracted(image):
            LOGGER.debug("Prompt already extracted for %s", image.name)
            return None
        if not image.is_file():
            LOGGER.debug("Image disappeared before extraction: %s", image)
            return None

        result = await run_extraction_pipeline(
            image,
            output_dir=self._output_dir,
            save_prompt=self._save_prompt,
            extractor=self._extractor,
        )
        if result.success:
            LOGGER.info("Extracted %d-character prompt from %s", len(result.prompt or ""), image.name)
        if self._on_result is not None:
            self._on_result(result)
        return result

    async def _consume(self) -> None:
        assert self._queue is not None
        while True:
            path = await self._queue.get()
            try:
                await self.process_image(path)
            except Exception:  # pragma: no cover
                LOGGER.exception("Prompt extraction crashed for %s", path)
            finally:
                self._queue.task_done()

    async def start(self) -> None:
        if self._observer is not None:
            return
        if not self._watch_dir.exists() or not self._watch_dir.is_dir():
            raise ValueError(f"Watch directory does not exist or is not a directory: {self._watch_dir}")

        loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        if self._process_existing:
            backlog = self.pending_images()
            LOGGER.info("Queued %d existing images from %s", len(backlog), self._watch_dir)
            for image in backlog:
                self._queue.put_nowait(image)

        self._handler = DebouncedImageHandler(
            loop=loop,
            queue=self._queue,
            debounce_seconds=self._debounce_seconds,
        )
        observer = Observer()
        observer.schedule(self._handler, str(self._watch_dir), recursive=False)
        observer.start()
        self._observer = observer
        self._consumer_task = asyncio.create_task(self._consume())

    async def drain(self) -> None:
        """Wait until every queued image has been processed."""

        if self._queue is not None:
            await self._queue.join()

    def stop(self) -> None:
        observer = self._observer
        if observer is not None:
            observer.stop()
            observer.join(timeout=5.0)
            self._observer = None

        if self._handler is not None:
            self._handler.close()
            self._handler = None

        if self._consumer_task is not None:
            self._consumer_task.cancel()
            self._consumer_task = None
