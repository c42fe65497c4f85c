from __future__ import annotations

import asyncio
from pathlib import Path

from watchdog.events import FileCreatedEvent, FileMovedEvent

from comfyprompt.automation.extraction_service import ExtractionPipelineResult
from comfyprompt.automation.watcher import DebouncedImageHandler, ImageFolderWatcher
from comfyprompt.png.encoding import build_png, pack_chunk, text_chunk


def _write_png(path: Path, prompt: str | None) -> Path:
    chunks = [text_chunk("prompt", prompt)] if prompt is not None else [pack_chunk("IDAT", b"pixels")]
    path.write_bytes(build_png(chunks))
    return path


def test_handler_debounces_repeated_events_for_one_image() -> None:
    async def _scenario() -> None:
        queue: asyncio.Queue[Path] = asyncio.Queue()
        handler = DebouncedImageHandler(loop=asyncio.get_running_loop(), queue=queue, debounce_seconds=0.2)

        event = FileCreatedEvent("images/ComfyUI_00007_.png")
        for _ in range(5):
            handler.on_created(event)
            await asyncio.sleep(0.05)

        emitted = await asyncio.wait_for(queue.get(), timeout=1.0)
        await asyncio.sleep(0.3)

        assert emitted.name == "ComfyUI_00007_.png"
        assert queue.empty()
        handler.close()

    asyncio.run(_scenario())


def test_handler_accepts_only_png_creations_and_renames() -> None:
    async def _scenario() -> None:
        queue: asyncio.Queue[Path] = asyncio.Queue()
        handler = DebouncedImageHandler(loop=asyncio.get_running_loop(), queue=queue, debounce_seconds=0.05)

        handler.dispatch(FileCreatedEvent("images/photo.jpg"))
        handler.dispatch(FileCreatedEvent("images/partial.tmp"))
        handler.on_moved(FileMovedEvent("images/render.png", "images/render.jpg"))
        handler.on_moved(FileMovedEvent("images/download.crdownload", "images/render.PNG"))

        emitted = await asyncio.wait_for(queue.get(), timeout=1.0)
        await asyncio.sleep(0.1)

        assert emitted.name == "render.PNG"
        assert queue.empty()
        handler.close()

    asyncio.run(_scenario())


def test_process_image_saves_prompt_then_skips_already_extracted(tmp_path: Path) -> None:
    image = _write_png(tmp_path / "fox.png", "a watercolor fox in the snow")
    output_dir = tmp_path / "prompts"
    watcher = ImageFolderWatcher(tmp_path, output_dir=output_dir)

    first = asyncio.run(watcher.process_image(image))
    second = asyncio.run(watcher.process_image(image))

    assert first is not None and first.success is True
    assert (output_dir / "fox.txt").read_text(encoding="utf-8") == "a watercolor fox in the snow"
    assert second is None
    assert watcher.already_extracted(image)


def test_process_image_without_saving_never_skips(tmp_path: Path) -> None:
    image = _write_png(tmp_path / "cat.png", "a cat")
    (tmp_path / "cat.txt").write_text("stale", encoding="utf-8")
    results: list[ExtractionPipelineResult] = []
    watcher = ImageFolderWatcher(tmp_path, save_prompt=False, on_result=results.append)

    result = asyncio.run(watcher.process_image(image))

    assert result is not None and result.prompt == "a cat"
    assert result.output_path is None
    assert results == [result]
    assert (tmp_path / "cat.txt").read_text(encoding="utf-8") == "stale"


def test_process_image_reports_failures_and_skips_vanished_files(tmp_path: Path) -> None:
    blank = _write_png(tmp_path / "blank.png", None)
    results: list[ExtractionPipelineResult] = []
    watcher = ImageFolderWatcher(tmp_path, on_result=results.append)

    failed = asyncio.run(watcher.process_image(blank))
    vanished = asyncio.run(watcher.process_image(tmp_path / "gone.png"))

    assert failed is not None and failed.category == "no_metadata"
    assert results == [failed]
    assert vanished is None


def test_watcher_processes_backlog_on_start(tmp_path: Path) -> None:
    _write_png(tmp_path / "a.png", "first backlog prompt")
    _write_png(tmp_path / "b.png", "second backlog prompt")
    _write_png(tmp_path / "done.png", "already handled")
    (tmp_path / "done.txt").write_text("already handled", encoding="utf-8")
    (tmp_path / "notes.md").write_text("not an image", encoding="utf-8")

    async def _scenario() -> list[ExtractionPipelineResult]:
        results: list[ExtractionPipelineResult] = []
        watcher = ImageFolderWatcher(
            tmp_path,
            process_existing=True,
            debounce_seconds=0.05,
            on_result=results.append,
        )
        assert [path.name for path in watcher.pending_images()] == ["a.png", "b.png"]

        await watcher.start()
        assert watcher.is_running
        try:
            await asyncio.wait_for(watcher.drain(), timeout=5.0)
        finally:
            watcher.stop()
        assert not watcher.is_running
        return results

    results = asyncio.run(_scenario())

    assert [result.base_name for result in results] == ["a", "b"]
    assert (tmp_path / "a.txt").read_text(encoding="utf-8") == "first backlog prompt"
    assert (tmp_path / "b.txt").read_text(encoding="utf-8") == "second backlog prompt"


def test_watcher_rejects_missing_directory(tmp_path: Path) -> None:
    async def _scenario() -> None:
        watcher = ImageFolderWatcher(tmp_path / "absent")
        try:
            await watcher.start()
        except ValueError as exc:
            assert "does not exist" in str(exc)
        else:
            raise AssertionError("Expected ValueError for missing watch directory")

    asyncio.run(_scenario())
