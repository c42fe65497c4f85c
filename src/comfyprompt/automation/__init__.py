"""Automation services for file- and folder-based extraction workflows."""

from comfyprompt.automation.extraction_service import ExtractionPipelineResult, run_extraction_pipeline
from comfyprompt.automation.watcher import DebouncedImageHandler, ImageFolderWatcher

__all__ = [
    "DebouncedImageHandler",
    "ExtractionPipelineResult",
    "ImageFolderWatcher",
    "run_extraction_pipeline",
]
