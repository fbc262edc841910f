"""Pipeline orchestration, rendering, archiving and end-to-end processing."""

from slip_splitter.services.archive import ArchiveBuilder
from slip_splitter.services.pipeline import DocumentPipeline, ProgressCallback
from slip_splitter.services.processing_service import ProcessingService
from slip_splitter.services.renderer import OutputRenderer

__all__ = [
    "ArchiveBuilder",
    "DocumentPipeline",
    "OutputRenderer",
    "ProcessingService",
    "ProgressCallback",
]
