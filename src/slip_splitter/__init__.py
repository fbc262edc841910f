"""slip-splitter: split concatenated Vietnamese lab-result slips into per-patient files.

Usage::

    from slip_splitter import AppSettings, ProcessingService

    report = asyncio.run(ProcessingService(AppSettings()).process_file(src, out_dir))

Lower-level pieces::

    from slip_splitter import (
        fold_diacritics, slugify, build_filename,
        SectionSplitter, RecordExtractor, DocumentPipeline,
        OutputRenderer, ArchiveBuilder,
    )
"""

from __future__ import annotations

from slip_splitter.core.config import AppSettings
from slip_splitter.exceptions import (
    ArchiveError,
    DocumentReadError,
    PersistenceError,
    RenderError,
    SlipSplitterError,
)
from slip_splitter.extractor import RecordExtractor, extract_name_and_code
from slip_splitter.models import (
    ExtractedRecord,
    OutputFormat,
    PipelineResult,
    ProcessingReport,
    ProgressSnapshot,
    RenderedFile,
    RunState,
    Section,
)
from slip_splitter.normalizer import build_filename, fold_diacritics, slugify
from slip_splitter.services import (
    ArchiveBuilder,
    DocumentPipeline,
    OutputRenderer,
    ProcessingService,
)
from slip_splitter.splitter import SectionSplitter, split_sections

__all__ = [
    "AppSettings",
    # Errors
    "SlipSplitterError",
    "DocumentReadError",
    "RenderError",
    "ArchiveError",
    "PersistenceError",
    # Models
    "Section",
    "ExtractedRecord",
    "ProgressSnapshot",
    "PipelineResult",
    "RenderedFile",
    "ProcessingReport",
    "OutputFormat",
    "RunState",
    # Core pipeline
    "fold_diacritics",
    "slugify",
    "build_filename",
    "SectionSplitter",
    "split_sections",
    "RecordExtractor",
    "extract_name_and_code",
    "DocumentPipeline",
    "OutputRenderer",
    "ArchiveBuilder",
    "ProcessingService",
]
