"""Processing service: source file -> pipeline -> rendered files -> manifest."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional, Union

from slip_splitter.core.config import AppSettings
from slip_splitter.exceptions import DocumentReadError, PersistenceError
from slip_splitter.hooks.run_tracker import end_run, start_run, track_stage
from slip_splitter.models import ProcessingReport
from slip_splitter.persistence.file_backend import FilePersistenceBackend
from slip_splitter.persistence.protocols import IPersistenceBackend
from slip_splitter.services.pipeline import DocumentPipeline, ProgressCallback
from slip_splitter.services.renderer import OutputRenderer

log = logging.getLogger(__name__)

MANIFEST_KEY = "manifest"

# Pre-rendered inputs skip the DOCX loader.
TEXT_SUFFIXES = {".html", ".htm", ".txt"}


def output_dir_names(sources: list[Path]) -> list[str]:
    """One distinct directory name per source, based on its stem."""
    names: list[str] = []
    taken: set[str] = set()
    for src in sources:
        stem = Path(src).stem
        name, n = stem, 2
        while name in taken:
            name = f"{stem}_{n}"
            n += 1
        taken.add(name)
        names.append(name)
    return names


class ProcessingService:
    """Runs one document end to end and records what was produced."""

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        renderer: Optional[OutputRenderer] = None,
        backend: Optional[IPersistenceBackend] = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._renderer = renderer or OutputRenderer(self._settings.render)
        self._backend = backend

    async def process_file(
        self,
        source: Path,
        output_dir: Path,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ProcessingReport:
        """Split *source*, render every record into *output_dir*, save a manifest.

        Raises ``DocumentReadError`` when the source cannot be read.
        """
        source = Path(source)
        output_dir = Path(output_dir)
        start_run(doc_id=source.name)
        pipeline = DocumentPipeline(config=self._settings.splitter, on_progress=on_progress)

        try:
            if source.suffix.lower() in TEXT_SUFFIXES:
                result = await pipeline.run_text_file(source)
            else:
                result = await pipeline.run_file(source)
        except DocumentReadError:
            end_run("failed")
            raise

        with track_stage("rendering") as stage:
            files = await self._renderer.render(result.records, output_dir)
            stage.success_count = len(files)
            stage.error_count = len(result.records) * len(self._renderer.formats) - len(files)

        report = ProcessingReport(
            source=str(source),
            output_dir=output_dir,
            result=result,
            files=files,
            analytics=end_run(),
        )
        await self._save_manifest(report)
        return report

    async def process_many(
        self,
        sources: list[Path],
        output_root: Path,
    ) -> list[Union[ProcessingReport, BaseException]]:
        """Process several documents concurrently, one output directory each.

        Each entry is either the report or the exception that run failed with.
        Sources sharing a stem get ``_2``, ``_3``, ... directories.
        """
        tasks = [
            self.process_file(src, Path(output_root) / name)
            for src, name in zip(sources, output_dir_names(sources))
        ]
        return await asyncio.gather(*tasks, return_exceptions=True)

    async def _save_manifest(self, report: ProcessingReport) -> None:
        backend = self._backend or FilePersistenceBackend(report.output_dir)
        try:
            await asyncio.to_thread(backend.save, MANIFEST_KEY, report.model_dump_json(indent=2))
        except PersistenceError:
            log.error("Failed to write manifest for %s", report.source, exc_info=True)
