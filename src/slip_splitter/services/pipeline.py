"""Pipeline orchestrator: split, extract, aggregate, report progress.

A run moves ``starting -> splitting -> extracting -> finalizing -> done``
and lands in ``failed`` when the source cannot be read. Sections are
processed strictly in order; a miss or an exception inside one section is
counted in ``error_count`` and never stops the loop.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from pathlib import Path
from typing import Any, Callable, Optional

from slip_splitter.core.config import SplitterConfig
from slip_splitter.exceptions import DocumentReadError
from slip_splitter.extractor import RecordExtractor
from slip_splitter.hooks.run_tracker import get_current_run, track_stage
from slip_splitter.loaders.docx_loader import render_docx
from slip_splitter.models import ExtractedRecord, PipelineResult, ProgressSnapshot, RunState
from slip_splitter.splitter import SectionSplitter

log = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressSnapshot], Any]


class DocumentPipeline:
    """Turns one source document into an ordered list of ``ExtractedRecord``.

    *on_progress* may be a plain function or a coroutine function. It is
    called on entering each state and before every section. Coroutine callbacks are scheduled as tasks and never
    awaited by the pipeline; exceptions raised by any callback are logged.
    """

    def __init__(
        self,
        splitter: Optional[SectionSplitter] = None,
        extractor: Optional[RecordExtractor] = None,
        on_progress: Optional[ProgressCallback] = None,
        config: Optional[SplitterConfig] = None,
    ) -> None:
        self._splitter = splitter or SectionSplitter(config)
        self._extractor = extractor or RecordExtractor()
        self._on_progress = on_progress
        self._pending: set[asyncio.Task] = set()

    # ── Entry points ─────────────────────────────────────────────────

    async def run_file(self, path: Path) -> PipelineResult:
        """Read a DOCX from disk and run the pipeline over it."""
        try:
            data = await asyncio.to_thread(Path(path).read_bytes)
        except OSError as exc:
            self._fail(exc)
            raise DocumentReadError(f"Cannot read document {path}: {exc}") from exc
        return await self.run(data)

    async def run(self, data: bytes) -> PipelineResult:
        """Run the pipeline over raw DOCX bytes."""
        self._emit(ProgressSnapshot(status_message="Starting document processing", state=RunState.STARTING))
        try:
            text = await asyncio.to_thread(render_docx, data)
        except DocumentReadError as exc:
            self._fail(exc)
            raise
        return await self._process(text)

    async def run_text_file(self, path: Path) -> PipelineResult:
        """Read an already-rendered HTML/text file (UTF-8) and run the pipeline over it."""
        self._emit(ProgressSnapshot(status_message="Starting document processing", state=RunState.STARTING))
        try:
            text = await asyncio.to_thread(Path(path).read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            self._fail(exc)
            raise DocumentReadError(f"Cannot read document {path}: {exc}") from exc
        return await self._process(text)

    async def run_text(self, text: str) -> PipelineResult:
        """Run the pipeline over an already-rendered HTML/text document."""
        self._emit(ProgressSnapshot(status_message="Starting document processing", state=RunState.STARTING))
        return await self._process(text)

    # ── Core loop ────────────────────────────────────────────────────

    async def _process(self, text: str) -> PipelineResult:
        self._emit(ProgressSnapshot(status_message="Splitting document", state=RunState.SPLITTING))
        with track_stage(RunState.SPLITTING.value) as stage:
            sections = self._splitter.split(text)
            stage.success_count = len(sections)

        total = len(sections)
        records: list[ExtractedRecord] = []
        errors = 0

        with track_stage(RunState.EXTRACTING.value) as stage:
            for i, section in enumerate(sections):
                self._emit(
                    ProgressSnapshot(
                        total_sections=total,
                        processed_sections=i,
                        extracted_count=len(records),
                        error_count=errors,
                        status_message=f"Processing section {i + 1}/{total}",
                        state=RunState.EXTRACTING,
                    )
                )
                try:
                    record = self._extractor.extract(section)
                except Exception:
                    log.exception("Error processing section %d", section.position)
                    record = None

                if record is None:
                    errors += 1
                else:
                    records.append(record)

                # Yield between sections so other runs on the loop make progress.
                await asyncio.sleep(0)

            stage.success_count = len(records)
            stage.error_count = errors

        self._emit(
            ProgressSnapshot(
                total_sections=total,
                processed_sections=total,
                extracted_count=len(records),
                error_count=errors,
                status_message="Finalizing results",
                state=RunState.FINALIZING,
            )
        )
        log.info("Extracted %d of %d sections (%d errors)", len(records), total, errors)
        self._emit(
            ProgressSnapshot(
                total_sections=total,
                processed_sections=total,
                extracted_count=len(records),
                error_count=errors,
                status_message="Document processing complete",
                state=RunState.DONE,
            )
        )
        return PipelineResult(records=records, error_count=errors, total_sections=total, state=RunState.DONE)

    # ── Progress plumbing ────────────────────────────────────────────

    def _fail(self, exc: BaseException) -> None:
        log.error("Document processing failed: %s", exc)
        run = get_current_run()
        if run is not None:
            run.errors.append(f"input_error: {exc}")
        self._emit(ProgressSnapshot(status_message=f"Failed: {exc}", state=RunState.FAILED))

    def _emit(self, snapshot: ProgressSnapshot) -> None:
        if self._on_progress is None:
            return
        try:
            outcome = self._on_progress(snapshot)
        except Exception:
            log.warning("Progress callback raised; ignoring", exc_info=True)
            return
        if inspect.isawaitable(outcome):
            task = asyncio.ensure_future(outcome)
            self._pending.add(task)
            task.add_done_callback(self._on_callback_done)

    def _on_callback_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            log.warning("Progress callback failed: %s", task.exception())
