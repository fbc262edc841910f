"""Output renderer: writes every extracted record in each configured format.

DOCX files land directly in the output directory and PDF files in its
``pdf_subdir``. A failure writing one record/format is logged and skipped;
sibling formats and other records are unaffected. File sizes are measured
from the written files.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

from slip_splitter.core.config import RenderConfig
from slip_splitter.exceptions import RenderError
from slip_splitter.formatters.protocols import IRecordFormatter
from slip_splitter.hooks.run_tracker import get_current_run
from slip_splitter.models import ExtractedRecord, OutputFormat, RenderedFile
from slip_splitter.normalizer import build_filename, clean_code, slugify

log = logging.getLogger(__name__)


def default_formatters(config: RenderConfig) -> dict[OutputFormat, IRecordFormatter]:
    """DOCX and PDF formatters sharing *config*."""
    from slip_splitter.formatters import DocxFormatter, PDFFormatter

    return {
        OutputFormat.DOCX: DocxFormatter(config),
        OutputFormat.PDF: PDFFormatter(config),
    }


def unique_filename(filename: str, taken: set[str]) -> str:
    """Append ``_2``, ``_3``, ... before the extension until *filename* is not taken."""
    if filename not in taken:
        return filename
    stem, dot, ext = filename.rpartition(".")
    n = 2
    while f"{stem}_{n}{dot}{ext}" in taken:
        n += 1
    return f"{stem}_{n}{dot}{ext}"


class OutputRenderer:
    """Renders ``ExtractedRecord`` objects to files on disk."""

    def __init__(
        self,
        config: Optional[RenderConfig] = None,
        formatters: Optional[dict[OutputFormat, IRecordFormatter]] = None,
    ) -> None:
        self._config = config or RenderConfig()
        self._formatters = formatters if formatters is not None else default_formatters(self._config)

    @property
    def formats(self) -> list[OutputFormat]:
        return list(self._config.formats)

    def directory_for(self, output_dir: Path, fmt: OutputFormat) -> Path:
        if fmt == OutputFormat.PDF and self._config.pdf_subdir:
            return output_dir / self._config.pdf_subdir
        return output_dir

    async def render(self, records: list[ExtractedRecord], output_dir: Path) -> list[RenderedFile]:
        """Render every record in every configured format.

        Returns the files actually written, in record order.
        """
        taken: dict[OutputFormat, set[str]] = {fmt: set() for fmt in self._config.formats}
        files: list[RenderedFile] = []
        for record in records:
            for fmt in self._config.formats:
                rendered = await self.render_record(record, output_dir, fmt, taken[fmt])
                if rendered is not None:
                    files.append(rendered)
        log.info(
            "Rendered %d files for %d records into %s",
            len(files),
            len(records),
            output_dir,
        )
        return files

    async def render_record(
        self,
        record: ExtractedRecord,
        output_dir: Path,
        fmt: OutputFormat,
        taken: Optional[set[str]] = None,
    ) -> Optional[RenderedFile]:
        """Render one record in one format; ``None`` if it could not be written."""
        formatter = self._formatters.get(fmt)
        if formatter is None:
            log.warning("No formatter registered for %s; skipping", fmt.value)
            return None

        filename = build_filename(record.code, record.full_name, fmt.value)
        if not slugify(record.full_name) or not clean_code(record.code):
            log.warning(
                "Degenerate filename %s for section %d (name=%r, code=%r)",
                filename,
                record.position,
                record.full_name,
                record.code,
            )

        if taken is not None:
            if self._config.collision_policy == "suffix":
                filename = unique_filename(filename, taken)
            elif filename in taken:
                log.warning("Filename collision: %s will be overwritten", filename)
            taken.add(filename)

        path = self.directory_for(output_dir, fmt) / filename
        try:
            size = await asyncio.to_thread(self._write, formatter, record, path)
        except (OSError, RenderError) as e:
            log.error("Failed to render %s for %s: %s", fmt.value, record.full_name, e, exc_info=True)
            run = get_current_run()
            if run is not None:
                run.errors.append(f"render_failed: {filename}: {e}")
            return None

        return RenderedFile(
            filename=filename,
            path=path,
            size_bytes=size,
            format=fmt,
            position=record.position,
            full_name=record.full_name,
            code=record.code,
        )

    @staticmethod
    def _write(formatter: IRecordFormatter, record: ExtractedRecord, path: Path) -> int:
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            written = formatter.format_to_file(record, path)
        except OSError:
            raise
        except Exception as exc:
            raise RenderError(f"{type(formatter).__name__} failed on section {record.position}: {exc}") from exc
        return written.stat().st_size
