"""ZIP bundling of already-rendered files."""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import Iterable, Optional

from slip_splitter.core.config import ArchiveConfig
from slip_splitter.exceptions import ArchiveError
from slip_splitter.models import OutputFormat, RenderedFile

log = logging.getLogger(__name__)


class ArchiveBuilder:
    """Bundles rendered files into one deflate-compressed ZIP."""

    def __init__(self, config: Optional[ArchiveConfig] = None) -> None:
        self._config = config or ArchiveConfig()

    def build(self, files_dir: Path, output_path: Path) -> Path:
        """Zip every file under *files_dir*, keeping paths relative to it.

        *output_path* is skipped if it lives inside *files_dir*.
        """
        files_dir = Path(files_dir)
        if not files_dir.is_dir():
            raise ArchiveError(f"Not a directory: {files_dir}")

        output_path = Path(output_path)
        target = output_path.resolve()
        entries = [
            (path, path.relative_to(files_dir).as_posix())
            for path in sorted(files_dir.rglob("*"))
            if path.is_file() and path.resolve() != target
        ]
        return self._write(entries, output_path)

    def build_from_files(self, files: Iterable[RenderedFile], output_path: Path) -> Path:
        """Zip the given rendered files, each stored under its normalized filename.

        PDF files go under ``pdf/`` so they never clash with DOCX names.
        Missing source files are logged and skipped.
        """
        entries: list[tuple[Path, str]] = []
        for rendered in files:
            if not rendered.path.is_file():
                log.warning("Skipping missing file %s", rendered.path)
                continue
            arcname = rendered.filename
            if rendered.format == OutputFormat.PDF:
                arcname = f"pdf/{arcname}"
            entries.append((rendered.path, arcname))
        return self._write(entries, Path(output_path))

    def _write(self, entries: list[tuple[Path, str]], output_path: Path) -> Path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with zipfile.ZipFile(
                output_path,
                "w",
                compression=zipfile.ZIP_DEFLATED,
                compresslevel=self._config.compression_level,
            ) as bundle:
                for path, arcname in entries:
                    bundle.write(path, arcname)
        except OSError as exc:
            raise ArchiveError(f"Cannot write archive {output_path}: {exc}") from exc
        log.info("Wrote %s with %d files", output_path, len(entries))
        return output_path
