"""Output formatter protocol: the contract every record formatter implements."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from slip_splitter.models import ExtractedRecord


@runtime_checkable
class IRecordFormatter(Protocol):
    """Protocol for per-record output formatters (DOCX, PDF, ...)."""

    def format(self, record: ExtractedRecord, **kwargs: Any) -> bytes:
        """Render the record into output bytes."""
        ...

    def format_to_file(self, record: ExtractedRecord, path: Path, **kwargs: Any) -> Path:
        """Render and write to a file. Returns the output path."""
        ...

    @property
    def content_type(self) -> str:
        """MIME type for the output format."""
        ...


__all__ = ["IRecordFormatter"]
