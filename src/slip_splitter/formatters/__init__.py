"""Per-record output formatters.

Usage::

    from slip_splitter.formatters import DocxFormatter, PDFFormatter

    docx_bytes = DocxFormatter().format(record)
    pdf_bytes = PDFFormatter().format(record)
"""

from __future__ import annotations

from typing import Any

from slip_splitter.formatters.docx_formatter import DocxFormatter
from slip_splitter.formatters.protocols import IRecordFormatter
from slip_splitter.formatters.text import plain_text

__all__ = [
    "IRecordFormatter",
    "DocxFormatter",
    "PDFFormatter",
    "plain_text",
]


def __getattr__(name: str) -> Any:
    """Lazy-load PDFFormatter so reportlab is only imported when needed."""
    if name == "PDFFormatter":
        from slip_splitter.formatters.pdf_formatter import PDFFormatter

        return PDFFormatter
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
