"""DOCX output formatter using python-docx.

Produces a self-contained Word document per record: a header block with
the patient's name and code, then the section body one paragraph per line.
"""

from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Any, Optional

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt, RGBColor

from slip_splitter.core.config import RenderConfig
from slip_splitter.formatters.text import content_lines, plain_text
from slip_splitter.models import ExtractedRecord

NAME_LABEL = "Họ và tên:"
CODE_LABEL = "Mã số:"


class DocxFormatter:
    """Renders an ``ExtractedRecord`` as a standalone .docx file."""

    def __init__(self, config: Optional[RenderConfig] = None) -> None:
        self._config = config or RenderConfig()

    def format(self, record: ExtractedRecord, **kwargs: Any) -> bytes:
        """Render *record* to DOCX bytes."""
        doc = Document()
        normal = doc.styles["Normal"]
        normal.font.name = "Arial"
        normal.font.size = Pt(11)

        title = doc.add_heading(self._config.title, level=1)
        title.alignment = WD_ALIGN_PARAGRAPH.CENTER

        self._add_field(doc, NAME_LABEL, record.full_name)
        self._add_field(doc, CODE_LABEL, record.code)

        rule = doc.add_paragraph("_" * 60)
        rule.runs[0].font.color.rgb = RGBColor(0x33, 0x33, 0x33)

        for line in content_lines(record.content):
            doc.add_paragraph(line)

        doc.core_properties.title = f"{self._config.title} - {record.full_name}"
        doc.core_properties.subject = record.code

        buffer = BytesIO()
        doc.save(buffer)
        return buffer.getvalue()

    def format_to_file(self, record: ExtractedRecord, path: Path, **kwargs: Any) -> Path:
        """Write DOCX to *path* and return it."""
        path.write_bytes(self.format(record, **kwargs))
        return path

    @property
    def content_type(self) -> str:
        return "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

    @staticmethod
    def _add_field(doc: Any, label: str, value: str) -> None:
        p = doc.add_paragraph()
        p.add_run(label).bold = True
        p.add_run(f" {plain_text(value)}")
