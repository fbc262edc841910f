"""Flatten a DOCX into the markup-tolerant text the splitter consumes.

Body content is walked in document order. Each paragraph becomes one line,
each table cell's paragraphs become their own lines, and every page break
(explicit break run, ``page_break_before`` paragraph, or non-continuous
section break) is written as the native ``<w:br w:type="page"/>`` marker on
a line of its own.
"""

from __future__ import annotations

import logging
import unicodedata
from io import BytesIO
from typing import Iterator

from docx import Document
from docx.oxml.ns import qn
from docx.table import Table
from docx.text.paragraph import Paragraph

from slip_splitter.exceptions import DocumentReadError

log = logging.getLogger(__name__)

PAGE_BREAK_MARKER = '<w:br w:type="page"/>'

_T = qn("w:t")
_BR = qn("w:br")
_CR = qn("w:cr")
_TAB = qn("w:tab")
_TYPE = qn("w:type")
_VAL = qn("w:val")
_P = qn("w:p")
_SECT_PR = qn("w:sectPr")


def render_docx(data: bytes) -> str:
    """Return the flattened rendering of DOCX *data*.

    Raises ``DocumentReadError`` when the bytes are not a readable Word document.
    """
    try:
        document = Document(BytesIO(data))
    except Exception as exc:
        raise DocumentReadError(f"Cannot read Word document: {exc}") from exc

    breaks = _section_break_paragraphs(document.element.body)
    lines: list[str] = []
    for block in document.iter_inner_content():
        if isinstance(block, Paragraph):
            lines.extend(_paragraph_lines(block, breaks))
        elif isinstance(block, Table):
            lines.extend(_table_lines(block, breaks))

    text = unicodedata.normalize("NFC", "\n".join(lines))
    log.info("Rendered DOCX: %d lines, %d chars", len(lines), len(text))
    return text


def _paragraph_lines(paragraph: Paragraph, breaks: list) -> Iterator[str]:
    p = paragraph._p
    if paragraph.paragraph_format.page_break_before:
        yield PAGE_BREAK_MARKER

    buf: list[str] = []
    for el in p.iter(_T, _BR, _CR, _TAB):
        if el.tag == _T:
            buf.append(el.text or "")
        elif el.tag == _TAB:
            buf.append("\t")
        elif el.tag == _BR and el.get(_TYPE) == "page":
            if buf:
                yield "".join(buf)
                buf = []
            yield PAGE_BREAK_MARKER
        else:
            buf.append("\n")
    if buf:
        yield "".join(buf)

    if any(p is el for el in breaks):
        yield PAGE_BREAK_MARKER


def _section_break_paragraphs(body) -> list:
    """Paragraphs whose trailing section break starts the next section on a new page."""
    # A section's w:type says how that section starts, so each break is
    # decided by the section after it.
    sect_prs = body.findall(".//" + _SECT_PR)
    paragraphs = []
    for current, following in zip(sect_prs, sect_prs[1:]):
        owner = current.getparent().getparent()
        if owner.tag != _P:
            continue
        kind = following.find(_TYPE)
        if kind is None or kind.get(_VAL) != "continuous":
            paragraphs.append(owner)
    return paragraphs


def _table_lines(table: Table, breaks: list) -> Iterator[str]:
    for row in table.rows:
        seen: list = []
        for cell in row.cells:
            # Merged cells are returned once per grid column they span.
            if any(tc is cell._tc for tc in seen):
                continue
            seen.append(cell._tc)
            for paragraph in cell.paragraphs:
                yield from _paragraph_lines(paragraph, breaks)
            for nested in cell.tables:
                yield from _table_lines(nested, breaks)
