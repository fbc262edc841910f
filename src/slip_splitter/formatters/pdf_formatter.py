"""Fixed-layout PDF formatter using reportlab.

One page per record: a title, the name and code, then the section body
with markup stripped, cut to ``max_content_chars``, word-wrapped to
``wrap_width`` columns and limited to ``max_lines`` lines. The rendering is
deliberately lossy; anything beyond the first page is dropped.

Helvetica has no glyphs for most Vietnamese letters, so without a
configured TrueType ``font_path`` all drawn text is diacritic-folded.
"""

from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Any, Optional

from reportlab.lib.pagesizes import A4, LETTER
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from slip_splitter.core.config import RenderConfig
from slip_splitter.formatters.docx_formatter import CODE_LABEL, NAME_LABEL
from slip_splitter.formatters.text import plain_text, wrap_lines
from slip_splitter.models import ExtractedRecord
from slip_splitter.normalizer import fold_diacritics

# ── Unicode sanitization ────────────────────────────────────────────
# Helvetica also lacks typographic punctuation that Word inserts.

_UNICODE_REPLACEMENTS: dict[str, str] = {
    "\u2010": "-",       # hyphen
    "\u2011": "-",       # non-breaking hyphen
    "\u2013": "-",       # en-dash
    "\u2014": "-",       # em-dash
    "\u00a0": " ",       # non-breaking space
    "\u202f": " ",       # narrow no-break space
    "\u2018": "'",       # left single quote
    "\u2019": "'",       # right single quote
    "\u201c": '"',       # left double quote
    "\u201d": '"',       # right double quote
    "\u2026": "...",     # ellipsis
    "\u00b5": "u",       # micro sign (as in uL)
    "\u00d7": "x",       # multiplication sign
}

_PAGE_SIZES = {"letter": LETTER, "a4": A4}

_BASE_FONT = "Helvetica"
_CUSTOM_FONT_PREFIX = "SlipBody-"

# Layout, in points from the top-left of the page.
_LEFT = 50
_TITLE_Y = 50
_NAME_Y = 80
_CODE_Y = 100
_BODY_Y = 140
_LINE_HEIGHT = 15


def _sanitize_text(text: str) -> str:
    for char, replacement in _UNICODE_REPLACEMENTS.items():
        text = text.replace(char, replacement)
    return text


class PDFFormatter:
    """Renders an ``ExtractedRecord`` as a single fixed-layout PDF page."""

    def __init__(self, config: Optional[RenderConfig] = None) -> None:
        self._config = config or RenderConfig()
        self._page_size: tuple[float, float] = _PAGE_SIZES.get(self._config.page_size, A4)
        self._font = self._register_font(self._config.font_path)

    # ── Public API ───────────────────────────────────────────────────

    def format(self, record: ExtractedRecord, **kwargs: Any) -> bytes:
        """Render *record* to PDF bytes."""
        buffer = BytesIO()
        _, height = self._page_size
        pdf = canvas.Canvas(buffer, pagesize=self._page_size)
        pdf.setTitle(self._text(f"{self._config.title} - {record.full_name}"))

        pdf.setFont(self._font, 18)
        pdf.drawString(_LEFT, height - _TITLE_Y, self._text(self._config.title))

        pdf.setFont(self._font, 12)
        pdf.drawString(_LEFT, height - _NAME_Y, self._text(f"{NAME_LABEL} {plain_text(record.full_name)}"))
        pdf.drawString(_LEFT, height - _CODE_Y, self._text(f"{CODE_LABEL} {plain_text(record.code)}"))

        pdf.setFont(self._font, 10)
        y = height - _BODY_Y
        for line in self.body_lines(record.content):
            pdf.drawString(_LEFT, y, self._text(line))
            y -= _LINE_HEIGHT

        pdf.showPage()
        pdf.save()
        return buffer.getvalue()

    def format_to_file(self, record: ExtractedRecord, path: Path, **kwargs: Any) -> Path:
        """Write PDF to *path* and return it."""
        path.write_bytes(self.format(record, **kwargs))
        return path

    @property
    def content_type(self) -> str:
        return "application/pdf"

    def body_lines(self, content: str) -> list[str]:
        """The wrapped, truncated body lines drawn below the header."""
        text = plain_text(content)[: self._config.max_content_chars]
        return wrap_lines(text, self._config.wrap_width)[: self._config.max_lines]

    # ── Internals ────────────────────────────────────────────────────

    def _text(self, text: str) -> str:
        text = _sanitize_text(text)
        if self._font == _BASE_FONT:
            text = fold_diacritics(text)
        return text

    @staticmethod
    def _register_font(font_path: Optional[Path]) -> str:
        if font_path is None:
            return _BASE_FONT
        name = f"{_CUSTOM_FONT_PREFIX}{Path(font_path).stem}"
        if name not in pdfmetrics.getRegisteredFontNames():
            pdfmetrics.registerFont(TTFont(name, str(font_path)))
        return name
