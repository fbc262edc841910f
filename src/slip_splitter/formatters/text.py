"""Plain-text helpers shared by the formatters."""

from __future__ import annotations

import html
import re
import textwrap

from slip_splitter.patterns import MARKUP_PATTERN

# XML 1.0 forbids these; python-docx and reportlab both choke on them.
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


def plain_text(content: str) -> str:
    """Strip embedded markup, unescape HTML entities and drop control characters."""
    return _CONTROL_CHARS.sub("", html.unescape(MARKUP_PATTERN.sub("", content)))


def content_lines(content: str) -> list[str]:
    """Non-blank lines of *content* with markup removed."""
    return [line.strip() for line in plain_text(content).splitlines() if line.strip()]


def wrap_lines(text: str, width: int) -> list[str]:
    """Word-wrap each line of *text* to *width* columns, dropping blank lines."""
    wrapped: list[str] = []
    for line in text.splitlines():
        wrapped.extend(textwrap.wrap(line, width=width))
    return wrapped
