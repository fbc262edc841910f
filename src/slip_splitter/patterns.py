"""Regex patterns for slip segmentation and name/code extraction.

Patterns are tried in list order; the first one that matches wins. Label
patterns are case-insensitive and accept the Vietnamese label with or
without diacritics.
"""

from __future__ import annotations

import re
from typing import Pattern

# ── Segmentation ─────────────────────────────────────────────────────

# Native Word page-break run, or any HTML element carrying a page-break class/style.
PAGE_BREAK_PATTERN: Pattern[str] = re.compile(
    r"<w:br\s+w:type=\"page\"[^>]*>|<\w+[^>]*page-break[^>]*>",
    re.IGNORECASE,
)

# Zero-width split point immediately before a full-name label.
NAME_LABEL_SPLIT_PATTERN: Pattern[str] = re.compile(
    r"(?=(?:họ\s*và\s*tên|ho\s*va\s*ten|full\s*name)\s*[:\-])",
    re.IGNORECASE,
)

# ── Extraction ───────────────────────────────────────────────────────

# Label, optional colon/dash, then the remainder of the line.
NAME_PATTERNS: list[Pattern[str]] = [
    re.compile(r"\b(?:họ\s*và\s*tên|ho\s*va\s*ten)\s*[:\-]?\s*([^\n\r]+)", re.IGNORECASE),
    re.compile(r"\b(?:tên|ten)\b\s*[:\-]?\s*([^\n\r]+)", re.IGNORECASE),
    re.compile(r"\b(?:full\s*name|fullname)\s*[:\-]?\s*([^\n\r]+)", re.IGNORECASE),
]

# Label, optional colon/dash, then a single non-whitespace token.
CODE_PATTERNS: list[Pattern[str]] = [
    re.compile(r"\b(?:code|mã\s*số|ma\s*so)\b\s*[:\-]?\s*(\S+)", re.IGNORECASE),
    re.compile(r"\b(?:id|số\s*thứ\s*tự|so\s*thu\s*tu)\b\s*[:\-]?\s*(\S+)", re.IGNORECASE),
]

# Any tag-like markup, stripped before rendering plain text.
MARKUP_PATTERN: Pattern[str] = re.compile(r"<[^>]*>")
