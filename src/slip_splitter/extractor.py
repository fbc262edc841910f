"""Best-effort name/code extraction from one section's text.

Name and code are looked up independently, each through an ordered list of
matchers with early exit on the first hit. A record is produced only when
both lookups succeed; anything else is a miss, never an exception.
"""

from __future__ import annotations

import logging
import unicodedata
from dataclasses import dataclass
from typing import Optional, Pattern, Sequence

from slip_splitter.models import ExtractedRecord, NameCode, Section
from slip_splitter.patterns import CODE_PATTERNS, NAME_PATTERNS

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class LabelMatcher:
    """A labelled field matcher: returns the trimmed first capture group."""

    field: str
    pattern: Pattern[str]

    def match(self, text: str) -> Optional[str]:
        found = self.pattern.search(text)
        if found is None:
            return None
        value = found.group(1).strip()
        return value or None


NAME_MATCHERS: tuple[LabelMatcher, ...] = tuple(LabelMatcher("full_name", p) for p in NAME_PATTERNS)
CODE_MATCHERS: tuple[LabelMatcher, ...] = tuple(LabelMatcher("code", p) for p in CODE_PATTERNS)


def first_match(matchers: Sequence[LabelMatcher], text: str) -> Optional[str]:
    """Evaluate *matchers* in priority order and return the first value found."""
    for matcher in matchers:
        value = matcher.match(text)
        if value is not None:
            return value
    return None


class RecordExtractor:
    """Pulls a ``(full_name, code)`` pair out of free-form slip text."""

    def __init__(
        self,
        name_matchers: Sequence[LabelMatcher] = NAME_MATCHERS,
        code_matchers: Sequence[LabelMatcher] = CODE_MATCHERS,
    ) -> None:
        self._name_matchers = tuple(name_matchers)
        self._code_matchers = tuple(code_matchers)

    def extract_name_and_code(self, text: str) -> Optional[NameCode]:
        """Return the name/code pair, or ``None`` when either field is missing."""
        # Word may store decomposed accents; labels are written precomposed.
        normalized = unicodedata.normalize("NFC", text)
        full_name = first_match(self._name_matchers, normalized)
        code = first_match(self._code_matchers, normalized)
        if full_name and code:
            return NameCode(full_name=full_name, code=code)
        log.debug("Extraction miss: name=%r code=%r", full_name, code)
        return None

    def extract(self, section: Section) -> Optional[ExtractedRecord]:
        """Build an ``ExtractedRecord`` for *section*, or ``None`` on a miss."""
        pair = self.extract_name_and_code(section.content)
        if pair is None:
            return None
        return ExtractedRecord(
            full_name=pair.full_name,
            code=pair.code,
            content=section.content,
            position=section.position,
        )


_default_extractor = RecordExtractor()


def extract_name_and_code(text: str) -> Optional[NameCode]:
    """Module-level shortcut using the default matcher lists."""
    return _default_extractor.extract_name_and_code(text)
