"""Split a rendered document into candidate record sections.

Three strategies are tried in priority order and the first one that cuts
the document into more than one piece wins:

1. explicit page-break markers
2. a lookahead split just before every full-name label
3. fixed-size chunking into ``fallback_chunk_count`` raw character slices

Whatever strategy fires, fragments whose trimmed length is at most
``min_section_chars`` are discarded as noise (stray headers, footers).
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from slip_splitter.core.config import SplitterConfig
from slip_splitter.models import Section
from slip_splitter.patterns import NAME_LABEL_SPLIT_PATTERN, PAGE_BREAK_PATTERN

log = logging.getLogger(__name__)

PAGE_BREAK = "page_break"
NAME_LABEL = "name_label"
FIXED_CHUNK = "fixed_chunk"


class SectionSplitter:
    """Cascade splitter trading precision for robustness as structure degrades."""

    def __init__(self, config: Optional[SplitterConfig] = None) -> None:
        self._config = config or SplitterConfig()

    def split(self, text: str) -> list[Section]:
        """Return ordered sections with 1-based positions."""
        _, fragments = self.split_with_strategy(text)
        return [Section(position=i + 1, content=frag) for i, frag in enumerate(fragments)]

    def split_with_strategy(self, text: str) -> tuple[str, list[str]]:
        """Return the winning strategy name and the kept fragments, in document order."""
        pieces = PAGE_BREAK_PATTERN.split(text)
        if len(pieces) > 1:
            return PAGE_BREAK, self._keep(pieces, PAGE_BREAK)

        # A label at offset 0 leaves an empty leading piece.
        pieces = [p for p in NAME_LABEL_SPLIT_PATTERN.split(text) if p]
        if len(pieces) > 1:
            return NAME_LABEL, self._keep(pieces, NAME_LABEL)

        return FIXED_CHUNK, self._keep(self._chunk(text), FIXED_CHUNK)

    def _chunk(self, text: str) -> list[str]:
        # Raw character offsets; word and tag boundaries are ignored.
        if not text:
            return []
        size = math.ceil(len(text) / self._config.fallback_chunk_count)
        return [text[i : i + size] for i in range(0, len(text), size)]

    def _keep(self, pieces: list[str], strategy: str) -> list[str]:
        threshold = self._config.min_section_chars
        kept = [p for p in pieces if len(p.strip()) > threshold]
        log.info(
            "Split document by %s: %d pieces, %d kept (> %d chars)",
            strategy,
            len(pieces),
            len(kept),
            threshold,
        )
        return kept


def split_sections(text: str, config: Optional[SplitterConfig] = None) -> list[Section]:
    """Convenience wrapper around ``SectionSplitter.split``."""
    return SectionSplitter(config).split(text)
