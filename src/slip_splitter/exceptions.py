"""Exception hierarchy for slip-splitter."""


class SlipSplitterError(Exception):
    """Base exception for all slip-splitter errors."""


class DocumentReadError(SlipSplitterError):
    """Raised when the source document cannot be read or rendered.

    Fatal to a pipeline run: no partial results are returned.
    """


class RenderError(SlipSplitterError):
    """Raised when one record cannot be rendered to an output format."""


class ArchiveError(SlipSplitterError):
    """Raised when a compressed bundle cannot be produced."""


class PersistenceError(SlipSplitterError):
    """Raised when a persistence backend operation fails."""
