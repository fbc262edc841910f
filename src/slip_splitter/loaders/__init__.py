"""Source document loaders."""

from slip_splitter.loaders.docx_loader import PAGE_BREAK_MARKER, render_docx

__all__ = ["PAGE_BREAK_MARKER", "render_docx"]
