"""Shared fixtures for slip-splitter tests."""

from __future__ import annotations

from io import BytesIO

import pytest

from slip_splitter.core.config import RenderConfig, SplitterConfig
from slip_splitter.loaders.docx_loader import PAGE_BREAK_MARKER
from tests.fakes.slips import SLIP_PATIENTS, make_slip


@pytest.fixture
def splitter_config() -> SplitterConfig:
    return SplitterConfig(min_section_chars=100, fallback_chunk_count=5)


@pytest.fixture
def render_config() -> RenderConfig:
    return RenderConfig()


@pytest.fixture
def three_slip_text() -> str:
    """Three slips separated by native page-break markers."""
    slips = [make_slip(name, code) for name, code in SLIP_PATIENTS]
    return f"\n{PAGE_BREAK_MARKER}\n".join(slips)


@pytest.fixture
def unstructured_text() -> str:
    """No page breaks and no name/code labels anywhere."""
    return "lorem ipsum dolor sit amet consectetur adipiscing elit " * 25


@pytest.fixture
def three_slip_docx() -> bytes:
    """A Word document holding three slips separated by hard page breaks."""
    docx = pytest.importorskip("docx")
    doc = docx.Document()
    for i, (name, code) in enumerate(SLIP_PATIENTS):
        if i:
            doc.add_page_break()
        for line in make_slip(name, code).splitlines():
            doc.add_paragraph(line)
    buffer = BytesIO()
    doc.save(buffer)
    return buffer.getvalue()
