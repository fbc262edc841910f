"""Nested pydantic-settings configuration for the application.

Each sub-config reads its own ``SLIPS_<GROUP>_*`` env vars, so both
``AppSettings().render.wrap_width`` and ``SLIPS_RENDER_WRAP_WIDTH=80`` work.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings

from slip_splitter.models import OutputFormat


class SplitterConfig(BaseSettings):
    """Section splitting configuration.

    Env vars use ``SLIPS_SPLITTER_`` prefix::

        export SLIPS_SPLITTER_MIN_SECTION_CHARS=100
    """

    model_config = {"env_prefix": "SLIPS_SPLITTER_"}

    # Fragments whose trimmed length is at or below this are noise.
    min_section_chars: int = Field(default=100, ge=0)
    # Target chunk count for the last-resort fixed-size split.
    fallback_chunk_count: int = Field(default=5, ge=1)


class RenderConfig(BaseSettings):
    """Output rendering configuration.

    Env vars use ``SLIPS_RENDER_`` prefix::

        export SLIPS_RENDER_FONT_PATH=/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf
        export SLIPS_RENDER_COLLISION_POLICY=suffix
    """

    model_config = {"env_prefix": "SLIPS_RENDER_"}

    formats: list[OutputFormat] = Field(default_factory=lambda: [OutputFormat.DOCX, OutputFormat.PDF])
    pdf_subdir: str = "pdf"
    page_size: Literal["letter", "a4"] = "a4"
    font_path: Optional[Path] = None
    wrap_width: int = Field(default=70, ge=10)
    max_lines: int = Field(default=30, ge=1)
    max_content_chars: int = Field(default=1000, ge=1)
    title: str = "Kết quả xét nghiệm"
    collision_policy: Literal["overwrite", "suffix"] = "overwrite"


class ArchiveConfig(BaseSettings):
    """ZIP bundle configuration.

    Env vars use ``SLIPS_ARCHIVE_`` prefix.
    """

    model_config = {"env_prefix": "SLIPS_ARCHIVE_"}

    compression_level: int = Field(default=9, ge=0, le=9)


class ObservabilityConfig(BaseSettings):
    """Observability configuration.

    Env vars use ``SLIPS_OBSERVABILITY_`` prefix.
    """

    model_config = {"env_prefix": "SLIPS_OBSERVABILITY_"}

    service_name: str = "slip-splitter"
    log_level: str = "INFO"


class AppSettings(BaseSettings):
    """Top-level application settings aggregating all sub-configs."""

    splitter: SplitterConfig = Field(default_factory=SplitterConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)
    archive: ArchiveConfig = Field(default_factory=ArchiveConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
