"""Pydantic data models for slip-splitter."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# ── Enums ────────────────────────────────────────────────────────────


class OutputFormat(str, Enum):
    """Rendered output formats; the value doubles as the file extension."""

    DOCX = "docx"
    PDF = "pdf"


class RunState(str, Enum):
    """Lifecycle of one pipeline run. No state is re-entered."""

    STARTING = "starting"
    SPLITTING = "splitting"
    EXTRACTING = "extracting"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"


# ── Segmentation / extraction models ─────────────────────────────────


class Section(BaseModel):
    """One candidate record as isolated by the splitter."""

    model_config = ConfigDict(frozen=True)

    position: int = Field(ge=1)
    content: str


class NameCode(BaseModel):
    """A name/code pair pulled out of free-form section text."""

    model_config = ConfigDict(frozen=True)

    full_name: str = Field(min_length=1)
    code: str = Field(min_length=1)


class ExtractedRecord(BaseModel):
    """Structured result of a successful extraction from one section."""

    model_config = ConfigDict(frozen=True)

    full_name: str = Field(min_length=1)
    code: str = Field(min_length=1)
    content: str
    position: int = Field(ge=1)


class ProgressSnapshot(BaseModel):
    """Point-in-time progress of a run, handed to the progress callback."""

    total_sections: int = 0
    processed_sections: int = 0
    extracted_count: int = 0
    error_count: int = 0
    status_message: str = ""
    state: RunState = RunState.STARTING


class PipelineResult(BaseModel):
    """Outcome of one pipeline run over a single document."""

    records: list[ExtractedRecord] = Field(default_factory=list)
    error_count: int = 0
    total_sections: int = 0
    state: RunState = RunState.DONE

    @property
    def extracted_count(self) -> int:
        return len(self.records)


# ── Rendering models ─────────────────────────────────────────────────


class RenderedFile(BaseModel):
    """A file written to durable storage for one record/format pair."""

    filename: str
    path: Path
    size_bytes: int = Field(ge=0)
    format: OutputFormat
    position: Optional[int] = None
    full_name: str = ""
    code: str = ""


class ProcessingReport(BaseModel):
    """Pipeline result plus every file rendered from it."""

    source: str
    output_dir: Path
    result: PipelineResult
    files: list[RenderedFile] = Field(default_factory=list)
    analytics: Optional[RunAnalytics] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def files_for(self, fmt: OutputFormat) -> list[RenderedFile]:
        return [f for f in self.files if f.format == fmt]


# ── Run analytics ────────────────────────────────────────────────────


class StageMetrics(BaseModel):
    """Timing and counters for one stage of a run."""

    stage: str
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    duration_ms: float = 0.0
    success_count: int = 0
    error_count: int = 0


class RunAnalytics(BaseModel):
    """Per-run analytics collected by ``hooks.run_tracker``."""

    run_id: str
    doc_id: str = ""
    status: str = "running"
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    total_duration_ms: float = 0.0
    stages: list[StageMetrics] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    def finalize(self, status: str = "completed") -> None:
        """Stamp the end time and total duration."""
        self.ended_at = datetime.now(timezone.utc)
        if self.started_at:
            self.total_duration_ms = (self.ended_at - self.started_at).total_seconds() * 1000
        if self.status == "running":
            self.status = status


ProcessingReport.model_rebuild()
