"""Tests for the split/extract/progress pipeline."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from slip_splitter.exceptions import DocumentReadError
from slip_splitter.extractor import RecordExtractor
from slip_splitter.models import ProgressSnapshot, RunState
from slip_splitter.services.pipeline import DocumentPipeline


class _ExplodingExtractor(RecordExtractor):
    """Raises on one section position, behaves normally elsewhere."""

    def __init__(self, bad_position: int) -> None:
        super().__init__()
        self.bad_position = bad_position

    def extract(self, section):
        if section.position == self.bad_position:
            raise ValueError("boom")
        return super().extract(section)


class TestRunText:
    @pytest.mark.asyncio
    async def test_three_slips(self, three_slip_text: str) -> None:
        result = await DocumentPipeline().run_text(three_slip_text)
        assert result.total_sections == 3
        assert result.extracted_count == 3
        assert result.error_count == 0
        assert result.state == RunState.DONE
        assert [r.code for r in result.records] == ["XN001", "XN002", "XN003"]
        assert [r.position for r in result.records] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_counts_add_up(self, three_slip_text: str) -> None:
        text = three_slip_text + "\n<w:br w:type=\"page\"/>\n" + "ghi chu khong co nhan " * 10
        result = await DocumentPipeline().run_text(text)
        assert result.total_sections == 4
        assert result.extracted_count + result.error_count == result.total_sections
        assert result.error_count == 1

    @pytest.mark.asyncio
    async def test_unstructured_document(self, unstructured_text: str) -> None:
        result = await DocumentPipeline().run_text(unstructured_text)
        assert 1 <= result.total_sections <= 5
        assert result.records == []
        assert result.error_count == result.total_sections

    @pytest.mark.asyncio
    async def test_empty_document(self) -> None:
        result = await DocumentPipeline().run_text("")
        assert result.total_sections == 0
        assert result.records == []
        assert result.state == RunState.DONE

    @pytest.mark.asyncio
    async def test_extractor_exception_isolated(self, three_slip_text: str) -> None:
        pipeline = DocumentPipeline(extractor=_ExplodingExtractor(bad_position=2))
        result = await pipeline.run_text(three_slip_text)
        assert [r.position for r in result.records] == [1, 3]
        assert result.error_count == 1


class TestProgress:
    @pytest.mark.asyncio
    async def test_snapshot_sequence(self, three_slip_text: str) -> None:
        snapshots: list[ProgressSnapshot] = []
        await DocumentPipeline(on_progress=snapshots.append).run_text(three_slip_text)

        assert snapshots[0].state == RunState.STARTING
        assert snapshots[0].status_message == "Starting document processing"

        assert [s.state for s in snapshots] == [
            RunState.STARTING,
            RunState.SPLITTING,
            RunState.EXTRACTING,
            RunState.EXTRACTING,
            RunState.EXTRACTING,
            RunState.FINALIZING,
            RunState.DONE,
        ]

        per_section = snapshots[2:-2]
        assert [s.status_message for s in per_section] == [
            "Processing section 1/3",
            "Processing section 2/3",
            "Processing section 3/3",
        ]
        assert [s.processed_sections for s in per_section] == [0, 1, 2]
        assert all(s.total_sections == 3 for s in per_section)

        final = snapshots[-1]
        assert final.state == RunState.DONE
        assert final.status_message == "Document processing complete"
        assert final.processed_sections == 3
        assert final.extracted_count == 3

    @pytest.mark.asyncio
    async def test_processed_count_monotonic(self, unstructured_text: str) -> None:
        snapshots: list[ProgressSnapshot] = []
        await DocumentPipeline(on_progress=snapshots.append).run_text(unstructured_text)
        processed = [s.processed_sections for s in snapshots]
        assert processed == sorted(processed)

    @pytest.mark.asyncio
    async def test_async_callback(self, three_slip_text: str) -> None:
        seen: list[str] = []

        async def on_progress(snapshot: ProgressSnapshot) -> None:
            seen.append(snapshot.status_message)

        result = await DocumentPipeline(on_progress=on_progress).run_text(three_slip_text)
        # Let the scheduled callback tasks finish.
        for _ in range(5):
            await asyncio.sleep(0)
        assert result.extracted_count == 3
        assert "Document processing complete" in seen

    @pytest.mark.asyncio
    async def test_callback_errors_ignored(self, three_slip_text: str) -> None:
        def on_progress(snapshot: ProgressSnapshot) -> None:
            raise RuntimeError("ui went away")

        result = await DocumentPipeline(on_progress=on_progress).run_text(three_slip_text)
        assert result.extracted_count == 3


class TestRunBytes:
    @pytest.mark.asyncio
    async def test_docx_bytes(self, three_slip_docx: bytes) -> None:
        result = await DocumentPipeline().run(three_slip_docx)
        assert [r.full_name for r in result.records] == ["Nguyễn Văn An", "Trần Thị Bích", "Lê Hoàng Đức"]
        assert result.error_count == 0

    @pytest.mark.asyncio
    async def test_invalid_bytes(self) -> None:
        snapshots: list[ProgressSnapshot] = []
        with pytest.raises(DocumentReadError):
            await DocumentPipeline(on_progress=snapshots.append).run(b"not a word document")
        assert snapshots[-1].state == RunState.FAILED
        assert snapshots[-1].status_message.startswith("Failed:")

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(DocumentReadError):
            await DocumentPipeline().run_file(tmp_path / "missing.docx")

    @pytest.mark.asyncio
    async def test_run_file(self, tmp_path: Path, three_slip_docx: bytes) -> None:
        source = tmp_path / "slips.docx"
        source.write_bytes(three_slip_docx)
        result = await DocumentPipeline().run_file(source)
        assert result.extracted_count == 3


class TestRunTextFile:
    @pytest.mark.asyncio
    async def test_reads_utf8(self, tmp_path: Path, three_slip_text: str) -> None:
        source = tmp_path / "slips.html"
        source.write_text(three_slip_text, encoding="utf-8")
        result = await DocumentPipeline().run_text_file(source)
        assert result.extracted_count == 3

    @pytest.mark.asyncio
    async def test_bad_utf8_emits_failed(self, tmp_path: Path) -> None:
        source = tmp_path / "bad.txt"
        source.write_bytes(b"\xff\xfe\xfa")
        snapshots: list[ProgressSnapshot] = []
        with pytest.raises(DocumentReadError):
            await DocumentPipeline(on_progress=snapshots.append).run_text_file(source)
        assert [s.state for s in snapshots] == [RunState.STARTING, RunState.FAILED]

    @pytest.mark.asyncio
    async def test_missing_file_emits_failed(self, tmp_path: Path) -> None:
        snapshots: list[ProgressSnapshot] = []
        with pytest.raises(DocumentReadError):
            await DocumentPipeline(on_progress=snapshots.append).run_text_file(tmp_path / "gone.txt")
        assert snapshots[-1].state == RunState.FAILED
