"""End-to-end tests: DOCX in, normalized per-record DOCX + PDF files out."""

from __future__ import annotations

import json
import zipfile
from pathlib import Path

import pytest

from slip_splitter.core.config import AppSettings, RenderConfig
from slip_splitter.exceptions import DocumentReadError
from slip_splitter.models import OutputFormat, ProgressSnapshot, RunState
from slip_splitter.services import ArchiveBuilder, OutputRenderer, ProcessingService
from slip_splitter.services.processing_service import MANIFEST_KEY, output_dir_names
from tests.fakes.fake_persistence import FakePersistenceBackend
from tests.fakes.slips import SLIP_PATIENTS, make_slip

pytest.importorskip("docx")
pytest.importorskip("reportlab")

_EXPECTED_STEMS = ["XN001_nguyen_van_an", "XN002_tran_thi_bich", "XN003_le_hoang_duc"]


@pytest.fixture
def source(tmp_path: Path, three_slip_docx: bytes) -> Path:
    path = tmp_path / "ket_qua.docx"
    path.write_bytes(three_slip_docx)
    return path


class TestProcessFile:
    @pytest.mark.asyncio
    async def test_three_slips_six_files(self, source: Path, tmp_path: Path) -> None:
        out = tmp_path / "out"
        backend = FakePersistenceBackend()
        report = await ProcessingService(backend=backend).process_file(source, out)

        assert report.result.total_sections == 3
        assert report.result.extracted_count == 3
        assert report.result.error_count == 0

        docx_names = [f.filename for f in report.files_for(OutputFormat.DOCX)]
        pdf_names = [f.filename for f in report.files_for(OutputFormat.PDF)]
        assert docx_names == [f"{stem}.docx" for stem in _EXPECTED_STEMS]
        assert pdf_names == [f"{stem}.pdf" for stem in _EXPECTED_STEMS]

        for f in report.files:
            assert f.path.is_file()
            assert f.size_bytes == f.path.stat().st_size
        assert all(f.path.parent == out / "pdf" for f in report.files_for(OutputFormat.PDF))

    @pytest.mark.asyncio
    async def test_manifest_saved(self, source: Path, tmp_path: Path) -> None:
        backend = FakePersistenceBackend()
        await ProcessingService(backend=backend).process_file(source, tmp_path / "out")

        manifest = json.loads(backend.load(MANIFEST_KEY))
        assert manifest["result"]["total_sections"] == 3
        assert len(manifest["files"]) == 6
        stages = [s["stage"] for s in manifest["analytics"]["stages"]]
        assert stages == ["splitting", "extracting", "rendering"]
        assert manifest["analytics"]["status"] == "completed"

    @pytest.mark.asyncio
    async def test_default_manifest_on_disk(self, source: Path, tmp_path: Path) -> None:
        out = tmp_path / "out"
        await ProcessingService().process_file(source, out)
        assert (out / "manifest.json").is_file()

    @pytest.mark.asyncio
    async def test_progress_reaches_done(self, source: Path, tmp_path: Path) -> None:
        snapshots: list[ProgressSnapshot] = []
        await ProcessingService(backend=FakePersistenceBackend()).process_file(
            source, tmp_path / "out", on_progress=snapshots.append
        )
        assert snapshots[0].state == RunState.STARTING
        assert snapshots[-1].state == RunState.DONE
        assert snapshots[-1].extracted_count == 3

    @pytest.mark.asyncio
    async def test_unreadable_document(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.docx"
        bad.write_bytes(b"this is not a zip")
        snapshots: list[ProgressSnapshot] = []
        with pytest.raises(DocumentReadError):
            await ProcessingService(backend=FakePersistenceBackend()).process_file(
                bad, tmp_path / "out", on_progress=snapshots.append
            )
        assert snapshots[-1].state == RunState.FAILED
        assert not (tmp_path / "out").exists()

    @pytest.mark.asyncio
    async def test_undecodable_text_source(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.txt"
        bad.write_bytes(b"\xff\xfe\xfa")
        snapshots: list[ProgressSnapshot] = []
        with pytest.raises(DocumentReadError):
            await ProcessingService(backend=FakePersistenceBackend()).process_file(
                bad, tmp_path / "out", on_progress=snapshots.append
            )
        assert [s.state for s in snapshots] == [RunState.STARTING, RunState.FAILED]

    @pytest.mark.asyncio
    async def test_text_input(self, tmp_path: Path, three_slip_text: str) -> None:
        source = tmp_path / "rendered.html"
        source.write_text(three_slip_text, encoding="utf-8")
        report = await ProcessingService(backend=FakePersistenceBackend()).process_file(source, tmp_path / "out")
        assert report.result.extracted_count == 3

    @pytest.mark.asyncio
    async def test_unstructured_document(self, tmp_path: Path, unstructured_text: str) -> None:
        source = tmp_path / "noise.txt"
        source.write_text(unstructured_text, encoding="utf-8")
        report = await ProcessingService(backend=FakePersistenceBackend()).process_file(source, tmp_path / "out")
        assert report.result.total_sections <= 5
        assert report.result.extracted_count == 0
        assert report.result.error_count == report.result.total_sections
        assert report.files == []

    @pytest.mark.asyncio
    async def test_duplicate_patients_suffixed(self, tmp_path: Path) -> None:
        name, code = SLIP_PATIENTS[0]
        source = tmp_path / "dupes.txt"
        source.write_text(make_slip(name, code) + '<w:br w:type="page"/>' + make_slip(name, code), encoding="utf-8")
        settings = AppSettings(render=RenderConfig(collision_policy="suffix"))
        service = ProcessingService(settings, backend=FakePersistenceBackend())
        report = await service.process_file(source, tmp_path / "out")
        assert [f.filename for f in report.files_for(OutputFormat.DOCX)] == [
            "XN001_nguyen_van_an.docx",
            "XN001_nguyen_van_an_2.docx",
        ]

    @pytest.mark.asyncio
    async def test_archive_from_report(self, source: Path, tmp_path: Path) -> None:
        report = await ProcessingService(backend=FakePersistenceBackend()).process_file(source, tmp_path / "out")
        zip_path = ArchiveBuilder().build_from_files(report.files, tmp_path / "bundle.zip")
        with zipfile.ZipFile(zip_path) as bundle:
            names = bundle.namelist()
        assert f"{_EXPECTED_STEMS[0]}.docx" in names
        assert f"pdf/{_EXPECTED_STEMS[0]}.pdf" in names
        assert len(names) == 6


class TestProcessMany:
    @pytest.mark.asyncio
    async def test_one_bad_file_does_not_stop_others(self, source: Path, tmp_path: Path) -> None:
        bad = tmp_path / "broken.docx"
        bad.write_bytes(b"garbage")
        service = ProcessingService(
            renderer=OutputRenderer(RenderConfig(formats=[OutputFormat.DOCX])),
            backend=FakePersistenceBackend(),
        )
        outcomes = await service.process_many([source, bad], tmp_path / "out")

        assert outcomes[0].result.extracted_count == 3
        assert isinstance(outcomes[1], DocumentReadError)
        assert (tmp_path / "out" / "ket_qua" / f"{_EXPECTED_STEMS[0]}.docx").is_file()

    @pytest.mark.asyncio
    async def test_runs_keep_separate_analytics(self, source: Path, tmp_path: Path) -> None:
        other = tmp_path / "second.docx"
        other.write_bytes(source.read_bytes())
        service = ProcessingService(backend=FakePersistenceBackend())
        first, second = await service.process_many([source, other], tmp_path / "out")
        assert first.analytics.run_id != second.analytics.run_id
        assert first.analytics.doc_id == "ket_qua.docx"
        assert second.analytics.doc_id == "second.docx"

    @pytest.mark.asyncio
    async def test_same_stem_sources_get_own_directories(self, tmp_path: Path, three_slip_docx: bytes) -> None:
        sources = []
        for folder in ("a", "b"):
            (tmp_path / folder).mkdir()
            path = tmp_path / folder / "ket_qua.docx"
            path.write_bytes(three_slip_docx)
            sources.append(path)
        first, second = await ProcessingService(backend=FakePersistenceBackend()).process_many(
            sources, tmp_path / "out"
        )
        assert first.output_dir == tmp_path / "out" / "ket_qua"
        assert second.output_dir == tmp_path / "out" / "ket_qua_2"
        assert (second.output_dir / f"{_EXPECTED_STEMS[0]}.docx").is_file()


class TestOutputDirNames:
    def test_unique_stems_unchanged(self) -> None:
        assert output_dir_names([Path("a/x.docx"), Path("b/y.docx")]) == ["x", "y"]

    def test_repeated_stems_numbered(self) -> None:
        names = output_dir_names([Path("a/x.docx"), Path("b/x.docx"), Path("x_2.docx"), Path("c/x.txt")])
        assert names == ["x", "x_2", "x_2_2", "x_3"]
