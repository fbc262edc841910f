"""CLI for slip-splitter: process / inspect / archive commands."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn
from rich.table import Table

from slip_splitter.core.config import AppSettings
from slip_splitter.exceptions import ArchiveError, DocumentReadError
from slip_splitter.extractor import RecordExtractor
from slip_splitter.hooks.logging_config import setup_logging
from slip_splitter.loaders.docx_loader import render_docx
from slip_splitter.models import OutputFormat, ProgressSnapshot
from slip_splitter.services.archive import ArchiveBuilder
from slip_splitter.services.processing_service import TEXT_SUFFIXES, ProcessingService
from slip_splitter.splitter import SectionSplitter

app = typer.Typer(name="slip-splitter", help="Split concatenated lab-result slips into per-patient files")
console = Console()


def _build_settings(verbose: bool, collision_policy: Optional[str] = None) -> AppSettings:
    """Build settings, overriding env defaults with CLI flags."""
    if collision_policy not in (None, "overwrite", "suffix"):
        raise typer.BadParameter(f"Unknown collision policy: {collision_policy}")
    settings = AppSettings()
    if verbose:
        settings.observability.log_level = "DEBUG"
    if collision_policy:
        settings.render.collision_policy = collision_policy
    setup_logging(settings.observability)
    return settings


def _load_text(source: Path) -> str:
    if source.suffix.lower() in TEXT_SUFFIXES:
        return source.read_text(encoding="utf-8")
    return render_docx(source.read_bytes())


@app.command()
def process(
    source: Path = typer.Argument(..., exists=True, dir_okay=False, help="Source .docx (or pre-rendered .html/.txt)"),
    output_dir: Path = typer.Option(Path("processed"), "--output-dir", "-o", help="Where rendered files go"),
    collision_policy: Optional[str] = typer.Option(
        None, "--collision-policy", help="overwrite | suffix (default from SLIPS_RENDER_COLLISION_POLICY)"
    ),
    zip_path: Optional[Path] = typer.Option(None, "--zip", help="Also bundle the outputs into this ZIP"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Split a document, extract name/code per slip and render DOCX + PDF files."""
    settings = _build_settings(verbose, collision_policy)
    service = ProcessingService(settings)

    with Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
    ) as progress:
        task_id = progress.add_task("Starting", total=None)

        def on_progress(snapshot: ProgressSnapshot) -> None:
            progress.update(
                task_id,
                description=snapshot.status_message,
                total=snapshot.total_sections or None,
                completed=snapshot.processed_sections,
            )

        try:
            report = asyncio.run(service.process_file(source, output_dir, on_progress=on_progress))
        except DocumentReadError as exc:
            console.print(f"[red]{exc}[/red]")
            raise typer.Exit(code=1) from exc

    result = report.result
    console.print(
        f"\n[bold]Sections:[/bold] {result.total_sections}  "
        f"[green]Extracted:[/green] {result.extracted_count}  "
        f"[red]Errors:[/red] {result.error_count}"
    )

    table = Table(title="Rendered Files")
    table.add_column("#", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Code")
    table.add_column("Format")
    table.add_column("File")
    table.add_column("Size", justify="right")
    for f in report.files:
        table.add_row(str(f.position), f.full_name, f.code, f.format.value, f.filename, f"{f.size_bytes:,}")
    console.print(table)

    if zip_path:
        try:
            ArchiveBuilder(settings.archive).build(output_dir, zip_path)
        except ArchiveError as exc:
            console.print(f"[red]{exc}[/red]")
            raise typer.Exit(code=1) from exc
        console.print(f"[green]Archive saved to {zip_path}[/green]")

    console.print(f"[green]Output in {output_dir}[/green]")


@app.command()
def inspect(
    source: Path = typer.Argument(..., exists=True, dir_okay=False, help="Source .docx (or pre-rendered .html/.txt)"),
    preview: int = typer.Option(60, help="Characters of section text to preview"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Dry run: show how the document splits and what each section yields."""
    settings = _build_settings(verbose)
    try:
        text = _load_text(source)
    except (OSError, UnicodeDecodeError, DocumentReadError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc

    splitter = SectionSplitter(settings.splitter)
    extractor = RecordExtractor()
    strategy, fragments = splitter.split_with_strategy(text)
    console.print(f"[bold]Strategy:[/bold] {strategy}  [bold]Sections:[/bold] {len(fragments)}")

    table = Table(title="Sections")
    table.add_column("#", style="cyan")
    table.add_column("Chars", justify="right")
    table.add_column("Name", style="green")
    table.add_column("Code")
    table.add_column("Preview", max_width=60)
    for i, fragment in enumerate(fragments, start=1):
        pair = extractor.extract_name_and_code(fragment)
        snippet = " ".join(fragment.split())[:preview]
        table.add_row(
            str(i),
            str(len(fragment)),
            pair.full_name if pair else "[red]-[/red]",
            pair.code if pair else "[red]-[/red]",
            snippet,
        )
    console.print(table)


@app.command()
def archive(
    files_dir: Path = typer.Argument(..., exists=True, file_okay=False, help="Directory of rendered files"),
    output: Path = typer.Argument(..., help="ZIP file to write"),
    pdf_only: bool = typer.Option(False, "--pdf-only", help="Bundle only the PDF subdirectory"),
) -> None:
    """Bundle already-rendered files into one ZIP."""
    settings = AppSettings()
    source_dir = files_dir / settings.render.pdf_subdir if pdf_only else files_dir
    try:
        ArchiveBuilder(settings.archive).build(source_dir, output)
    except ArchiveError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    console.print(f"[green]Archive saved to {output}[/green] ({OutputFormat.PDF.value if pdf_only else 'all'} files)")


if __name__ == "__main__":
    app()
