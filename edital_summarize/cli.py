"""CLI entry point for edital-summarize."""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

from .cache import (
    clear_cache,
    get_cache_key,
    get_cache_stats,
    list_cached,
    load_cargo_analysis,
    load_curriculum,
    load_summary,
    save_cargo_analysis,
    save_curriculum,
    save_summary,
)
from .chunking import chunk_document, generate_summary_preview
from .costs import count_tokens, estimate_processing_cost, format_cost_warning
from .pipeline import analyze_cargos, extract_curriculum, process_document
from .sources.local_file import DocumentLoadError, load_document
from .summarize import ModelClient, ModelError, ModelSettings, RawDocument, SmartSummary
from .summarize.render import render_curriculum_markdown, render_markdown

# Main app
app = typer.Typer(
    name="edital-summarize",
    help="Chunk and summarize exam notices (editais) with an LLM.",
    no_args_is_help=True,
)

# Cache subcommand group
cache_app = typer.Typer(help="Manage cache.")
app.add_typer(cache_app, name="cache")

console = Console()

DEFAULT_OUT_DIR = Path("./edital-summary")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load(source: Path, exam: str | None) -> RawDocument:
    """Load a document or exit with a message."""
    try:
        return load_document(source, exam_name=exam)
    except FileNotFoundError as e:
        console.print(f"[red]File not found:[/red] {source}")
        raise typer.Exit(1) from e
    except (ValueError, DocumentLoadError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


def _model_client(model: str | None) -> ModelClient:
    try:
        return ModelClient.from_env(model)
    except ModelError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


def _write_outputs(out_dir: Path, chunks_json: list[dict], summary: SmartSummary | None) -> None:
    """Write output files."""
    out_dir.mkdir(parents=True, exist_ok=True)

    (out_dir / "chunks.json").write_text(
        json.dumps(chunks_json, indent=2, ensure_ascii=False), encoding="utf-8"
    )

    if summary is not None:
        (out_dir / "summary.json").write_text(
            summary.model_dump_json(indent=2, by_alias=True), encoding="utf-8"
        )
        (out_dir / "summary.md").write_text(render_markdown(summary), encoding="utf-8")


@app.command()
def summarize(
    source: Annotated[Path, typer.Argument(help="Notice file (.pdf, .txt or .md)")],
    exam: Annotated[
        str | None,
        typer.Option("--exam", "-e", help="Exam name (defaults to the file name)"),
    ] = None,
    out: Annotated[
        Path | None,
        typer.Option("--out", "-o", help="Output directory"),
    ] = None,
    model: Annotated[
        str | None,
        typer.Option("--model", "-m", help="Model name (defaults to EDITAL_SUMMARIZE_MODEL)"),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", help="Time budget in seconds for all model calls"),
    ] = None,
    local_only: Annotated[
        bool,
        typer.Option("--local-only", help="Write chunks only, no AI calls"),
    ] = False,
    force: Annotated[
        bool,
        typer.Option("--force", help="Ignore cache and re-summarize"),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip cost confirmation prompts"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Verbose output"),
    ] = False,
) -> None:
    """Chunk a notice by its titles and summarize every section."""
    _configure_logging(verbose)
    document = _load(source, exam)

    if out is None:
        out = DEFAULT_OUT_DIR / source.stem

    chunks = chunk_document(document.content)
    console.print(
        f"[green]✓[/green] Document: {len(document.content)} chars, {len(chunks)} sections"
    )

    summary: SmartSummary | None = None
    if not local_only:
        model_name = ModelSettings.from_env(model).model
        cache_key = get_cache_key(
            document.content, document.file_name, document.exam_name, model_name
        )
        if not force:
            summary = load_summary(cache_key)
            if summary is not None and verbose:
                console.print("[dim]Using cached summary[/dim]")

        if summary is None:
            estimate = estimate_processing_cost([c.content for c in chunks], model_name)
            if estimate["should_warn"] and not yes:
                console.print(
                    format_cost_warning(
                        "Summarization",
                        estimate["estimated_cost"],
                        f"{count_tokens(document.content):,} tokens → "
                        f"{estimate['num_batches']} batches",
                    )
                )
                if not typer.confirm("Continue?"):
                    raise typer.Exit(0)

            client = _model_client(model)
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
                transient=True,
            ) as progress:
                progress.add_task("Generating summary...", total=None)
                summary = process_document(
                    document.content,
                    document.file_name,
                    document.file_type,
                    document.exam_name,
                    model=client,
                    timeout=timeout,
                )

            save_summary(cache_key, summary)
            if verbose:
                console.print("[dim]Cached summary[/dim]")

        console.print("[green]✓[/green] Summary generated")

    _write_outputs(out, [c.model_dump(by_alias=True) for c in chunks], summary)

    console.print(Panel(f"[bold green]Done![/bold green]\n\nOutput: {out}"))


@app.command()
def chunks(
    source: Annotated[Path, typer.Argument(help="Notice file (.pdf, .txt or .md)")],
) -> None:
    """Print the title outline of a notice without calling the model."""
    document = _load(source, None)
    console.print(
        generate_summary_preview(document.file_name, chunk_document(document.content)),
        markup=False,
        highlight=False,
    )


@app.command()
def cargos(
    source: Annotated[Path, typer.Argument(help="Notice file (.pdf, .txt or .md)")],
    exam: Annotated[
        str | None,
        typer.Option("--exam", "-e", help="Exam name (defaults to the file name)"),
    ] = None,
    model: Annotated[
        str | None,
        typer.Option("--model", "-m", help="Model name (defaults to EDITAL_SUMMARIZE_MODEL)"),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", help="Time budget in seconds for the model call"),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", help="Ignore cache and re-analyze"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Verbose output"),
    ] = False,
) -> None:
    """Identify the cargos offered by a notice."""
    _configure_logging(verbose)
    document = _load(source, exam)
    cache_key = get_cache_key(
        document.content,
        document.file_name,
        document.exam_name,
        ModelSettings.from_env(model).model,
    )

    result = None if force else load_cargo_analysis(cache_key)
    if result is None:
        client = _model_client(model)
        try:
            result = analyze_cargos(
                document.content,
                document.file_name,
                document.exam_name,
                model=client,
                timeout=timeout,
            )
        except ModelError as e:
            console.print(f"[red]Cargo analysis failed:[/red] {e}")
            raise typer.Exit(1) from e
        save_cargo_analysis(cache_key, result)

    if result.has_single_cargo:
        console.print(f"[green]✓[/green] Single cargo: [bold]{result.cargo_name}[/bold]")
    else:
        console.print(f"[green]✓[/green] {result.total_cargos} cargos:")
        for name in result.cargos or []:
            console.print(f"  • {name}")
    if result.explanation:
        console.print(f"[dim]{result.explanation}[/dim]")


@app.command()
def curriculum(
    source: Annotated[Path, typer.Argument(help="Notice file (.pdf, .txt or .md)")],
    cargo: Annotated[str, typer.Option("--cargo", "-c", help="Cargo name")],
    exam: Annotated[
        str | None,
        typer.Option("--exam", "-e", help="Exam name (defaults to the file name)"),
    ] = None,
    out: Annotated[
        Path | None,
        typer.Option("--out", "-o", help="Write curriculum.json and curriculum.md here"),
    ] = None,
    model: Annotated[
        str | None,
        typer.Option("--model", "-m", help="Model name (defaults to EDITAL_SUMMARIZE_MODEL)"),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", help="Time budget in seconds for the model call"),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", help="Ignore cache and re-extract"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Verbose output"),
    ] = False,
) -> None:
    """Extract the curriculum (conteúdo programático) for one cargo."""
    _configure_logging(verbose)
    document = _load(source, exam)
    cache_key = get_cache_key(
        document.content, document.exam_name, ModelSettings.from_env(model).model
    )

    result = None if force else load_curriculum(cache_key, cargo)
    if result is None:
        client = _model_client(model)
        try:
            result = extract_curriculum(
                document.content,
                cargo,
                document.exam_name,
                model=client,
                timeout=timeout,
            )
        except (ModelError, ValueError) as e:
            console.print(f"[red]Curriculum extraction failed:[/red] {e}")
            raise typer.Exit(1) from e
        save_curriculum(cache_key, cargo, result)

    markdown = render_curriculum_markdown(result)
    if out is not None:
        out.mkdir(parents=True, exist_ok=True)
        (out / "curriculum.json").write_text(
            result.model_dump_json(indent=2, by_alias=True), encoding="utf-8"
        )
        (out / "curriculum.md").write_text(markdown, encoding="utf-8")

    console.print(Markdown(markdown))


# Cache subcommands
@cache_app.command("list")
def cache_list() -> None:
    """List cached entries."""
    entries = list_cached()
    if not entries:
        console.print("[dim]Cache is empty[/dim]")
        return

    for entry in entries:
        name = entry["document_name"] or "(no summary)"
        console.print(
            f"[bold]{name[:50]}[/bold] [dim]({entry['cache_key']}: {', '.join(entry['types'])})[/dim]"
        )


@cache_app.command("stats")
def cache_stats() -> None:
    """Show cache statistics."""
    stats = get_cache_stats()
    console.print(f"Cache directory: {stats['cache_dir']}")
    console.print(f"Summaries: {stats['summary_count']}")
    console.print(f"Cargo analyses: {stats['cargo_count']}")
    console.print(f"Curricula: {stats['curriculum_count']}")
    console.print(f"Total size: {stats['total_size_kb']:.1f} KB")


@cache_app.command("clear")
def cache_clear(
    key: Annotated[
        str | None,
        typer.Option("--key", "-k", help="Specific cache key to clear"),
    ] = None,
    all_entries: Annotated[
        bool,
        typer.Option("--all", "-a", help="Clear all cache entries"),
    ] = False,
) -> None:
    """Clear cache entries."""
    if not key and not all_entries:
        console.print("[yellow]Specify --key or --all to clear cache[/yellow]")
        raise typer.Exit(1)

    count = clear_cache(key)
    console.print(f"[green]Cleared {count} cache files[/green]")


if __name__ == "__main__":
    app()
