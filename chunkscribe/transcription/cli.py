"""CLI-facing transcription orchestration."""

from __future__ import annotations

import time
from collections.abc import Sequence
from contextlib import nullcontext
from pathlib import Path

import typer
from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from chunkscribe.chunking import analyze, plan_chunks
from chunkscribe.config import (
    ChunkingConfig,
    OutputConfig,
    PipelineConfig,
    RetryConfig,
    UIConfig,
)
from chunkscribe.errors import ChunkscribeError, describe_error
from chunkscribe.formatting import format_duration, get_formatter_spec
from chunkscribe.models import AudioAsset
from chunkscribe.transcription.client import RecognitionService
from chunkscribe.transcription.file_processor import reveal_to_console, transcribe_file
from chunkscribe.transcription.pipeline import TranscriptionPipeline
from chunkscribe.utils.cancel import interrupt_replay
from chunkscribe.utils.constant import (
    DEFAULT_CHUNK_LEN_SEC,
    DEFAULT_CHUNK_THRESHOLD_SEC,
    DEFAULT_MAX_RETRIES,
    DEFAULT_REQUEST_TIMEOUT_SEC,
    DEFAULT_REVEAL_TICK_MS,
)
from chunkscribe.utils.logging_config import configure_logging


def _display_settings(  # pragma: no cover - formatting helper
    audio_files: Sequence[Path],
    pipeline_config: PipelineConfig,
    output_config: OutputConfig,
    ui_config: UIConfig,
    language: str,
) -> None:
    """Render the effective configuration as a Rich table."""
    console = Console()
    table = Table(title="CLI Settings", show_header=True, header_style="bold magenta")
    table.add_column("Category", style="cyan", no_wrap=True)
    table.add_column("Setting", style="green")
    table.add_column("Value", style="yellow")

    chunking = pipeline_config.chunking
    retry = pipeline_config.retry
    table.add_row("Recognition", "Language", language)
    table.add_row("Recognition", "Max Retries", str(retry.max_retries))
    table.add_row("Recognition", "Request Timeout (s)", f"{retry.request_timeout_sec:g}")

    table.add_row("Chunking", "Enabled", str(chunking.enabled))
    table.add_row("Chunking", "Chunk Length (s)", f"{chunking.chunk_len_sec:g}")
    table.add_row("Chunking", "Threshold (s)", f"{chunking.threshold_sec:g}")

    table.add_row("Output", "Directory", str(output_config.output_dir))
    table.add_row("Output", "Format", output_config.output_format)
    table.add_row("Output", "Template", output_config.output_template)
    table.add_row("Output", "Overwrite", str(output_config.overwrite))
    table.add_row("Output", "Reveal", str(ui_config.reveal))

    table.add_row("Files", "Transcribing", f"{len(audio_files)} file(s)")
    console.print(table)


def _progress_display(*, enabled: bool) -> Progress | nullcontext:
    """Return a fresh Rich progress display, or a no-op context when disabled."""
    if not enabled:
        return nullcontext()
    return Progress(
        SpinnerColumn(),
        BarColumn(bar_width=None),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        TextColumn("[progress.description]{task.description}"),
        transient=True,
    )


def _build_service(request_timeout: float) -> RecognitionService:
    # Imported lazily so `plan` and tests never need network configuration.
    from chunkscribe.transcription.replicate_service import (  # pylint: disable=import-outside-toplevel
        ReplicateWhisperService,
    )

    return ReplicateWhisperService(timeout_sec=request_timeout)


def cli_transcribe(
    *,
    audio_files: Sequence[Path],
    language: str = "auto",
    output_dir: Path = Path("./output"),
    output_format: str = "txt",
    output_template: str = "{filename}",
    overwrite: bool = False,
    chunk_len_sec: float = DEFAULT_CHUNK_LEN_SEC,
    chunk_threshold_sec: float = DEFAULT_CHUNK_THRESHOLD_SEC,
    no_chunking: bool = False,
    max_retries: int = DEFAULT_MAX_RETRIES,
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT_SEC,
    reveal: bool = False,
    reveal_tick_ms: int = DEFAULT_REVEAL_TICK_MS,
    verbose: bool = False,
    quiet: bool = False,
    no_progress: bool = False,
    service: RecognitionService | None = None,
) -> list[Path]:
    """
    Transcribe the given audio files and return the created output file paths.

    Files are processed one after another; a failing file is reported and
    the remaining files still run.

    Parameters:
        audio_files (Sequence[Path]): Audio file paths to transcribe.
        language (str): ``"auto"`` or a language code passed to the service.
        output_dir (Path): Directory to write output files.
        output_format (str): Output format identifier (e.g., "txt", "srt").
        output_template (str): Filename template supporting `{filename}`, `{parent}`, `{index}`, `{date}`.
        overwrite (bool): Overwrite existing output files.
        chunk_len_sec (float): Chunk length in seconds.
        chunk_threshold_sec (float): Split assets longer than this.
        no_chunking (bool): Submit every asset in one request.
        max_retries (int): Retries per chunk after the first attempt.
        request_timeout (float): Budget for one recognition request in seconds.
        reveal (bool): Replay each transcript with a typewriter effect.
        reveal_tick_ms (int): Reveal cadence in milliseconds.
        verbose (bool): Enable verbose logging.
        quiet (bool): Suppress non-error output.
        no_progress (bool): Disable progress display.
        service (RecognitionService | None): Recognition backend; defaults to Replicate.

    Returns:
        list[Path]: Paths to the files created by the transcription run.

    Raises:
        typer.Exit: On invalid options, or with code 1 when any file failed.
    """
    configure_logging(verbose=verbose, quiet=quiet)
    if quiet:
        verbose = False

    try:
        get_formatter_spec(output_format)
    except ValueError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    if chunk_len_sec <= 0:
        typer.echo("Error: --chunk-len-sec must be > 0", err=True)
        raise typer.Exit(code=1)
    if max_retries < 0:
        typer.echo("Error: --max-retries must be >= 0", err=True)
        raise typer.Exit(code=1)

    pipeline_config = PipelineConfig(
        chunking=ChunkingConfig(
            enabled=not no_chunking,
            chunk_len_sec=chunk_len_sec,
            threshold_sec=chunk_threshold_sec,
        ),
        retry=RetryConfig(max_retries=max_retries, request_timeout_sec=request_timeout),
    )
    output_config = OutputConfig(
        output_dir=output_dir,
        output_format=output_format,
        output_template=output_template,
        overwrite=overwrite,
    )
    ui_config = UIConfig(
        verbose=verbose,
        quiet=quiet,
        no_progress=no_progress,
        reveal=reveal,
        reveal_tick_ms=reveal_tick_ms,
    )

    if not quiet:
        _display_settings(audio_files, pipeline_config, output_config, ui_config, language)
        typer.echo()

    try:
        backend = service if service is not None else _build_service(request_timeout)
    except ChunkscribeError as exc:
        typer.echo(f"Error: {describe_error(exc)}", err=True)
        raise typer.Exit(code=1) from exc

    pipeline = TranscriptionPipeline(backend, pipeline_config)
    output_dir.mkdir(parents=True, exist_ok=True)

    t0 = time.perf_counter()

    show_reveal = reveal and not quiet

    created_files: list[Path] = []
    failures = 0
    for file_idx, audio_path in enumerate(audio_files, start=1):
        with _progress_display(enabled=not (no_progress or quiet)) as progress:
            main_task = None if progress is None else progress.add_task("Transcribing...", total=None)
            try:
                output_path, transcript = transcribe_file(
                    audio_path,
                    pipeline=pipeline,
                    language=language,
                    file_idx=file_idx,
                    output_config=output_config,
                    ui_config=ui_config,
                    progress=progress,
                    main_task=main_task,
                )
            except ChunkscribeError as exc:
                failures += 1
                typer.echo(f'Error: "{audio_path}": {describe_error(exc)}', err=True)
                continue
            except ValueError as exc:
                typer.echo(f"Error: {exc}", err=True)
                raise typer.Exit(code=1) from exc
        created_files.append(output_path)

        if show_reveal:
            with interrupt_replay() as stop_event:
                completed = reveal_to_console(
                    transcript,
                    tick_interval_ms=reveal_tick_ms,
                    cancel_event=stop_event,
                )
            typer.echo()
            if not completed:
                # Ctrl-C during a replay skips the replay of later files only.
                show_reveal = False

    if not quiet:
        for p in created_files:
            typer.echo(f'Created "{p}"')
    if verbose:
        typer.echo(f"[timing] total_wall={time.perf_counter() - t0:.2f}s")
    if failures:
        raise typer.Exit(code=1)
    return created_files


def cli_plan(*, audio_files: Sequence[Path], chunk_len_sec: float, chunk_threshold_sec: float) -> int:
    """Print duration and chunk plan per file without contacting the service.

    Returns:
        int: Number of files whose metadata could not be read.
    """
    console = Console()
    table = Table(title="Chunk Plan", show_header=True, header_style="bold magenta")
    table.add_column("File", style="cyan")
    table.add_column("Duration", style="green", justify="right")
    table.add_column("Split", style="yellow")
    table.add_column("Chunks", style="yellow", justify="right")

    errors = 0
    for path in audio_files:
        try:
            duration = analyze(AudioAsset.from_path(path))
        except ChunkscribeError as exc:
            errors += 1
            table.add_row(path.name, "-", "error", describe_error(exc))
            continue
        plan = plan_chunks(duration, chunk_len_sec, chunk_threshold_sec)
        table.add_row(
            path.name,
            format_duration(duration),
            "yes" if plan.needs_chunking else "no",
            str(plan.chunk_count),
        )
    console.print(table)
    return errors
