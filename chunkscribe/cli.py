"""Command-line interface for chunkscribe using Typer.

Features:
- `transcribe` command: chunked, retried transcription of audio files with
  txt/json/jsonl/srt/vtt output and an optional typewriter replay.
- `plan` command: show duration and chunk plan without contacting the service.
"""

import pathlib
from importlib import import_module
from typing import Annotated

import typer

from chunkscribe import __version__
from chunkscribe.utils.constant import (
    DEFAULT_CHUNK_LEN_SEC,
    DEFAULT_CHUNK_THRESHOLD_SEC,
    DEFAULT_CHUNKING_ENABLED,
    DEFAULT_MAX_RETRIES,
    DEFAULT_REQUEST_TIMEOUT_SEC,
    DEFAULT_REVEAL_TICK_MS,
)
from chunkscribe.utils.logging_config import configure_logging

# Placeholder for lazy import; enables monkeypatching in tests.
RESOLVE_INPUT_PATHS = None  # type: ignore[assignment]


def version_callback(value: bool) -> None:
    """Show the application's version and exit.

    Args:
        value: When True, print the version and exit.

    Raises:
        typer.Exit: Always raised after printing when value is True.

    """
    if value:
        print(f"chunkscribe version: {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="chunkscribe",
    help="Transcribe long audio files in fixed-length chunks with retries and speaker-labelled output.",
    add_completion=False,
)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show the application's version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Print help when no subcommand is given.

    Raises:
        typer.Exit: Raised to terminate after displaying help or version.

    """
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _resolve(audio_files: list[str] | None) -> list[pathlib.Path]:
    global RESOLVE_INPUT_PATHS  # pylint: disable=global-statement
    if not audio_files:
        raise typer.BadParameter("Provide one or more AUDIO_FILES.")
    if RESOLVE_INPUT_PATHS is None:
        from chunkscribe.utils.file_utils import (  # pylint: disable=import-outside-toplevel
            resolve_input_paths as _resolve_input_paths,
        )

        RESOLVE_INPUT_PATHS = _resolve_input_paths

    resolved = RESOLVE_INPUT_PATHS(audio_files)
    if not resolved:
        raise typer.BadParameter("No audio files matched the given paths or patterns.")
    return resolved


@app.command()
def transcribe(
    audio_files: Annotated[
        list[str] | None,
        typer.Argument(
            help="Path(s), directories or wildcard pattern(s) to audio files (e.g. '*.mp3').",
            show_default=False,
        ),
    ] = None,
    language: Annotated[
        str,
        typer.Option(
            "--language",
            "-l",
            help="Language hint for the service, or 'auto' to let it detect.",
        ),
    ] = "auto",
    # Outputs
    output_dir: Annotated[
        pathlib.Path,
        typer.Option(
            "--output-dir",
            "-o",
            help="Directory to save the transcription outputs.",
            file_okay=False,
            dir_okay=True,
            writable=True,
            resolve_path=True,
        ),
    ] = pathlib.Path("./output"),
    output_format: Annotated[
        str,
        typer.Option(
            "--output-format",
            help="Format for the output file(s) (txt, json, jsonl, srt, vtt).",
        ),
    ] = "txt",
    output_template: Annotated[
        str,
        typer.Option(
            "--output-template",
            help="Template for output filenames. Supports {parent}, {filename}, {index}, {date}.",
        ),
    ] = "{filename}",
    overwrite: Annotated[
        bool,
        typer.Option("--overwrite", help="Overwrite existing output files."),
    ] = False,
    # Chunking
    chunk_len_sec: Annotated[
        float,
        typer.Option("--chunk-len-sec", help="Length of each submitted chunk in seconds."),
    ] = DEFAULT_CHUNK_LEN_SEC,
    chunk_threshold_sec: Annotated[
        float,
        typer.Option(
            "--chunk-threshold-sec",
            help="Split files strictly longer than this many seconds.",
        ),
    ] = DEFAULT_CHUNK_THRESHOLD_SEC,
    no_chunking: Annotated[
        bool,
        typer.Option("--no-chunking", help="Submit every file in a single request."),
    ] = not DEFAULT_CHUNKING_ENABLED,
    # Service
    max_retries: Annotated[
        int,
        typer.Option("--max-retries", help="Retries per chunk after the first attempt."),
    ] = DEFAULT_MAX_RETRIES,
    request_timeout: Annotated[
        float,
        typer.Option("--request-timeout", help="Time budget for one recognition request in seconds."),
    ] = DEFAULT_REQUEST_TIMEOUT_SEC,
    # Presentation
    reveal: Annotated[
        bool,
        typer.Option("--reveal", help="Replay each transcript with a typewriter effect."),
    ] = False,
    reveal_tick_ms: Annotated[
        int,
        typer.Option("--reveal-tick-ms", help="Milliseconds per revealed character."),
    ] = DEFAULT_REVEAL_TICK_MS,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output."),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", help="Suppress console output except errors."),
    ] = False,
    no_progress: Annotated[
        bool,
        typer.Option("--no-progress", help="Disable the Rich progress bar."),
    ] = False,
) -> list[pathlib.Path]:
    """Transcribe one or more audio files.

    Long files are split into fixed-length chunks that are transcribed one
    after another, retried with exponential backoff, and merged into a single
    speaker-labelled transcript.

    Returns:
        A list of paths to the generated transcription files.

    """
    configure_logging(verbose=verbose, quiet=quiet)
    resolved_paths = _resolve(audio_files)

    _impl = import_module("chunkscribe.transcription.cli").cli_transcribe
    return _impl(
        audio_files=resolved_paths,
        language=language,
        output_dir=output_dir,
        output_format=output_format,
        output_template=output_template,
        overwrite=overwrite,
        chunk_len_sec=chunk_len_sec,
        chunk_threshold_sec=chunk_threshold_sec,
        no_chunking=no_chunking,
        max_retries=max_retries,
        request_timeout=request_timeout,
        reveal=reveal,
        reveal_tick_ms=reveal_tick_ms,
        verbose=verbose,
        quiet=quiet,
        no_progress=no_progress,
    )


@app.command()
def plan(
    audio_files: Annotated[
        list[str] | None,
        typer.Argument(help="Path(s) or wildcard pattern(s) to audio files.", show_default=False),
    ] = None,
    chunk_len_sec: Annotated[
        float,
        typer.Option("--chunk-len-sec", help="Length of each chunk in seconds."),
    ] = DEFAULT_CHUNK_LEN_SEC,
    chunk_threshold_sec: Annotated[
        float,
        typer.Option("--chunk-threshold-sec", help="Split files strictly longer than this."),
    ] = DEFAULT_CHUNK_THRESHOLD_SEC,
) -> None:
    """Show duration and chunk plan for audio files without transcribing."""
    configure_logging()
    if chunk_len_sec <= 0:
        raise typer.BadParameter("--chunk-len-sec must be > 0")
    resolved_paths = _resolve(audio_files)

    _impl = import_module("chunkscribe.transcription.cli").cli_plan
    if _impl(
        audio_files=resolved_paths,
        chunk_len_sec=chunk_len_sec,
        chunk_threshold_sec=chunk_threshold_sec,
    ):
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
