"""Per-file transcription processing utilities."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path

from rich.console import Console
from rich.live import Live
from rich.progress import Progress, TaskID
from rich.text import Text

from chunkscribe.config import OutputConfig, UIConfig
from chunkscribe.formatting import format_clock, get_formatter_spec
from chunkscribe.models import AudioAsset, MergedTranscript
from chunkscribe.reveal import StreamingRevealer
from chunkscribe.transcription.pipeline import TranscriptionPipeline
from chunkscribe.utils.file_utils import get_unique_filename, render_output_name

logger = logging.getLogger(__name__)


def _render_snapshot(segments: tuple) -> Text:
    text = Text()
    for i, segment in enumerate(segments):
        if i:
            text.append("\n\n")
        text.append(f"{segment.speaker} ({format_clock(segment.start_time)}): ", style="bold cyan")
        text.append(segment.text)
    return text


def reveal_to_console(
    transcript: MergedTranscript,
    *,
    tick_interval_ms: int,
    cancel_event: threading.Event | None = None,
    console: Console | None = None,
) -> bool:
    """Replay *transcript* on the terminal with a typewriter effect.

    Returns:
        bool: ``True`` when the replay ran to the end, ``False`` if cancelled.
    """
    revealer = StreamingRevealer(transcript, tick_interval_ms, cancel_event)
    with Live(Text(), console=console or Console(), refresh_per_second=30, transient=False) as live:
        for snapshot in revealer.snapshots():
            live.update(_render_snapshot(snapshot.segments))
    return revealer.finished and not revealer.cancelled


def transcribe_file(
    audio_path: Path,
    *,
    pipeline: TranscriptionPipeline,
    language: str,
    file_idx: int,
    output_config: OutputConfig,
    ui_config: UIConfig,
    progress: Progress | None = None,
    main_task: TaskID | None = None,
    load_asset: Callable[[Path], AudioAsset] = AudioAsset.from_path,
) -> tuple[Path, MergedTranscript]:
    """Transcribe one audio file and write the formatted output.

    Parameters:
        audio_path (Path): Source audio file.
        pipeline (TranscriptionPipeline): Configured pipeline.
        language (str): ``"auto"`` or a language hint.
        file_idx (int): 1-based index used by the ``{index}`` placeholder.
        output_config (OutputConfig): Output directory, format and naming.
        ui_config (UIConfig): Verbosity settings.
        progress (Progress | None): Rich progress advanced per chunk.
        main_task (TaskID | None): Task within *progress*.
        load_asset (Callable[[Path], AudioAsset]): Reads the file into an asset.

    Returns:
        tuple[Path, MergedTranscript]: Written output path and the transcript.

    Raises:
        ValueError: If the output format or template is invalid.
        ChunkscribeError: Any pipeline failure, unchanged.
    """
    spec = get_formatter_spec(output_config.output_format)
    asset = load_asset(audio_path)
    if progress is not None and main_task is not None:
        progress.update(main_task, description=f"Transcribing {audio_path.name}")

    transcript = pipeline.run(asset, language, progress=progress, task=main_task)

    base_name = render_output_name(output_config.output_template, audio_path, file_idx)
    output_path = get_unique_filename(
        output_config.output_dir / f"{base_name}{spec.file_extension}",
        overwrite=output_config.overwrite,
    )
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(spec.format_func(transcript), encoding="utf-8")

    if ui_config.verbose and not ui_config.quiet:
        logger.info(
            f"{audio_path.name}: language={transcript.detected_language} "
            f"chunks={transcript.total_chunks} -> {output_path}"
        )
    return output_path, transcript
