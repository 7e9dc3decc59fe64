"""Unit tests for transcription CLI helpers and per-file processing."""

from __future__ import annotations

import io
import json
import signal
from collections.abc import Callable
from pathlib import Path

import pytest
import typer
from rich.console import Console
from typer.testing import CliRunner

from chunkscribe import cli
from chunkscribe.config import OutputConfig, UIConfig
from chunkscribe.errors import RecognitionServiceError
from chunkscribe.models import AudioAsset
from chunkscribe.transcription import TranscriptionPipeline
from chunkscribe.transcription import cli as transcription_cli
from chunkscribe.transcription.file_processor import reveal_to_console, transcribe_file

_SEGMENTS = {"segments": [{"start": 0.5, "end": 2.0, "text": "hello"}, {"start": 3.0, "end": 4.0, "text": "again"}]}


@pytest.fixture(autouse=True)
def _no_logging_setup(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(transcription_cli, "configure_logging", lambda **_kwargs: None)
    monkeypatch.setattr(cli, "configure_logging", lambda **_kwargs: None)


@pytest.fixture
def audio_files(tmp_path: Path, make_wav_bytes: Callable[..., bytes]) -> list[Path]:
    paths = []
    for name in ("first.wav", "second.wav"):
        path = tmp_path / "in" / name
        path.parent.mkdir(exist_ok=True)
        path.write_bytes(make_wav_bytes(5.0))
        paths.append(path)
    return paths


def test_cli_transcribe_writes_outputs(audio_files: list[Path], tmp_path: Path, fake_service: type) -> None:
    service = fake_service([_SEGMENTS])
    out_dir = tmp_path / "out"

    created = transcription_cli.cli_transcribe(
        audio_files=audio_files,
        output_dir=out_dir,
        output_format="txt",
        output_template="{index}-{filename}",
        quiet=True,
        no_progress=True,
        service=service,
    )

    assert created == [out_dir / "1-first.txt", out_dir / "2-second.txt"]
    assert created[0].read_text(encoding="utf-8") == "Speaker 1 (00:00): hello\n\nSpeaker 2 (00:03): again"
    assert len(service.calls) == 2


def test_cli_transcribe_does_not_overwrite(audio_files: list[Path], tmp_path: Path, fake_service: type) -> None:
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    (out_dir / "first.json").write_text("{}")

    created = transcription_cli.cli_transcribe(
        audio_files=audio_files[:1],
        output_dir=out_dir,
        output_format="json",
        quiet=True,
        no_progress=True,
        service=fake_service([_SEGMENTS]),
    )

    assert created == [out_dir / "first-1.json"]
    payload = json.loads(created[0].read_text(encoding="utf-8"))
    assert payload["totalChunks"] == 1
    assert payload["detectedLanguage"] == "en"


def test_cli_transcribe_continues_after_failure(
    audio_files: list[Path],
    tmp_path: Path,
    fake_service: type,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """A failing file is reported, later files still run, exit code is 1."""
    service = fake_service([
        RecognitionServiceError("HTTP 401: invalid token", status_code=401, retryable=False),
        _SEGMENTS,
    ])

    with pytest.raises(typer.Exit) as exc_info:
        transcription_cli.cli_transcribe(
            audio_files=audio_files,
            output_dir=tmp_path / "out",
            quiet=True,
            no_progress=True,
            service=service,
        )

    assert exc_info.value.exit_code == 1
    assert "first.wav" in capsys.readouterr().err
    assert (tmp_path / "out" / "second.txt").exists()


def test_cli_transcribe_rejects_bad_options(audio_files: list[Path], tmp_path: Path, fake_service: type) -> None:
    with pytest.raises(typer.Exit):
        transcription_cli.cli_transcribe(
            audio_files=audio_files, output_dir=tmp_path, output_format="docx", service=fake_service(["x"])
        )
    with pytest.raises(typer.Exit):
        transcription_cli.cli_transcribe(
            audio_files=audio_files, output_dir=tmp_path, chunk_len_sec=0, service=fake_service(["x"])
        )


def test_cli_transcribe_missing_token_exits(
    monkeypatch: pytest.MonkeyPatch, audio_files: list[Path], tmp_path: Path
) -> None:
    def _no_service(_timeout: float):
        raise RecognitionServiceError("REPLICATE_API_TOKEN is not set", retryable=False)

    monkeypatch.setattr(transcription_cli, "_build_service", _no_service)
    with pytest.raises(typer.Exit):
        transcription_cli.cli_transcribe(audio_files=audio_files, output_dir=tmp_path, quiet=True)


def test_app_transcribe_end_to_end(
    monkeypatch: pytest.MonkeyPatch, audio_files: list[Path], tmp_path: Path, fake_service: type
) -> None:
    """The Typer command resolves a directory and runs the real implementation."""
    service = fake_service([_SEGMENTS])
    monkeypatch.setattr(transcription_cli, "_build_service", lambda _timeout: service)
    out_dir = tmp_path / "out"

    runner = CliRunner()
    result = runner.invoke(
        cli.app,
        ["transcribe", str(audio_files[0].parent), "-o", str(out_dir), "--output-format", "vtt", "--no-progress"],
    )

    assert result.exit_code == 0, result.output
    assert sorted(p.name for p in out_dir.iterdir()) == ["first.vtt", "second.vtt"]
    assert "Created" in result.stdout


def test_cli_plan_reports_chunks(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], make_wav_bytes: Callable[..., bytes]
) -> None:
    long_file = tmp_path / "long.wav"
    long_file.write_bytes(make_wav_bytes(400.0))
    broken = tmp_path / "broken.wav"
    broken.write_bytes(b"nope" * 20)

    errors = transcription_cli.cli_plan(
        audio_files=[long_file, broken], chunk_len_sec=300.0, chunk_threshold_sec=360.0
    )

    out = capsys.readouterr().out
    assert errors == 1
    assert "long.wav" in out
    assert "6:40" in out


def test_transcribe_file_reports_progress(
    tmp_path: Path, fake_service: type, make_wav_bytes: Callable[..., bytes]
) -> None:
    audio = tmp_path / "clip.wav"
    audio.write_bytes(make_wav_bytes(2.0))

    class _Progress:
        def __init__(self) -> None:
            self.updates: list[dict] = []
            self.advanced = 0

        def update(self, task, **kwargs) -> None:
            self.updates.append(kwargs)

        def advance(self, task) -> None:
            self.advanced += 1

    progress = _Progress()
    output_path, transcript = transcribe_file(
        audio,
        pipeline=TranscriptionPipeline(fake_service([_SEGMENTS])),
        language="auto",
        file_idx=1,
        output_config=OutputConfig(output_dir=tmp_path / "o", output_format="srt", output_template="{filename}"),
        ui_config=UIConfig(),
        progress=progress,  # type: ignore[arg-type]
        main_task=0,  # type: ignore[arg-type]
    )

    assert output_path == tmp_path / "o" / "clip.srt"
    assert output_path.read_text(encoding="utf-8").startswith("1\n00:00:00,500 --> 00:00:02,000")
    assert len(transcript.segments) == 2
    assert progress.advanced == 1
    assert progress.updates[0]["description"] == "Transcribing clip.wav"


def test_reveal_to_console_renders_full_text(
    fake_service: type, make_wav_asset: Callable[..., AudioAsset]
) -> None:
    transcript = TranscriptionPipeline(fake_service([_SEGMENTS])).run(make_wav_asset(1.0))
    buf = io.StringIO()
    completed = reveal_to_console(
        transcript, tick_interval_ms=0, console=Console(file=buf, force_terminal=False, width=80)
    )

    assert completed is True
    rendered = buf.getvalue()
    assert "Speaker 1 (00:00): hello" in rendered
    assert "Speaker 2 (00:03): again" in rendered


def test_cli_transcribe_untyped_failure_fails_only_its_file(
    audio_files: list[Path],
    tmp_path: Path,
    fake_service: type,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """An unexpected service exception is reported per file, not as a traceback."""
    service = fake_service([RuntimeError("socket closed"), _SEGMENTS])

    with pytest.raises(typer.Exit) as exc_info:
        transcription_cli.cli_transcribe(
            audio_files=audio_files,
            output_dir=tmp_path / "out",
            max_retries=0,
            quiet=True,
            no_progress=True,
            service=service,
        )

    assert exc_info.value.exit_code == 1
    assert "first.wav" in capsys.readouterr().err
    assert (tmp_path / "out" / "second.txt").exists()


def test_reveal_leaves_sigint_alone_while_transcribing(
    audio_files: list[Path], tmp_path: Path, fake_service: type
) -> None:
    """Ctrl-C keeps interrupting transcription; only the replay reroutes it."""
    default_handler = signal.getsignal(signal.SIGINT)
    seen: list[object] = []

    def _respond(payload: bytes) -> dict:
        seen.append(signal.getsignal(signal.SIGINT))
        return _SEGMENTS

    created = transcription_cli.cli_transcribe(
        audio_files=audio_files,
        output_dir=tmp_path / "out",
        reveal=True,
        reveal_tick_ms=0,
        no_progress=True,
        service=fake_service([_respond]),
    )

    assert len(created) == 2
    assert seen == [default_handler, default_handler]
    assert signal.getsignal(signal.SIGINT) is default_handler
