"""Unit tests for duration analysis and chunk planning."""

from __future__ import annotations

from collections.abc import Callable

import numpy as np
import pytest

from chunkscribe.chunking import analyze, needs_chunking, plan_chunks
from chunkscribe.errors import AudioDecodeError
from chunkscribe.models import AudioAsset
from chunkscribe.utils import audio_io


@pytest.mark.parametrize(
    ("duration", "expected"),
    [(0.0, False), (359.9, False), (360.0, False), (360.01, True), (780.0, True)],
)
def test_needs_chunking_is_strict(duration: float, expected: bool) -> None:
    assert needs_chunking(duration, threshold=360.0) is expected


def test_plan_chunks_counts_windows() -> None:
    plan = plan_chunks(780.0, chunk_duration=300.0, threshold=360.0)
    assert plan.needs_chunking
    assert plan.chunk_count == 3

    short = plan_chunks(120.0, chunk_duration=300.0, threshold=360.0)
    assert not short.needs_chunking
    assert short.chunk_count == 1


def test_plan_chunks_rejects_non_positive_chunk() -> None:
    with pytest.raises(ValueError):
        plan_chunks(100.0, chunk_duration=0)


def test_analyze_reads_wav_duration(make_wav_asset: Callable[..., AudioAsset]) -> None:
    asset = make_wav_asset(12.5, sr=1000, channels=2)
    assert analyze(asset) == pytest.approx(12.5)


def test_analyze_rejects_garbage() -> None:
    """Unparseable containers surface as AudioDecodeError from either backend."""
    asset = AudioAsset(data=b"definitely not audio" * 10, media_type="audio/wav", name="junk.wav")
    with pytest.raises(AudioDecodeError):
        analyze(asset)


def test_decode_asset_shapes_channels_first(make_wav_asset: Callable[..., AudioAsset]) -> None:
    buffer = audio_io.decode_asset(make_wav_asset(2.0, sr=1000, channels=2))
    assert buffer.samples.dtype == np.float32
    assert buffer.samples.shape == (2, 2000)
    assert buffer.sample_rate == 1000
    assert buffer.duration == pytest.approx(2.0)


def test_decode_asset_rejects_garbage() -> None:
    asset = AudioAsset(data=b"\x00\x01" * 64, media_type="audio/wav", name="junk.wav")
    with pytest.raises(AudioDecodeError):
        audio_io.decode_asset(asset)


def test_decode_asset_falls_back_to_pydub(monkeypatch: pytest.MonkeyPatch) -> None:
    """Containers libsndfile rejects are decoded through pydub."""

    class _Seg:
        channels = 2
        sample_width = 2
        frame_rate = 8000

        @staticmethod
        def get_array_of_samples() -> list[int]:
            return [16384, -16384, 0, 0, 32767, -32768]

    def _fail(*_args: object, **_kwargs: object) -> None:
        raise RuntimeError("libsndfile says no")

    monkeypatch.setattr(audio_io.sf, "read", _fail)
    monkeypatch.setattr(audio_io, "_load_with_pydub", lambda asset: _Seg())

    buffer = audio_io.decode_asset(AudioAsset(data=b"mp3", media_type="audio/mpeg"))
    assert buffer.sample_rate == 8000
    assert buffer.samples.shape == (2, 3)
    assert buffer.samples[0, 0] == pytest.approx(0.5)
    assert buffer.samples[1, 0] == pytest.approx(-0.5)
