"""Unit tests for the canonical PCM16 WAV encoder."""

from __future__ import annotations

import io

import numpy as np
import pytest
import soundfile as sf

from chunkscribe.chunking.wav import HEADER_SIZE, encode_wav, read_wav_header
from chunkscribe.errors import UnsupportedFormatError


def _pcm(data: bytes) -> np.ndarray:
    return np.frombuffer(data[HEADER_SIZE:], dtype="<i2")


def test_header_fields_for_stereo() -> None:
    """The 44-byte header describes PCM16 with derived rates and sizes."""
    samples = np.zeros((2, 3), dtype=np.float32)
    data = encode_wav(samples, 16000)

    header = read_wav_header(data)
    assert data[:4] == b"RIFF"
    assert data[8:12] == b"WAVE"
    assert header.format_tag == 1
    assert header.channels == 2
    assert header.sample_rate == 16000
    assert header.bits_per_sample == 16
    assert header.block_align == 4
    assert header.byte_rate == 64000
    assert header.data_size == 12
    assert header.riff_size == 36 + 12
    assert header.frames == 3


@pytest.mark.parametrize(("channels", "frames"), [(1, 0), (1, 7), (2, 1000), (6, 33)])
def test_encoded_length_matches_layout(channels: int, frames: int) -> None:
    """Output length is always header plus frames * channels * 2 bytes."""
    samples = np.random.default_rng(0).uniform(-1, 1, size=(channels, frames)).astype(np.float32)
    data = encode_wav(samples, 8000)
    assert len(data) == HEADER_SIZE + frames * channels * 2


def test_scaling_clamps_and_truncates_toward_zero() -> None:
    """Positive values scale by 0x7FFF, negative by 0x8000, out-of-range values clamp."""
    samples = np.array([1.0, -1.0, 0.5, -0.5, 2.0, -2.0, 0.0, 1e-6], dtype=np.float32)
    pcm = _pcm(encode_wav(samples, 8000))
    assert pcm.tolist() == [32767, -32768, 16383, -16384, 32767, -32768, 0, 0]


def test_nan_samples_encode_as_silence() -> None:
    samples = np.array([np.nan, 0.25], dtype=np.float32)
    pcm = _pcm(encode_wav(samples, 8000))
    assert pcm[0] == 0
    assert pcm[1] == int(0.25 * 0x7FFF)


def test_frames_are_interleaved() -> None:
    """Channel samples of one frame are stored next to each other."""
    left = np.array([0.5, 0.5], dtype=np.float32)
    right = np.array([-0.5, -0.5], dtype=np.float32)
    pcm = _pcm(encode_wav(np.stack([left, right]), 8000))
    assert pcm.tolist() == [16383, -16384, 16383, -16384]


def test_one_dimensional_input_is_mono() -> None:
    data = encode_wav(np.zeros(5, dtype=np.float32), 22050)
    assert read_wav_header(data).channels == 1


def test_output_is_readable_by_soundfile() -> None:
    """Encoded chunks round-trip through libsndfile with the same layout."""
    samples = np.linspace(-0.9, 0.9, 200, dtype=np.float32).reshape(2, 100)
    decoded, sr = sf.read(io.BytesIO(encode_wav(samples, 4000)), dtype="float32", always_2d=True)
    assert sr == 4000
    assert decoded.shape == (100, 2)
    assert np.allclose(decoded.T, samples, atol=1e-3)


def test_zero_channels_rejected() -> None:
    with pytest.raises(UnsupportedFormatError):
        encode_wav(np.zeros((0, 10), dtype=np.float32), 16000)


@pytest.mark.parametrize("sample_rate", [0, -1, 2**32])
def test_unrepresentable_sample_rate_rejected(sample_rate: int) -> None:
    with pytest.raises(UnsupportedFormatError):
        encode_wav(np.zeros((1, 4), dtype=np.float32), sample_rate)


def test_read_wav_header_rejects_foreign_data() -> None:
    with pytest.raises(ValueError, match="too short"):
        read_wav_header(b"RIFF")
    with pytest.raises(ValueError, match="canonical"):
        read_wav_header(b"X" * HEADER_SIZE)
