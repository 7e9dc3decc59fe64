"""Fixed-window chunker for long-audio transcription.

Splits a decoded multichannel buffer into consecutive, non-overlapping
windows and encodes each one as an independent WAV container. Windows tile
the time axis without gaps, so chunk ``k`` always starts at
``k * chunk_len_sec``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

import numpy as np

from chunkscribe.chunking.wav import encode_wav
from chunkscribe.errors import UnsupportedFormatError
from chunkscribe.models import AudioAsset, EncodedChunk, SampleBuffer
from chunkscribe.utils.audio_io import decode_asset

__all__ = [
    "iter_chunks",
    "segment",
    "split_windows",
]

logger = logging.getLogger(__name__)


def split_windows(
    samples: np.ndarray,
    sr: int,
    chunk_len_sec: float,
) -> list[tuple[np.ndarray, float]]:
    """Split a ``(channels, frames)`` array into time-windowed views.

    Parameters:
        samples (np.ndarray): Multichannel float32 samples, frames on the last axis.
        sr (int): Sample rate in Hz.
        chunk_len_sec (float): Window length in seconds. If <= 0 the entire
            signal is returned as a single window.

    Returns:
        list[tuple[np.ndarray, float]]: ``(window, offset_sec)`` pairs. The
            last window holds the remainder and may be shorter.
    """
    total = samples.shape[-1]
    window_samples = int(chunk_len_sec * sr)
    if chunk_len_sec <= 0 or total == 0 or window_samples <= 0:
        return [(samples, 0.0)]

    return [
        (samples[..., start : start + window_samples], start / sr)
        for start in range(0, total, window_samples)
    ]


def iter_chunks(buffer: SampleBuffer, chunk_len_sec: float) -> Iterator[EncodedChunk]:
    """Lazily encode each window of *buffer* as a WAV chunk.

    Only one encoded container is alive at a time when the consumer drops
    each chunk after use.

    Raises:
        UnsupportedFormatError: If the buffer layout cannot be stored as PCM16.
    """
    if buffer.samples.ndim != 2 or buffer.channels == 0:
        raise UnsupportedFormatError("Decoded audio has no channels")

    for index, (window, offset) in enumerate(
        split_windows(buffer.samples, buffer.sample_rate, chunk_len_sec)
    ):
        frames = int(window.shape[-1])
        yield EncodedChunk(
            index=index,
            data=encode_wav(window, buffer.sample_rate),
            start_sec=offset,
            duration_sec=frames / buffer.sample_rate,
            frames=frames,
        )


def segment(
    asset: AudioAsset,
    chunk_len_sec: float,
    target_sr: int | None = None,
) -> list[EncodedChunk]:
    """Decode *asset* and return all of its encoded chunks.

    Raises:
        AudioDecodeError: If the asset cannot be decoded.
        UnsupportedFormatError: If the decoded layout cannot be stored as PCM16.
    """
    buffer = decode_asset(asset, target_sr)
    chunks = list(iter_chunks(buffer, chunk_len_sec))
    logger.info(
        f"{asset.name}: {len(chunks)} chunk(s) of {chunk_len_sec:g}s "
        f"({buffer.channels}ch @ {buffer.sample_rate} Hz)"
    )
    return chunks
