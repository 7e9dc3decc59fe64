"""Canonical 16-bit PCM WAV encoding.

Every chunk sent to the recognition service is a self-contained RIFF/WAVE
file with the classic 44-byte header::

    0  "RIFF"   4  u32 size-8   8  "WAVE"
    12 "fmt "   16 u32 16       20 u16 1 (PCM)
    22 u16 channels             24 u32 sample rate
    28 u32 byte rate            32 u16 block align   34 u16 bits (16)
    36 "data"   40 u32 data size
    44 interleaved little-endian int16 frames

Float samples are clamped to [-1, 1], scaled by 0x7FFF (non-negative) or
0x8000 (negative) and truncated toward zero.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

import numpy as np

from chunkscribe.errors import UnsupportedFormatError

__all__ = [
    "HEADER_SIZE",
    "WavHeader",
    "encode_wav",
    "read_wav_header",
]

HEADER_SIZE = 44
BITS_PER_SAMPLE = 16
BYTES_PER_SAMPLE = BITS_PER_SAMPLE // 8
PCM_FORMAT_TAG = 1

_U16_MAX = 0xFFFF
_U32_MAX = 0xFFFFFFFF
_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


@dataclass(frozen=True)
class WavHeader:
    """Fields of a canonical PCM WAV header."""

    riff_size: int
    format_tag: int
    channels: int
    sample_rate: int
    byte_rate: int
    block_align: int
    bits_per_sample: int
    data_size: int

    @property
    def frames(self) -> int:
        return self.data_size // self.block_align if self.block_align else 0


def _check_representable(channels: int, sample_rate: int, frames: int) -> tuple[int, int, int]:
    """Validate header fields and return ``(block_align, byte_rate, data_size)``.

    Raises:
        UnsupportedFormatError: If any field overflows its header slot.
    """
    if channels <= 0:
        raise UnsupportedFormatError("Audio has no channels")
    if channels * BYTES_PER_SAMPLE > _U16_MAX:
        raise UnsupportedFormatError(f"{channels} channels do not fit a 16-bit block align")
    if sample_rate <= 0 or sample_rate > _U32_MAX:
        raise UnsupportedFormatError(f"Sample rate {sample_rate} Hz cannot be stored")

    block_align = channels * BYTES_PER_SAMPLE
    byte_rate = sample_rate * block_align
    data_size = frames * block_align
    if byte_rate > _U32_MAX:
        raise UnsupportedFormatError(f"Byte rate {byte_rate} exceeds the WAV limit")
    if data_size + HEADER_SIZE - 8 > _U32_MAX:
        raise UnsupportedFormatError(f"{data_size} data bytes exceed the 4 GiB WAV limit")
    return block_align, byte_rate, data_size


def _to_pcm16(samples: np.ndarray) -> bytes:
    finite = np.nan_to_num(samples.astype(np.float64, copy=False), nan=0.0)
    clipped = np.clip(finite, -1.0, 1.0)
    scaled = np.where(clipped < 0, clipped * 0x8000, clipped * 0x7FFF)
    # astype truncates toward zero; frames-major order interleaves channels
    return scaled.T.astype("<i2").tobytes()


def encode_wav(samples: np.ndarray, sample_rate: int) -> bytes:
    """Serialise float samples into a 16-bit PCM WAV container.

    Parameters:
        samples (np.ndarray): ``(channels, frames)`` float array; a 1-D array
            is treated as mono.
        sample_rate (int): Sample rate in Hz.

    Returns:
        bytes: Header followed by interleaved PCM16 data.

    Raises:
        UnsupportedFormatError: If the channel count or sample rate cannot be
            represented (e.g. zero channels).
    """
    if samples.ndim == 1:
        samples = samples[np.newaxis, :]
    if samples.ndim != 2:
        raise UnsupportedFormatError(f"Expected (channels, frames) samples, got shape {samples.shape}")

    channels, frames = int(samples.shape[0]), int(samples.shape[1])
    block_align, byte_rate, data_size = _check_representable(channels, sample_rate, frames)

    header = _HEADER.pack(
        b"RIFF",
        HEADER_SIZE - 8 + data_size,
        b"WAVE",
        b"fmt ",
        16,
        PCM_FORMAT_TAG,
        channels,
        sample_rate,
        byte_rate,
        block_align,
        BITS_PER_SAMPLE,
        b"data",
        data_size,
    )
    return header + _to_pcm16(samples)


def read_wav_header(data: bytes) -> WavHeader:
    """Parse the canonical 44-byte header produced by :func:`encode_wav`.

    Raises:
        ValueError: If *data* is too short or is not a canonical PCM WAV file.
    """
    if len(data) < HEADER_SIZE:
        raise ValueError(f"WAV data too short: {len(data)} bytes")

    (
        riff,
        riff_size,
        wave,
        fmt_id,
        fmt_size,
        format_tag,
        channels,
        sample_rate,
        byte_rate,
        block_align,
        bits,
        data_id,
        data_size,
    ) = _HEADER.unpack_from(data)

    if riff != b"RIFF" or wave != b"WAVE" or fmt_id != b"fmt " or data_id != b"data":
        raise ValueError("Not a canonical RIFF/WAVE PCM header")
    if fmt_size != 16:
        raise ValueError(f"Unexpected fmt chunk size {fmt_size}")

    return WavHeader(
        riff_size=riff_size,
        format_tag=format_tag,
        channels=channels,
        sample_rate=sample_rate,
        byte_rate=byte_rate,
        block_align=block_align,
        bits_per_sample=bits,
        data_size=data_size,
    )
