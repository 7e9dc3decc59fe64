"""Audio I/O helpers.

Decodes in-memory assets into multichannel float32 sample buffers and reads
container metadata, using *soundfile* first and *pydub* (FFmpeg) as the
fallback for containers libsndfile cannot parse. Optional resampling goes
through *librosa*.
"""

from __future__ import annotations

import io
import logging

import librosa  # type: ignore
import numpy as np
import soundfile as sf  # type: ignore
from pydub import AudioSegment  # type: ignore
from pydub.exceptions import CouldntDecodeError  # type: ignore

from chunkscribe.errors import AudioDecodeError
from chunkscribe.models import AudioAsset, SampleBuffer

__all__ = ["decode_asset", "probe_duration"]

logger = logging.getLogger(__name__)

# Media type subtype -> FFmpeg demuxer name understood by pydub.
_PYDUB_FORMATS: dict[str, str] = {
    "mpeg": "mp3",
    "mp3": "mp3",
    "wav": "wav",
    "x-wav": "wav",
    "wave": "wav",
    "webm": "webm",
    "ogg": "ogg",
    "flac": "flac",
    "x-flac": "flac",
    "mp4": "mp4",
    "x-m4a": "mp4",
}

_SOUNDFILE_ERRORS: tuple[type[BaseException], ...] = (RuntimeError, sf.LibsndfileError, TypeError)
_PYDUB_ERRORS: tuple[type[BaseException], ...] = (CouldntDecodeError, OSError, ValueError, IndexError)


def _pydub_format(media_type: str) -> str | None:
    return _PYDUB_FORMATS.get(media_type.partition("/")[2].lower())


def _load_with_pydub(asset: AudioAsset) -> AudioSegment:
    """Decode *asset* through pydub/FFmpeg.

    Raises:
        AudioDecodeError: If FFmpeg is missing or cannot decode the payload.
    """
    try:
        return AudioSegment.from_file(io.BytesIO(asset.data), format=_pydub_format(asset.media_type))
    except _PYDUB_ERRORS as exc:
        raise AudioDecodeError(f"Cannot decode {asset.name!r}: {exc}") from exc


def _segment_to_array(seg: AudioSegment) -> np.ndarray:
    """Convert a pydub segment into a ``(channels, frames)`` float32 array."""
    samples = np.array(seg.get_array_of_samples())
    channels = max(seg.channels, 1)
    scale = float(1 << (8 * seg.sample_width - 1))
    data = samples.reshape((-1, channels)).T.astype(np.float32) / scale
    return np.clip(data, -1.0, 1.0)


def probe_duration(asset: AudioAsset) -> float:
    """Return the duration of *asset* in seconds.

    libsndfile reads only the container header. Containers it does not
    understand are decoded through pydub, which is slower but covers MP3,
    M4A and WebM.

    Raises:
        AudioDecodeError: If the metadata cannot be read by either backend.
    """
    try:
        with sf.SoundFile(io.BytesIO(asset.data)) as snd:
            frames, sample_rate = snd.frames, snd.samplerate
    except _SOUNDFILE_ERRORS as exc:
        logger.debug(f"soundfile could not read {asset.name!r} metadata ({exc}); trying pydub")
    else:
        if sample_rate <= 0:
            raise AudioDecodeError(f"Invalid sample rate {sample_rate} in {asset.name!r}")
        if frames >= 0:
            return frames / sample_rate

    seg = _load_with_pydub(asset)
    if seg.frame_rate <= 0:
        raise AudioDecodeError(f"Invalid sample rate {seg.frame_rate} in {asset.name!r}")
    return float(seg.duration_seconds)


def decode_asset(asset: AudioAsset, target_sr: int | None = None) -> SampleBuffer:
    """Fully decode *asset* into a multichannel sample buffer.

    Args:
        asset: The source audio.
        target_sr: Resample to this rate when given; the native rate is kept
            otherwise.

    Returns:
        SampleBuffer: float32 samples shaped ``(channels, frames)``.

    Raises:
        AudioDecodeError: If neither soundfile nor pydub can decode the asset.
    """
    data: np.ndarray | None = None
    sr: int = 0

    try:
        frames_first, sr = sf.read(io.BytesIO(asset.data), dtype="float32", always_2d=True)
        data = np.ascontiguousarray(frames_first.T)
    except _SOUNDFILE_ERRORS as exc:
        logger.debug(f"soundfile could not decode {asset.name!r} ({exc}); trying pydub")

    if data is None:
        seg = _load_with_pydub(asset)
        data, sr = _segment_to_array(seg), seg.frame_rate

    if sr <= 0:
        raise AudioDecodeError(f"Invalid sample rate {sr} in {asset.name!r}")

    if target_sr and sr != target_sr and data.shape[-1] > 0:
        logger.debug(f"Resampling {asset.name!r} from {sr} Hz to {target_sr} Hz")
        data = librosa.resample(data, orig_sr=sr, target_sr=target_sr).astype(np.float32)
        sr = target_sr

    if data.dtype != np.float32:
        data = data.astype(np.float32)

    return SampleBuffer(samples=data, sample_rate=int(sr))
