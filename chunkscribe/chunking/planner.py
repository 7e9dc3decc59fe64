"""Duration analysis and chunk planning.

Decides, from container metadata alone where possible, whether an asset must
be split before it is sent to the recognition service.
"""

from __future__ import annotations

import logging
import math

from chunkscribe.errors import AudioDecodeError
from chunkscribe.models import AudioAsset, AudioChunkPlan
from chunkscribe.utils.audio_io import probe_duration
from chunkscribe.utils.constant import DEFAULT_CHUNK_LEN_SEC, DEFAULT_CHUNK_THRESHOLD_SEC

__all__ = ["analyze", "needs_chunking", "plan_chunks"]

logger = logging.getLogger(__name__)


def analyze(asset: AudioAsset) -> float:
    """Return the total duration of *asset* in seconds.

    Raises:
        AudioDecodeError: If the metadata is unreadable or the container is
            corrupt.
    """
    duration = probe_duration(asset)
    if not math.isfinite(duration) or duration < 0:
        raise AudioDecodeError(f"Invalid duration {duration!r} for {asset.name!r}")
    logger.info(f"{asset.name}: duration={duration:.1f}s size={asset.size} bytes")
    return duration


def needs_chunking(duration: float, threshold: float = DEFAULT_CHUNK_THRESHOLD_SEC) -> bool:
    """Return ``True`` when *duration* strictly exceeds *threshold*."""
    return duration > threshold


def plan_chunks(
    duration: float,
    chunk_duration: float = DEFAULT_CHUNK_LEN_SEC,
    threshold: float = DEFAULT_CHUNK_THRESHOLD_SEC,
) -> AudioChunkPlan:
    """Build the :class:`AudioChunkPlan` for an asset of *duration* seconds.

    Raises:
        ValueError: If *chunk_duration* is not positive.
    """
    if chunk_duration <= 0:
        raise ValueError("chunk_duration must be > 0")
    return AudioChunkPlan(
        total_duration=duration,
        chunk_duration=chunk_duration,
        needs_chunking=needs_chunking(duration, threshold),
    )
