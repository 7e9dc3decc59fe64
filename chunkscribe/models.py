"""Common data models for the chunked transcription pipeline.

Transcript-facing models (``Segment``, ``ChunkTranscriptionResult``,
``MergedTranscript``, ``DetectedLanguage``) are pydantic models so that they
validate on construction and serialise with the camelCase keys consumers
already rely on. Audio-side values (``AudioAsset``, ``SampleBuffer``,
``EncodedChunk``, ``AudioChunkPlan``) are plain dataclasses around bytes and
numpy arrays.
"""

from __future__ import annotations

import math
import mimetypes
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, model_validator

__all__ = [
    "AudioAsset",
    "AudioChunkPlan",
    "SampleBuffer",
    "EncodedChunk",
    "Segment",
    "ChunkTranscriptionResult",
    "MergedTranscript",
    "DetectedLanguage",
]

# Extensions the stdlib mimetypes table does not know on every platform.
_EXTRA_MEDIA_TYPES: dict[str, str] = {
    ".m4a": "audio/mp4",
    ".flac": "audio/flac",
    ".webm": "audio/webm",
    ".ogg": "audio/ogg",
    ".opus": "audio/ogg",
}


@dataclass(frozen=True)
class AudioAsset:
    """Opaque source audio as handed over by the caller.

    Attributes:
        data: Raw container bytes.
        media_type: Declared media type, e.g. ``audio/mpeg``.
        name: Optional display name (usually the source filename).
    """

    data: bytes
    media_type: str
    name: str = "audio"

    @property
    def size(self) -> int:
        """Byte length of the payload."""
        return len(self.data)

    @classmethod
    def from_path(cls, path: Path | str, media_type: str | None = None) -> AudioAsset:
        """Read an asset from disk, guessing the media type from the suffix."""
        path = Path(path)
        if media_type is None:
            suffix = path.suffix.lower()
            media_type = _EXTRA_MEDIA_TYPES.get(suffix) or mimetypes.guess_type(path.name)[0]
        return cls(
            data=path.read_bytes(),
            media_type=media_type or "application/octet-stream",
            name=path.name,
        )


@dataclass(frozen=True)
class AudioChunkPlan:
    """How an asset of a given duration is split.

    Attributes:
        total_duration: Asset duration in seconds.
        chunk_duration: Window length in seconds.
        needs_chunking: Whether the duration exceeded the chunking threshold.
    """

    total_duration: float
    chunk_duration: float
    needs_chunking: bool

    @property
    def chunk_count(self) -> int:
        """Number of windows, ``ceil(total / chunk)`` and never below one."""
        if not self.needs_chunking or self.chunk_duration <= 0:
            return 1
        return max(1, math.ceil(self.total_duration / self.chunk_duration))


@dataclass
class SampleBuffer:
    """Decoded PCM audio.

    Attributes:
        samples: float32 array of shape ``(channels, frames)`` in [-1, 1].
        sample_rate: Sample rate in Hz.
    """

    samples: np.ndarray
    sample_rate: int

    @property
    def channels(self) -> int:
        return int(self.samples.shape[0])

    @property
    def frames(self) -> int:
        return int(self.samples.shape[1])

    @property
    def duration(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return self.frames / self.sample_rate


@dataclass(frozen=True)
class EncodedChunk:
    """One WAV-encoded time window of a :class:`SampleBuffer`."""

    index: int
    data: bytes
    start_sec: float
    duration_sec: float
    frames: int
    media_type: str = "audio/wav"


class Segment(BaseModel):
    """One timed span of transcript text with a speaker label.

    Serialises (``by_alias=True``) with the keys
    ``id, speaker, text, startTime, seek, end``.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: int = Field(0, ge=0, description="Segment index, unique within a transcript.")
    speaker: str = Field(..., description="Heuristic speaker label, e.g. 'Speaker 1'.")
    text: str = Field(..., description="Transcribed text.")
    start_time: float = Field(0.0, ge=0.0, alias="startTime", description="Start time in seconds.")
    seek: float = Field(0.0, ge=0.0, description="Alias of start_time kept for older consumers.")
    end: float = Field(0.0, ge=0.0, description="End time in seconds.")

    @model_validator(mode="after")
    def _check_order(self) -> Segment:
        if self.end < self.start_time:
            raise ValueError(f"segment end {self.end} precedes start {self.start_time}")
        return self

    def shifted(self, offset: float, new_id: int) -> Segment:
        """Return a copy moved by *offset* seconds and renumbered."""
        return self.model_copy(
            update={
                "id": new_id,
                "start_time": self.start_time + offset,
                "seek": self.seek + offset,
                "end": self.end + offset,
            }
        )


class ChunkTranscriptionResult(BaseModel):
    """Segments of one chunk, timed relative to the chunk start."""

    chunk_index: int = Field(0, ge=0)
    segments: list[Segment] = Field(default_factory=list)


class DetectedLanguage(BaseModel):
    """Result of the script-ratio language heuristic."""

    language: str = Field(..., description="Language tag, e.g. 'zh' or 'en'.")
    ratio: float = Field(0.0, ge=0.0, le=1.0, description="Share of target-script characters.")


class MergedTranscript(BaseModel):
    """Globally indexed transcript with absolute times."""

    model_config = ConfigDict(populate_by_name=True)

    segments: list[Segment] = Field(default_factory=list, alias="transcript")
    detected_language: str | None = Field(None, alias="detectedLanguage")
    was_split: bool = Field(False, alias="wasSplit")
    total_chunks: int = Field(1, ge=0, alias="totalChunks")

    @property
    def text(self) -> str:
        """All segment texts joined by single spaces."""
        return " ".join(segment.text.strip() for segment in self.segments)
