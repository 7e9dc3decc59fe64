"""Configuration dataclasses for the transcription pipeline.

Each component receives the slice of settings it needs at construction time.
Defaults come from :mod:`chunkscribe.utils.constant`, which honours
environment overrides.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from chunkscribe.utils.constant import (
    DEFAULT_BACKOFF_BASE_MS,
    DEFAULT_BACKOFF_CAP_MS,
    DEFAULT_CHUNK_LEN_SEC,
    DEFAULT_CHUNK_THRESHOLD_SEC,
    DEFAULT_CHUNKING_ENABLED,
    DEFAULT_FALLBACK_LANGUAGE,
    DEFAULT_LANGUAGE_THRESHOLD,
    DEFAULT_MAX_RETRIES,
    DEFAULT_REQUEST_TIMEOUT_SEC,
    DEFAULT_REVEAL_TICK_MS,
    DEFAULT_TARGET_LANGUAGE,
    DEFAULT_TARGET_SAMPLE_RATE,
    MAX_FILE_SIZE_BYTES,
    SUPPORTED_MEDIA_TYPES,
)


@dataclass
class ChunkingConfig:
    """Groups audio splitting settings.

    Attributes:
        enabled: Split long assets into chunks when ``True``.
        chunk_len_sec: Length of each chunk in seconds.
        threshold_sec: Assets longer than this are split.
        target_sample_rate: Resample before encoding; ``None`` keeps the native rate.

    """

    enabled: bool = DEFAULT_CHUNKING_ENABLED
    chunk_len_sec: float = DEFAULT_CHUNK_LEN_SEC
    threshold_sec: float = DEFAULT_CHUNK_THRESHOLD_SEC
    target_sample_rate: int | None = DEFAULT_TARGET_SAMPLE_RATE or None


@dataclass
class RetryConfig:
    """Groups recognition retry settings.

    Attributes:
        max_retries: Additional attempts after the first one.
        base_delay_ms: Backoff delay before the first retry.
        max_delay_ms: Upper bound for any single backoff delay.
        request_timeout_sec: Budget for one recognition request.

    """

    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay_ms: int = DEFAULT_BACKOFF_BASE_MS
    max_delay_ms: int = DEFAULT_BACKOFF_CAP_MS
    request_timeout_sec: float = DEFAULT_REQUEST_TIMEOUT_SEC


@dataclass
class LanguageConfig:
    """Groups language heuristic settings.

    Attributes:
        target_language: Tag returned when the target script dominates.
        fallback_language: Tag returned otherwise.
        threshold: Ratio that must be strictly exceeded.

    """

    target_language: str = DEFAULT_TARGET_LANGUAGE
    fallback_language: str = DEFAULT_FALLBACK_LANGUAGE
    threshold: float = DEFAULT_LANGUAGE_THRESHOLD


@dataclass
class PipelineConfig:
    """Top-level settings for one :class:`TranscriptionPipeline`."""

    chunking: ChunkingConfig = field(default_factory=ChunkingConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    language: LanguageConfig = field(default_factory=LanguageConfig)
    max_file_size: int = MAX_FILE_SIZE_BYTES
    supported_media_types: frozenset[str] = SUPPORTED_MEDIA_TYPES


@dataclass
class OutputConfig:
    """Groups output-related settings.

    Attributes:
        output_dir: Directory to store output files.
        output_format: Desired output format extension.
        output_template: Filename template for outputs.
        overwrite: Overwrite existing files when ``True``.

    """

    output_dir: Path
    output_format: str
    output_template: str
    overwrite: bool = False


@dataclass
class UIConfig:
    """Groups UI and logging settings.

    Attributes:
        verbose: Enable detailed diagnostic output.
        quiet: Suppress non-error output.
        no_progress: Disable progress bars.
        reveal: Replay the transcript character by character.
        reveal_tick_ms: Reveal cadence in milliseconds.

    """

    verbose: bool = False
    quiet: bool = False
    no_progress: bool = False
    reveal: bool = False
    reveal_tick_ms: int = DEFAULT_REVEAL_TICK_MS
