"""Project-wide constants for convenient reuse."""

# pylint: disable=line-too-long

from __future__ import annotations

import os
import sys
from typing import Final

from chunkscribe.utils.env_loader import load_project_env

# Ensure .env is loaded exactly once at import time for the whole project
if "pytest" not in sys.modules:
    load_project_env()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


# Length of each transcription chunk (seconds). Can be overridden by CHUNK_LEN_SEC.
DEFAULT_CHUNK_LEN_SEC: Final[float] = float(os.getenv("CHUNK_LEN_SEC", "300"))

# Assets longer than this (seconds) are split before recognition.
DEFAULT_CHUNK_THRESHOLD_SEC: Final[float] = float(os.getenv("CHUNK_THRESHOLD_SEC", "360"))

# Split long assets into chunks (False submits the whole asset in one request)
DEFAULT_CHUNKING_ENABLED: Final[bool] = _env_bool("CHUNKING_ENABLED", "True")

# Resample decoded audio before encoding chunks (0 keeps the native rate)
DEFAULT_TARGET_SAMPLE_RATE: Final[int] = int(os.getenv("TARGET_SAMPLE_RATE", "0"))

# Retry policy for the recognition service
DEFAULT_MAX_RETRIES: Final[int] = int(os.getenv("MAX_RETRIES", "2"))
DEFAULT_BACKOFF_BASE_MS: Final[int] = int(os.getenv("BACKOFF_BASE_MS", "1000"))
DEFAULT_BACKOFF_CAP_MS: Final[int] = int(os.getenv("BACKOFF_CAP_MS", "5000"))

# Upper bound for a single recognition request, polling included (seconds)
DEFAULT_REQUEST_TIMEOUT_SEC: Final[float] = float(os.getenv("REQUEST_TIMEOUT_SEC", "300"))
# Connect timeout for each HTTP call (seconds)
HTTP_CONNECT_TIMEOUT_SEC: Final[float] = float(os.getenv("HTTP_CONNECT_TIMEOUT_SEC", "10"))
# Delay between prediction status polls (seconds)
PREDICTION_POLL_INTERVAL_SEC: Final[float] = float(os.getenv("PREDICTION_POLL_INTERVAL_SEC", "1.0"))

# Typewriter reveal cadence (milliseconds per character)
DEFAULT_REVEAL_TICK_MS: Final[int] = int(os.getenv("REVEAL_TICK_MS", "20"))

# Language heuristic: share of target-script characters needed to pick the target
DEFAULT_LANGUAGE_THRESHOLD: Final[float] = float(os.getenv("LANGUAGE_THRESHOLD", "0.3"))
DEFAULT_TARGET_LANGUAGE: Final[str] = os.getenv("TARGET_LANGUAGE", "zh")
DEFAULT_FALLBACK_LANGUAGE: Final[str] = os.getenv("FALLBACK_LANGUAGE", "en")

# Speaker labels rotate over this many speakers
SPEAKER_ROTATION: Final[int] = int(os.getenv("SPEAKER_ROTATION", "3"))

# Upload limits
MAX_FILE_SIZE_MB: Final[int] = int(os.getenv("MAX_FILE_SIZE_MB", "50"))
MAX_FILE_SIZE_BYTES: Final[int] = MAX_FILE_SIZE_MB * 1024 * 1024

SUPPORTED_MEDIA_TYPES: Final[frozenset[str]] = frozenset({
    "audio/mpeg",
    "audio/mp3",
    "audio/wav",
    "audio/x-wav",
    "audio/wave",
    "audio/webm",
    "audio/ogg",
    "audio/flac",
    "audio/x-flac",
    "audio/mp4",
    "audio/x-m4a",
})

# Supported audio file extensions for CLI input resolution
SUPPORTED_AUDIO_EXTENSIONS: Final[frozenset[str]] = frozenset({
    ".wav",
    ".mp3",
    ".flac",
    ".ogg",
    ".m4a",
    ".webm",
})

# Replicate recognition service
REPLICATE_API_TOKEN: Final[str] = os.getenv("REPLICATE_API_TOKEN", "")
REPLICATE_API_URL: Final[str] = os.getenv("REPLICATE_API_URL", "https://api.replicate.com/v1")
WHISPER_MODEL_VERSION: Final[str] = os.getenv(
    "WHISPER_MODEL_VERSION",
    "8099696689d249cf8b122d833c36ac3f75505c666a395ca40ef26f68e7d3d16e",
)
