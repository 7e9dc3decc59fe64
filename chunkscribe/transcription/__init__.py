"""Recognition client, service adapters and per-asset pipeline."""

from .client import (
    RecognitionService,
    ResilientTranscriptionClient,
    RetryMachine,
    RetryState,
    backoff_delay_ms,
)
from .normalize import normalize_response
from .pipeline import TranscriptionPipeline

__all__ = [
    "RecognitionService",
    "ResilientTranscriptionClient",
    "RetryMachine",
    "RetryState",
    "TranscriptionPipeline",
    "backoff_delay_ms",
    "normalize_response",
]
