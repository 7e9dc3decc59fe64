"""Resilient per-chunk transcription client.

Wraps a :class:`RecognitionService` with bounded retries and exponential
backoff. Retrying is modelled as a small state machine
(``ATTEMPTING -> SUCCEEDED | EXHAUSTED``) driven by the pure
:func:`backoff_delay_ms`, so the policy can be tested without any clock.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from chunkscribe.config import RetryConfig
from chunkscribe.errors import ChunkTranscriptionError, EmptyResultError
from chunkscribe.models import ChunkTranscriptionResult
from chunkscribe.transcription.normalize import normalize_response

__all__ = [
    "RecognitionService",
    "ResilientTranscriptionClient",
    "RetryMachine",
    "RetryState",
    "backoff_delay_ms",
    "normalize_language_hint",
]

logger = logging.getLogger(__name__)

class RecognitionService(Protocol):
    """External speech recognition collaborator."""

    def recognize(self, payload: bytes, *, media_type: str, language: str | None) -> Any:
        """Recognise speech in *payload*.

        Parameters:
            payload (bytes): Audio container bytes.
            media_type (str): Media type of *payload*, e.g. ``audio/wav``.
            language (str | None): ISO-639-1 style hint, ``None`` for auto-detect.

        Returns:
            Any: A segment-list mapping, a bare string or a ``{"text": ...}``
                mapping.
        """


class RetryState(Enum):
    ATTEMPTING = "attempting"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


def backoff_delay_ms(attempt: int, base_ms: int = 1000, cap_ms: int = 5000) -> int:
    """Return the delay after failed *attempt* (0-based): ``min(base * 2**attempt, cap)``."""
    if attempt < 0:
        raise ValueError("attempt must be >= 0")
    return min(base_ms * (2**attempt), cap_ms)


@dataclass
class RetryMachine:
    """Retry bookkeeping for one request.

    ``attempt`` is the 0-based index of the attempt in flight.
    """

    max_retries: int
    base_ms: int = 1000
    cap_ms: int = 5000
    attempt: int = 0
    state: RetryState = RetryState.ATTEMPTING
    last_error: BaseException | None = None

    @property
    def attempts(self) -> int:
        """Attempts made so far, the one in flight included."""
        return self.attempt + 1

    def succeed(self) -> None:
        self.state = RetryState.SUCCEEDED

    def fail(self, error: BaseException, *, retryable: bool = True) -> int | None:
        """Record a failed attempt.

        Returns:
            int | None: Milliseconds to wait before the next attempt, or
                ``None`` once the machine is exhausted.
        """
        self.last_error = error
        if not retryable or self.attempt >= self.max_retries:
            self.state = RetryState.EXHAUSTED
            return None
        delay = backoff_delay_ms(self.attempt, self.base_ms, self.cap_ms)
        self.attempt += 1
        return delay


def normalize_language_hint(language: str | None) -> str | None:
    """Map ``"auto"``/empty hints to ``None`` and trim the rest."""
    if language is None:
        return None
    language = language.strip()
    if not language or language.lower() == "auto":
        return None
    return language


class ResilientTranscriptionClient:
    """Invoke the recognition service with bounded retries.

    Args:
        service: The recognition collaborator.
        config: Retry bounds and backoff timing.
        sleep: Blocking sleep taking seconds; injectable for tests.
    """

    def __init__(
        self,
        service: RecognitionService,
        config: RetryConfig | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._service = service
        self.config = config or RetryConfig()
        self._sleep = sleep

    def transcribe(
        self,
        payload: bytes,
        language_hint: str | None = "auto",
        max_retries: int | None = None,
        *,
        media_type: str = "audio/wav",
        chunk_index: int = 0,
    ) -> ChunkTranscriptionResult:
        """Transcribe one payload, retrying transient failures.

        Each attempt resends the same payload. A response that decodes to no
        text raises immediately without a retry.

        Raises:
            ChunkTranscriptionError: When every attempt failed.
            EmptyResultError: When the service answered without usable text.
        """
        retries = self.config.max_retries if max_retries is None else max_retries
        if retries < 0:
            raise ValueError("max_retries must be >= 0")

        language = normalize_language_hint(language_hint)
        machine = RetryMachine(
            max_retries=retries,
            base_ms=self.config.base_delay_ms,
            cap_ms=self.config.max_delay_ms,
        )
        label = f"chunk {chunk_index + 1}"

        while True:
            if machine.attempt:
                logger.info(f"Transcribing {label} (retry {machine.attempt}/{retries})")
            else:
                logger.info(f"Transcribing {label} ({len(payload)} bytes, language={language or 'auto'})")

            try:
                raw = self._service.recognize(payload, media_type=media_type, language=language)
            except EmptyResultError:
                raise
            except Exception as exc:
                retryable = getattr(exc, "retryable", True)
                logger.warning(
                    f"Transcription of {label} failed "
                    f"(attempt {machine.attempts}/{retries + 1}): {exc}"
                )
                delay_ms = machine.fail(exc, retryable=retryable)
                if delay_ms is None:
                    raise ChunkTranscriptionError(
                        attempts=machine.attempts,
                        last_error=exc,
                        chunk_index=chunk_index,
                    ) from exc
                logger.info(f"Waiting {delay_ms}ms before retrying {label}")
                self._sleep(delay_ms / 1000)
                continue

            result = normalize_response(raw, chunk_index=chunk_index)
            machine.succeed()
            logger.info(f"Transcribed {label}: {len(result.segments)} segment(s)")
            return result
