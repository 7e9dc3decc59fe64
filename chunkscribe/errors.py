"""Exception taxonomy for the transcription pipeline.

Every failure that leaves the pipeline is exactly one of these types. Transient
transport problems are retried inside
:class:`chunkscribe.transcription.client.ResilientTranscriptionClient` and only
surface once the retry budget is spent.
"""

from __future__ import annotations

__all__ = [
    "ChunkscribeError",
    "AssetValidationError",
    "AudioDecodeError",
    "UnsupportedFormatError",
    "RecognitionServiceError",
    "ChunkTranscriptionError",
    "EmptyResultError",
    "describe_error",
]


class ChunkscribeError(Exception):
    """Base class for all pipeline errors."""


class AssetValidationError(ChunkscribeError):
    """The uploaded asset has an unsupported media type or is too large."""


class AudioDecodeError(ChunkscribeError):
    """The source asset cannot be parsed or decoded. Fatal, never retried."""


class UnsupportedFormatError(ChunkscribeError):
    """Decoded audio cannot be represented as a 16-bit PCM WAV container."""


class RecognitionServiceError(ChunkscribeError):
    """A single call to the recognition service failed.

    Attributes:
        status_code: HTTP status returned by the service, if any.
        retryable: ``False`` for failures that retrying cannot fix
            (bad credentials, rejected input).
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        retryable: bool = True,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable


class ChunkTranscriptionError(ChunkscribeError):
    """All attempts to transcribe one chunk failed.

    Attributes:
        attempts: Number of attempts made (``max_retries + 1`` on exhaustion).
        last_error: The underlying error of the final attempt.
        chunk_index: Index of the chunk within the run.
    """

    def __init__(self, attempts: int, last_error: BaseException, chunk_index: int = 0) -> None:
        super().__init__(
            f"Chunk {chunk_index + 1} failed after {attempts} attempt(s): {last_error}"
        )
        self.attempts = attempts
        self.last_error = last_error
        self.chunk_index = chunk_index


class EmptyResultError(ChunkscribeError):
    """Recognition succeeded but produced no usable text."""


# Substring of the underlying message -> user-facing explanation.
_FRIENDLY_MESSAGES: tuple[tuple[str, str], ...] = (
    ("prediction interrupted", "The transcription service is temporarily unavailable, please retry later."),
    ("rate limit", "Too many requests to the transcription service, please retry later."),
    ("timed out", "Audio processing timed out; try a shorter file or enable chunking."),
    ("invalid input", "Unsupported audio format; use a common format such as MP3 or WAV."),
    ("file too large", "The file is too large for the transcription service."),
)


def describe_error(exc: BaseException) -> str:
    """Classify an error into one human-readable message.

    Args:
        exc: Any exception raised by the pipeline.

    Returns:
        str: A single-line message suitable for end users.
    """
    cause = exc.last_error if isinstance(exc, ChunkTranscriptionError) else exc
    lowered = str(cause).lower()
    for needle, friendly in _FRIENDLY_MESSAGES:
        if needle in lowered:
            return friendly

    if isinstance(exc, AudioDecodeError):
        return f"The audio file is corrupt or in an unsupported format ({exc})."
    if isinstance(exc, UnsupportedFormatError):
        return f"The audio layout cannot be converted to 16-bit PCM ({exc})."
    if isinstance(exc, EmptyResultError):
        return "Transcription produced no text; check the audio quality and retry."
    if isinstance(exc, ChunkscribeError):
        return str(exc)
    return f"Unexpected error during transcription: {exc}"
