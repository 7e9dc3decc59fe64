"""Shared test fixtures for the chunkscribe test suite."""

from __future__ import annotations

import io
from collections.abc import Callable, Iterable
from typing import Any

import numpy as np
import pytest
import soundfile as sf

from chunkscribe.models import AudioAsset

# Low sample rate keeps multi-minute fixtures small.
TEST_SAMPLE_RATE = 1000


def wav_bytes(duration_sec: float, sr: int = TEST_SAMPLE_RATE, channels: int = 1) -> bytes:
    """Render a quiet sine tone as a 16-bit PCM WAV file in memory."""
    frames = int(round(duration_sec * sr))
    t = np.arange(frames, dtype=np.float64) / sr
    tone = 0.25 * np.sin(2 * np.pi * 110.0 * t)
    data = np.stack([tone] * channels, axis=1) if channels > 1 else tone
    buf = io.BytesIO()
    sf.write(buf, data, sr, format="WAV", subtype="PCM_16")
    return buf.getvalue()


@pytest.fixture
def make_wav_asset() -> Callable[..., AudioAsset]:
    """Factory for in-memory WAV assets of a given duration."""

    def _make(
        duration_sec: float,
        *,
        sr: int = TEST_SAMPLE_RATE,
        channels: int = 1,
        name: str = "tone.wav",
    ) -> AudioAsset:
        return AudioAsset(data=wav_bytes(duration_sec, sr, channels), media_type="audio/wav", name=name)

    return _make


class FakeService:
    """Scripted recognition service.

    Each call pops the next outcome: exceptions are raised, anything else is
    returned. The last outcome repeats once the script runs out.
    """

    def __init__(self, outcomes: Iterable[Any]) -> None:
        self.outcomes = list(outcomes)
        self.calls: list[dict[str, Any]] = []

    def recognize(self, payload: bytes, *, media_type: str, language: str | None) -> Any:
        self.calls.append({"payload": payload, "media_type": media_type, "language": language})
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        if callable(outcome):
            return outcome(payload)
        return outcome


@pytest.fixture
def fake_service() -> type[FakeService]:
    """Expose the scripted service class to tests."""
    return FakeService


@pytest.fixture
def sleeps() -> list[float]:
    """Collects the seconds passed to an injected sleep function."""
    return []


@pytest.fixture
def record_sleep(sleeps: list[float]) -> Callable[[float], None]:
    """Sleep replacement that records instead of blocking."""
    return sleeps.append


@pytest.fixture
def make_wav_bytes() -> Callable[..., bytes]:
    """Factory for raw WAV payloads, e.g. to write fixture files to disk."""
    return wav_bytes
