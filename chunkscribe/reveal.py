"""Typewriter-style replay of a finished transcript.

Presentation only: the transcript is already complete, the revealer just
paces it out one character per tick. Iteration is cooperative; a consumer
cancels by closing the generator, by calling :meth:`StreamingRevealer.cancel`
or by setting the shared cancel event. A pending tick wait wakes up as soon
as the event is set.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from dataclasses import dataclass

from chunkscribe.models import MergedTranscript, Segment
from chunkscribe.utils.constant import DEFAULT_REVEAL_TICK_MS

__all__ = ["RevealSnapshot", "StreamingRevealer", "reveal"]


@dataclass(frozen=True)
class RevealSnapshot:
    """Visible state after one tick.

    Attributes:
        segments: Fully revealed segments followed by the active one, whose
            text is truncated to ``revealed_chars``.
        active_index: Index of the segment being revealed.
        revealed_chars: Characters of the active segment shown so far.
        done: ``True`` on the final snapshot.
    """

    segments: tuple[Segment, ...]
    active_index: int
    revealed_chars: int
    done: bool


class StreamingRevealer:
    """Replay *transcript* one character per tick.

    Args:
        transcript: Completed transcript to replay.
        tick_interval_ms: Delay before each tick; ``0`` disables pacing.
        cancel_event: Optional shared event; setting it stops the replay.
    """

    def __init__(
        self,
        transcript: MergedTranscript,
        tick_interval_ms: int = DEFAULT_REVEAL_TICK_MS,
        cancel_event: threading.Event | None = None,
    ) -> None:
        if tick_interval_ms < 0:
            raise ValueError("tick_interval_ms must be >= 0")
        self._segments = list(transcript.segments)
        self._interval = tick_interval_ms / 1000
        self._cancel = cancel_event if cancel_event is not None else threading.Event()
        self._segment_index = 0
        self._char_index = 0
        self._finished = False

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    @property
    def finished(self) -> bool:
        return self._finished

    def cancel(self) -> None:
        """Stop the replay; a waiting tick returns immediately."""
        self._cancel.set()

    def reset(self) -> None:
        """Rewind to the first character and clear cancellation."""
        self._cancel.clear()
        self._segment_index = 0
        self._char_index = 0
        self._finished = False

    def _wait_tick(self) -> bool:
        """Sleep one tick; return ``False`` if cancelled meanwhile."""
        if self._interval > 0:
            return not self._cancel.wait(self._interval)
        return not self._cancel.is_set()

    def _snapshot(self) -> RevealSnapshot:
        active = self._segments[self._segment_index]
        visible = self._segments[: self._segment_index]
        visible.append(active.model_copy(update={"text": active.text[: self._char_index]}))
        done = self._segment_index == len(self._segments) - 1 and self._char_index >= len(active.text)
        return RevealSnapshot(
            segments=tuple(visible),
            active_index=self._segment_index,
            revealed_chars=self._char_index,
            done=done,
        )

    def snapshots(self) -> Iterator[RevealSnapshot]:
        """Yield one snapshot per revealed character.

        Segments with empty text are shown whole in a single tick. Once the
        replay finished or was cancelled, nothing is yielded until
        :meth:`reset`.
        """
        while not self._finished and self._segment_index < len(self._segments):
            if not self._wait_tick():
                return

            text = self._segments[self._segment_index].text
            self._char_index = min(self._char_index + 1, len(text))
            snapshot = self._snapshot()
            if self._char_index >= len(text):
                if snapshot.done:
                    self._finished = True
                else:
                    self._segment_index += 1
                    self._char_index = 0
            yield snapshot

        self._finished = True


def reveal(
    transcript: MergedTranscript,
    tick_interval_ms: int = DEFAULT_REVEAL_TICK_MS,
    cancel_event: threading.Event | None = None,
) -> Iterator[RevealSnapshot]:
    """Convenience generator over :meth:`StreamingRevealer.snapshots`."""
    yield from StreamingRevealer(transcript, tick_interval_ms, cancel_event).snapshots()
