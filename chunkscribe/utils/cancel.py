"""Scoped Ctrl-C handling for the terminal transcript replay.

Outside :func:`interrupt_replay` SIGINT keeps its normal meaning, so a long
transcription still stops with ``KeyboardInterrupt``. Inside it, SIGINT and
SIGTERM only set the yielded event, which a
:class:`~chunkscribe.reveal.StreamingRevealer` watches to end the replay.
"""

from __future__ import annotations

import contextlib
import logging
import signal
import threading
from collections.abc import Iterator

logger = logging.getLogger(__name__)

REPLAY_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)


@contextlib.contextmanager
def interrupt_replay(stop_event: threading.Event | None = None) -> Iterator[threading.Event]:
    """Route SIGINT/SIGTERM to a stop event for the duration of a replay.

    Previous handlers are restored on exit, including when the replay raises.
    Off the main thread signals cannot be rerouted; the event is still
    yielded so callers can stop the replay themselves.

    Args:
        stop_event: Event to set on signal. A fresh one is created if omitted.

    Yields:
        threading.Event: The event a signal sets.
    """
    event = stop_event if stop_event is not None else threading.Event()
    if threading.current_thread() is not threading.main_thread():
        logger.debug("Not on the main thread, replay signals left untouched")
        yield event
        return

    def _stop_replay(signum: int, frame: object) -> None:
        logger.info(f"Received {signal.Signals(signum).name}, stopping transcript reveal")
        event.set()

    previous = {signum: signal.signal(signum, _stop_replay) for signum in REPLAY_SIGNALS}
    try:
        yield event
    finally:
        for signum, handler in previous.items():
            # None means the handler was installed outside Python.
            signal.signal(signum, handler if handler is not None else signal.SIG_DFL)
