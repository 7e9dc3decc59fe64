"""Unit tests for scoped replay interruption."""

from __future__ import annotations

import signal
import threading

import pytest

from chunkscribe.utils.cancel import interrupt_replay


def test_signal_sets_event_only_inside_scope() -> None:
    before = signal.getsignal(signal.SIGINT)

    with interrupt_replay() as stop_event:
        handler = signal.getsignal(signal.SIGINT)
        assert handler is not before
        signal.raise_signal(signal.SIGINT)
        assert stop_event.is_set()

    assert signal.getsignal(signal.SIGINT) is before


def test_sigterm_routed_and_restored() -> None:
    before = signal.getsignal(signal.SIGTERM)
    event = threading.Event()

    with interrupt_replay(event) as stop_event:
        assert stop_event is event
        signal.getsignal(signal.SIGTERM)(signal.SIGTERM, None)  # type: ignore[operator]

    assert event.is_set()
    assert signal.getsignal(signal.SIGTERM) is before


def test_handlers_restored_when_replay_raises() -> None:
    before = signal.getsignal(signal.SIGINT)

    with pytest.raises(RuntimeError), interrupt_replay():
        raise RuntimeError("render failed")

    assert signal.getsignal(signal.SIGINT) is before


def test_off_main_thread_leaves_signals_alone() -> None:
    before = signal.getsignal(signal.SIGINT)
    seen: list[object] = []

    def _worker() -> None:
        with interrupt_replay() as stop_event:
            seen.append(signal.getsignal(signal.SIGINT))
            seen.append(stop_event)

    thread = threading.Thread(target=_worker)
    thread.start()
    thread.join()

    assert seen[0] is before
    assert isinstance(seen[1], threading.Event)
