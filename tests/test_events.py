"""Tests for event dispatch."""

import threading

from spykee_py.core.events import BatteryLevel, Disconnected, EventDispatcher, VideoFrame


def test_process_events_in_order():
    seen = []
    dispatcher = EventDispatcher(seen.append)
    dispatcher.post(BatteryLevel(80))
    dispatcher.post(VideoFrame(b"jpeg"))
    assert dispatcher.pending == 2
    assert dispatcher.process_events() == 2
    assert seen == [BatteryLevel(80), VideoFrame(b"jpeg")]
    assert dispatcher.delivered == 2


def test_process_events_empty():
    dispatcher = EventDispatcher(lambda event: None)
    assert dispatcher.process_events() == 0
    assert dispatcher.process_events(timeout=0.05) == 0


def test_handler_error_does_not_stop_delivery(caplog):
    seen = []

    def handler(event):
        if isinstance(event, BatteryLevel):
            raise RuntimeError("boom")
        seen.append(event)

    dispatcher = EventDispatcher(handler)
    dispatcher.post(BatteryLevel(1))
    dispatcher.post(Disconnected("eof"))
    assert dispatcher.process_events() == 2
    assert seen == [Disconnected("eof")]
    assert "Error handling BatteryLevel" in caplog.text


def test_dispatch_thread():
    seen = []
    delivered = threading.Event()

    def handler(event):
        seen.append((event, threading.current_thread().name))
        delivered.set()

    dispatcher = EventDispatcher(handler)
    dispatcher.start()
    assert dispatcher.is_running
    dispatcher.post(BatteryLevel(42))
    assert delivered.wait(2.0)
    dispatcher.stop()
    assert not dispatcher.is_running
    assert seen == [(BatteryLevel(42), "SpykeeEvents")]


def test_stop_delivers_queued_events():
    seen = []
    dispatcher = EventDispatcher(seen.append)
    dispatcher.start()
    for level in range(5):
        dispatcher.post(BatteryLevel(level))
    dispatcher.stop()
    assert [event.percent for event in seen] == [0, 1, 2, 3, 4]
