"""Tests for login response parsing and the receiver thread."""

import queue
import threading

import pytest

from spykee_py.core.audio.pacing import AudioPacingBuffer
from spykee_py.core.device_msg import (
    DeviceMessageReceiver,
    parse_login_response,
    read_login_response,
)
from spykee_py.core.dock import DockTracker
from spykee_py.core.events import AudioReady, BatteryLevel, Disconnected, DockChanged, VideoFrame
from spykee_py.core.exceptions import ProtocolError
from spykee_py.core.protocol import DockState

from conftest import build_login_body


def test_parse_login_docked():
    login = parse_login_response(build_login_body(dock=0))
    assert login.names == ("Spykee", "robot", "01")
    assert login.version == "1.0.6"
    assert login.dock_state == DockState.DOCKED


def test_parse_login_undocked():
    assert parse_login_response(build_login_body(dock=1)).dock_state == DockState.UNDOCKED


def test_parse_login_too_short():
    with pytest.raises(ProtocolError):
        parse_login_response(b"\x01\x00\x00\x00\x00\x00\x00")


def test_parse_login_truncated_field():
    with pytest.raises(ProtocolError):
        parse_login_response(b"\x01\x09abc\x00\x00\x00\x00")


def test_parse_login_missing_dock_byte():
    body = build_login_body()[:-1]
    with pytest.raises(ProtocolError):
        parse_login_response(body)


def test_read_login_response(socket_pair):
    sock, robot = socket_pair
    sock.connect()
    body = build_login_body()
    robot.send_login_response(body)
    robot.send_frame(3, b"\x50")
    assert read_login_response(sock) == body
    # The following frame is left untouched
    assert sock.recv_exactly(6) == b"PK\x03\x00\x01\x50"


class ReceiverHarness:
    def __init__(self, sock, audio=None):
        self.events = queue.Queue()
        self.terminated = threading.Event()
        self.reason = None
        self.dock = DockTracker(DockState.DOCKED)
        self.receiver = DeviceMessageReceiver(
            socket=sock,
            post=self.events.put,
            dock=self.dock,
            audio=audio,
            on_terminated=self._on_terminated,
        )

    def _on_terminated(self, reason):
        self.reason = reason
        self.terminated.set()

    def next_event(self):
        return self.events.get(timeout=2.0)


@pytest.fixture
def harness(socket_pair):
    sock, robot = socket_pair
    sock.connect()
    h = ReceiverHarness(sock)
    h.receiver.start()
    yield h, robot
    h.receiver.stop()


def test_battery_and_video(harness):
    h, robot = harness
    robot.send_frame(3, b"\x57")
    robot.send_frame(2, b"\xff\xd8jpeg\xff\xd9")
    assert h.next_event() == BatteryLevel(0x57)
    assert h.next_event() == VideoFrame(b"\xff\xd8jpeg\xff\xd9")


def test_dock_status_updates_tracker(harness):
    h, robot = harness
    robot.send_frame(16, b"\x01")
    assert h.next_event() == DockChanged(DockState.UNDOCKED)
    assert h.dock.state == DockState.UNDOCKED
    robot.send_frame(16, b"\x02")
    assert h.next_event() == DockChanged(DockState.DOCKED)


def test_unknown_dock_status_emits_nothing(harness):
    h, robot = harness
    robot.send_frame(16, b"\x09")
    robot.send_frame(3, b"\x10")
    assert h.next_event() == BatteryLevel(0x10)
    assert h.dock.state == DockState.DOCKED


def test_unknown_frame_is_consumed(harness):
    h, robot = harness
    robot.send_frame(0x42, b"\x01\x02\x03PK\x03")
    robot.send_frame(3, b"\x20")
    assert h.next_event() == BatteryLevel(0x20)
    assert h.receiver.desyncs == 0


def test_resync_after_garbage(harness):
    h, robot = harness
    robot.send(b"xyz")
    robot.send_frame(3, b"\x33")
    assert h.next_event() == BatteryLevel(0x33)
    assert h.receiver.desyncs == 1
    assert h.receiver.bytes_discarded == 3


def test_end_of_stream_posts_disconnected(harness):
    h, robot = harness
    robot.close()
    event = h.next_event()
    assert isinstance(event, Disconnected)
    assert h.terminated.wait(2.0)
    assert h.reason == event.reason


def test_partial_frame_is_a_disconnect(harness):
    h, robot = harness
    robot.send(b"PK\x02\x00\x10abc")
    robot.close()
    assert isinstance(h.next_event(), Disconnected)


def test_audio_feeds_pacing_buffer(socket_pair, fake_sink):
    sock, robot = socket_pair
    sock.connect()
    pacing = AudioPacingBuffer(fake_sink)
    h = ReceiverHarness(sock, audio=pacing)
    h.receiver.start()
    try:
        robot.send_frame(1, bytes(4000))
        robot.send_frame(1, bytes(4000))
        assert h.next_event() == AudioReady()
        assert h.next_event() == AudioReady()
        assert pacing.stats().received == 2
    finally:
        h.receiver.stop()


def test_stop_interrupts_blocked_read(harness):
    h, robot = harness
    h.receiver.stop()
    assert not h.receiver.is_running
    assert isinstance(h.next_event(), Disconnected)


def test_hexdump_only_built_for_debug_logging(harness, monkeypatch, caplog):
    import logging

    import spykee_py.core.device_msg as device_msg

    dumps = []
    monkeypatch.setattr(device_msg, "format_hexdump", lambda data, tag="": dumps.append(tag) or "")
    h, robot = harness

    caplog.set_level(logging.INFO, logger="spykee_py.core.device_msg")
    robot.send_frame(16, b"\x01")
    robot.send_frame(0x42, b"\x00")
    robot.send_frame(3, b"\x01")
    assert h.next_event() == DockChanged(DockState.UNDOCKED)
    assert h.next_event() == BatteryLevel(1)
    assert dumps == []

    caplog.set_level(logging.DEBUG, logger="spykee_py.core.device_msg")
    robot.send_frame(16, b"\x02")
    assert h.next_event() == DockChanged(DockState.DOCKED)
    assert dumps == ["dock"]
