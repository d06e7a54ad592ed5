"""
Shared fixtures for spykee-py tests.

The robot is simulated with one end of a socketpair; the client side is
adopted by a SpykeeSocket so the real framing code runs over a real socket.
"""

import socket
import struct

import pytest

from spykee_py.core.audio.sink import AudioSink
from spykee_py.core.exceptions import PlaybackError
from spykee_py.core.frame import encode_frame
from spykee_py.core.socket import SocketConfig, SpykeeSocket


def build_login_body(dock: int = 0, names=("Spykee", "robot", "01"), version: str = "1.0.6") -> bytes:
    """Login response body: flags, three names, version, dock byte."""
    body = bytearray([0x01])
    for text in (*names, version):
        raw = text.encode("iso-8859-1")
        body.append(len(raw))
        body.extend(raw)
    body.append(dock)
    return bytes(body)


class FakeRobot:
    """Robot end of a socketpair."""

    def __init__(self, sock: socket.socket):
        self.sock = sock
        self.sock.settimeout(5.0)

    def recv_exactly(self, size: int) -> bytes:
        data = bytearray()
        while len(data) < size:
            chunk = self.sock.recv(size - len(data))
            if not chunk:
                raise ConnectionError("client closed")
            data.extend(chunk)
        return bytes(data)

    def recv_frame(self):
        """Return (command, payload) of the next frame sent by the client."""
        header = self.recv_exactly(5)
        assert header[:2] == b"PK"
        length = struct.unpack(">H", header[3:5])[0]
        return header[2], self.recv_exactly(length)

    def send(self, data: bytes) -> None:
        self.sock.sendall(data)

    def send_frame(self, command: int, payload: bytes = b"") -> None:
        self.send(encode_frame(command, payload))

    def send_login_response(self, body: bytes) -> None:
        self.send(b"PK\x0a\x00" + bytes([len(body)]) + body)

    def close(self) -> None:
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self.sock.close()


class FakeSink(AudioSink):
    """AudioSink that records clips instead of playing them."""

    def __init__(self, failures: int = 0):
        super().__init__()
        self.clips = []
        self.playing = False
        self.failures = failures
        self.closed = False

    @property
    def is_playing(self) -> bool:
        return self.playing

    def play(self, clip: bytes) -> None:
        if self.failures:
            self.failures -= 1
            raise PlaybackError("device busy")
        self.clips.append(clip)
        self.playing = True

    def finish(self) -> None:
        self.playing = False
        self._notify_finished()

    def close(self) -> None:
        self.closed = True
        self.playing = False


@pytest.fixture
def socket_pair():
    """(SpykeeSocket, FakeRobot) connected to each other."""
    client_end, robot_end = socket.socketpair()
    sock = SpykeeSocket(SocketConfig(host="robot", read_timeout=5.0), sock=client_end)
    robot = FakeRobot(robot_end)
    yield sock, robot
    sock.close()
    robot.close()


@pytest.fixture
def fake_sink():
    return FakeSink()
