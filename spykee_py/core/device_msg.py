"""
Device message reading for Spykee.

This module provides functionality to:
1. Read and parse the login response sent right after the login frame
2. Run a receiver thread that reads frames pushed by the robot
3. Turn each frame into an event (battery, video, audio, dock) and post it
   to the consumer's event queue

A read failure ends the receiver; no reconnection is attempted.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from .audio.pacing import AudioPacingBuffer
from .dock import DockTracker
from .events import (
    AudioReady,
    BatteryLevel,
    DeviceEvent,
    Disconnected,
    DockChanged,
    VideoFrame,
)
from .exceptions import ProtocolError
from .frame import decode_header, find_magic, format_hexdump
from .protocol import (
    DeviceMessageType,
    DockState,
    FRAME_HEADER_SIZE,
    FRAME_MAGIC,
    LOGIN_RESPONSE_MIN_LENGTH,
    command_name,
)
from .socket import SocketError, SpykeeSocket

logger = logging.getLogger(__name__)

LOGIN_TEXT_ENCODING = "iso-8859-1"


# ============================================================================
# Login Response
# ============================================================================

@dataclass
class LoginResponse:
    """
    Robot information returned after login.

    Attributes:
        names: The three name strings reported by the robot
        version: Firmware version string
        dock_state: Dock state at login time
    """
    names: Tuple[str, str, str]
    version: str
    dock_state: DockState


def parse_login_response(body: bytes) -> LoginResponse:
    """
    Parse the body of a login response.

    Layout: [flags, n1_len, n1..., n2_len, n2..., n3_len, n3...,
             ver_len, ver..., dock]; dock == 0 means docked.

    Raises:
        ProtocolError: If the body is shorter than 8 bytes or truncated
    """
    if len(body) < LOGIN_RESPONSE_MIN_LENGTH:
        raise ProtocolError(
            f"Login response too short: {len(body)} bytes "
            f"(min {LOGIN_RESPONSE_MIN_LENGTH})"
        )

    pos = 1  # Skip flags byte
    fields = []
    for _ in range(4):
        if pos >= len(body):
            raise ProtocolError(f"Login response truncated at offset {pos}")
        length = body[pos]
        pos += 1
        if pos + length > len(body):
            raise ProtocolError(
                f"Login response field of {length} bytes exceeds body at offset {pos}"
            )
        fields.append(body[pos:pos + length].decode(LOGIN_TEXT_ENCODING))
        pos += length

    if pos >= len(body):
        raise ProtocolError("Login response missing dock state byte")
    dock_state = DockState.DOCKED if body[pos] == 0 else DockState.UNDOCKED

    return LoginResponse(
        names=(fields[0], fields[1], fields[2]),
        version=fields[3],
        dock_state=dock_state,
    )


def read_login_response(sock: SpykeeSocket) -> bytes:
    """
    Read the raw login response body.

    The fifth header byte is the body length (a single byte, unlike the
    two-byte length of regular frames).

    Raises:
        SocketReadError: If the connection fails before the body is read
    """
    header = sock.recv_exactly(FRAME_HEADER_SIZE)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(format_hexdump(header, "recv"))
    if header[:2] != FRAME_MAGIC:
        logger.warning(f"Login response has unexpected magic: {header[:2].hex(' ')}")

    length = header[4]
    body = sock.recv_exactly(length) if length else b""
    if body and logger.isEnabledFor(logging.DEBUG):
        logger.debug(format_hexdump(body, "recv"))
    return body


# ============================================================================
# Receiver Thread
# ============================================================================

class DeviceMessageReceiver:
    """
    Receiver thread for frames pushed by the robot.

    Reads frame headers and payloads from the socket, updates dock state,
    feeds audio into the pacing buffer, and posts events for the consumer.

    Example:
        >>> receiver = DeviceMessageReceiver(
        ...     socket=sock,
        ...     post=dispatcher.post,
        ...     dock=DockTracker(),
        ...     audio=AudioPacingBuffer(sink),
        ... )
        >>> receiver.start()
        >>> receiver.stop()
    """

    def __init__(
        self,
        socket: SpykeeSocket,
        post: Callable[[DeviceEvent], None],
        dock: DockTracker,
        audio: Optional[AudioPacingBuffer] = None,
        on_terminated: Optional[Callable[[str], None]] = None,
    ):
        """
        Initialize device message receiver.

        Args:
            socket: Connected robot socket
            post: Queues an event for the consumer context
            dock: Dock state tracker updated by DOCK frames
            audio: Pacing buffer fed with audio payloads (None = drop audio)
            on_terminated: Called with the reason once the loop has ended
        """
        self._socket = socket
        self._post = post
        self._dock = dock
        self._audio = audio
        self._on_terminated = on_terminated

        self._handlers: Dict[int, Callable[[bytes], None]] = {
            DeviceMessageType.AUDIO: self._process_audio,
            DeviceMessageType.VIDEO_FRAME: self._process_video,
            DeviceMessageType.BATTERY_LEVEL: self._process_battery,
            DeviceMessageType.DOCK: self._process_dock,
        }

        # Threading
        self._thread: Optional[threading.Thread] = None
        self._stopped = threading.Event()
        self._termination_reason: Optional[str] = None

        # Statistics
        self._frames_received = 0
        self._unknown_frames = 0
        self._desyncs = 0
        self._bytes_discarded = 0

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def termination_reason(self) -> Optional[str]:
        return self._termination_reason

    @property
    def frames_received(self) -> int:
        return self._frames_received

    @property
    def desyncs(self) -> int:
        return self._desyncs

    @property
    def bytes_discarded(self) -> int:
        return self._bytes_discarded

    def start(self) -> None:
        """Start the receiver thread."""
        if self._thread is not None:
            logger.warning("Receiver thread already running")
            return

        self._stopped.clear()
        self._thread = threading.Thread(
            target=self._run_receiver_loop,
            name="SpykeeReceiver",
            daemon=True
        )
        self._thread.start()
        logger.info("Device message receiver thread started")

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the receiver thread and wait for it to finish."""
        if self._thread is None:
            return

        logger.info("Stopping device message receiver...")
        self._stopped.set()

        # Shut the socket down to interrupt the blocking recv
        self._socket.interrupt()

        if self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("Receiver thread did not stop gracefully")

        self._thread = None
        logger.info("Device message receiver stopped")

    def _run_receiver_loop(self) -> None:
        """Main receiver loop (runs in dedicated thread)."""
        reason = "receiver stopped"
        try:
            while not self._stopped.is_set():
                command, payload = self._read_frame()
                self._frames_received += 1
                self._process_frame(command, payload)
        except SocketError as e:
            reason = "connection closed" if self._stopped.is_set() else str(e)
            if not self._stopped.is_set():
                logger.error(f"Receiver socket error: {e}")
        except Exception as e:
            reason = f"receiver error: {e}"
            logger.error(f"Receiver loop error: {e}", exc_info=True)
        finally:
            self._termination_reason = reason
            logger.info(f"Device receiver loop ended ({reason})")
            self._post(Disconnected(reason))
            if self._on_terminated is not None:
                self._on_terminated(reason)

    def _read_frame(self) -> Tuple[int, bytes]:
        """
        Read one complete frame.

        If the header does not start with the magic bytes, bytes are
        discarded up to the next possible frame start and reading resumes
        from there.

        Raises:
            SocketError: If the connection fails
        """
        header = self._socket.recv_exactly(FRAME_HEADER_SIZE)

        discarded = 0
        while header[:2] != FRAME_MAGIC:
            offset = find_magic(header)
            discarded += offset
            header = header[offset:] + self._socket.recv_exactly(offset)

        if discarded:
            self._desyncs += 1
            self._bytes_discarded += discarded
            logger.warning(
                f"Frame stream desynchronized, discarded {discarded} bytes "
                f"(desyncs: {self._desyncs})"
            )

        command, length = decode_header(header)
        payload = self._socket.recv_exactly(length) if length else b""
        return command, payload

    def _process_frame(self, command: int, payload: bytes) -> None:
        handler = self._handlers.get(command)
        if handler is None:
            self._unknown_frames += 1
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    f"Discarding {command_name(command)} frame, {len(payload)} bytes\n"
                    f"{format_hexdump(payload, 'recv')}"
                )
            return
        handler(payload)

    def _process_battery(self, payload: bytes) -> None:
        if not payload:
            logger.warning("Empty battery level frame")
            return
        level = payload[0]
        logger.debug(f"Battery level: {level}%")
        self._post(BatteryLevel(level))

    def _process_video(self, payload: bytes) -> None:
        self._post(VideoFrame(payload))

    def _process_audio(self, payload: bytes) -> None:
        if self._audio is not None:
            self._audio.push(payload)
        self._post(AudioReady())

    def _process_dock(self, payload: bytes) -> None:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(format_hexdump(payload, "dock"))
        if not payload:
            logger.warning("Empty dock status frame")
            return
        state = self._dock.on_status(payload[0])
        if state is not None:
            self._post(DockChanged(state))


__all__ = [
    "LoginResponse",
    "parse_login_response",
    "read_login_response",
    "DeviceMessageReceiver",
]
