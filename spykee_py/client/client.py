"""
Main Spykee client implementation.

This module provides the SpykeeClient class (one session with one robot)
which integrates the socket, command encoding, receiver thread, dock state,
motor debouncing, audio pacing and event delivery.

Session lifecycle:
    created -> connect() (login handshake, receiver started) -> active
    active  -> close() or connection failure -> closed (not reusable)
"""

import logging
import threading
from typing import Optional

from spykee_py.core.audio.pacing import AudioPacingBuffer, PacingStats
from spykee_py.core.control import (
    MotorSpeeds,
    encode_cancel_dock,
    encode_dock,
    encode_login,
    encode_move,
    encode_sound_effect,
    encode_stop,
    encode_stream,
    encode_undock,
    encode_volume,
)
from spykee_py.core.decoder import DecodeError, JpegFrameDecoder
from spykee_py.core.device_msg import (
    DeviceMessageReceiver,
    LoginResponse,
    parse_login_response,
    read_login_response,
)
from spykee_py.core.dock import DockTracker
from spykee_py.core.events import (
    AudioReady,
    BatteryLevel,
    DeviceEvent,
    Disconnected,
    DockChanged,
    EventDispatcher,
    PlaybackFinished,
    VideoFrame,
)
from spykee_py.core.exceptions import ProtocolError
from spykee_py.core.frame import format_hexdump
from spykee_py.core.motor import MotorDebounceTimer
from spykee_py.core.protocol import DockState, Movement, SoundEffect, StreamType
from spykee_py.core.socket import (
    SocketConfig,
    SocketError,
    SocketWriteError,
    SpykeeSocket,
)

# Import from this package
from spykee_py.client.config import ClientConfig, ClientState, SessionPhase

logger = logging.getLogger(__name__)


class SpykeeClient:
    """
    One control session with a Spykee robot.

    Commands are sent from the caller's thread. Frames pushed by the robot
    are read on a receiver thread and delivered as events on the consumer
    context (a dispatcher thread, or the caller of process_events()).

    Example:
        >>> config = ClientConfig(host="192.168.1.20", username="admin", password="admin")
        >>> with SpykeeClient(config) as client:
        ...     client.connect()
        ...     client.activate()
        ...     client.move_forward()
    """

    def __init__(self, config: Optional[ClientConfig] = None,
                 transport: Optional[SpykeeSocket] = None):
        """
        Initialize the Spykee client.

        Args:
            config: Client configuration (uses defaults if None)
            transport: Socket to use instead of opening one from the config
        """
        self.config = config or ClientConfig()
        self.state = ClientState()

        self._lock = threading.RLock()
        self._closed_event = threading.Event()

        self._socket = transport or SpykeeSocket(SocketConfig(
            host=self.config.host,
            port=self.config.port,
            connect_timeout=self.config.connect_timeout,
            read_timeout=self.config.read_timeout,
            tcp_nodelay=self.config.tcp_nodelay,
        ))

        self._speeds = MotorSpeeds(
            forward=self.config.forward_speed,
            backward=self.config.backward_speed,
            turning=self.config.turning_speed,
        )
        self._dock = DockTracker()
        self._motor = MotorDebounceTimer(send_stop=self._send_motor_stop)

        self._audio = AudioPacingBuffer(
            sink=self.config.audio_sink,
            capacity=self.config.audio_buffers,
            drop_threshold=self.config.audio_drop_threshold,
            sample_rate=self.config.audio_sample_rate,
        )
        if self.config.audio_sink is not None:
            self.config.audio_sink.set_completion_callback(self.on_playback_finished)

        self._dispatcher = EventDispatcher(handler=self._handle_event)
        self._receiver: Optional[DeviceMessageReceiver] = None
        self._video_decoder: Optional[JpegFrameDecoder] = None

        logger.info(
            f"Initialized Spykee client for {self.config.host}:{self.config.port}"
        )

    # ========================================================================
    # Lifecycle
    # ========================================================================

    def connect(self) -> bool:
        """
        Connect, log in, and start receiving.

        Sends the login frame, reads exactly one login response to learn
        the dock state, then starts the receiver thread.

        Returns:
            True if connection successful

        Raises:
            SocketConnectionError: If the robot cannot be reached
            SocketError: If the login exchange fails (the session is closed)
            ValueError: If username or password is longer than 255 bytes
            RuntimeError: If this session was already used
        """
        login_frame = encode_login(self.config.username, self.config.password)

        with self._lock:
            if self.state.phase != SessionPhase.CREATED:
                raise RuntimeError(
                    f"Session is {self.state.phase.value}; create a new SpykeeClient to reconnect"
                )
            self.state.phase = SessionPhase.CONNECTING

        logger.info(f"Connecting to {self._socket.address}")
        try:
            self._socket.connect()
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(format_hexdump(login_frame[:5], "send"))
            self._socket.send_all(login_frame)
            body = read_login_response(self._socket)
        except SocketError as e:
            logger.error(f"Connection to {self._socket.address} failed: {e}")
            self._socket.close()
            self._mark_closed(str(e))
            raise

        try:
            login = parse_login_response(body)
            logger.info(
                f"Logged in: {' '.join(login.names)} {login.version}, "
                f"dock state: {login.dock_state.value}"
            )
        except ProtocolError as e:
            logger.warning(f"Unusable login response, dock state unknown: {e}")
            login = None

        self.state.login = login
        self._dock.reset(login.dock_state if login else None)
        self._audio.reset()

        if self.config.frame_callback is not None and self._video_decoder is None:
            self._video_decoder = JpegFrameDecoder()

        self._receiver = DeviceMessageReceiver(
            socket=self._socket,
            post=self._dispatcher.post,
            dock=self._dock,
            audio=self._audio,
            on_terminated=self._on_receiver_terminated,
        )

        with self._lock:
            self.state.phase = SessionPhase.ACTIVE

        if self.config.dispatch_thread:
            self._dispatcher.start()
        self._receiver.start()

        logger.info(f"Connected to {self._socket.address}")
        return True

    def activate(self) -> None:
        """
        Prepare a freshly connected robot for driving.

        Undocks if docked, then enables the configured streams and sets the
        default volume.
        """
        if self.dock_state == DockState.DOCKED:
            self.undock()
        if self.config.video:
            self.start_video()
        if self.config.audio:
            self.start_audio()
        self.set_volume(self.config.default_volume)

    def close(self) -> None:
        """Close the session. Safe to call more than once."""
        with self._lock:
            already_closed = self.state.phase == SessionPhase.CLOSED
            self.state.phase = SessionPhase.CLOSED
            if not self.state.close_reason:
                self.state.close_reason = "closed by client"

        self._motor.cancel()

        if self._receiver is not None:
            self._receiver.stop()
            self._receiver = None

        self._socket.close()
        self._dispatcher.stop()

        if self.config.audio_sink is not None and not already_closed:
            self.config.audio_sink.close()

        self._closed_event.set()
        if not already_closed:
            stats = self._audio.stats()
            logger.info(
                f"Session closed (audio received: {stats.received}, played: {stats.played}, "
                f"skips: {stats.skips}, waits: {stats.waits})"
            )

    def disconnect(self) -> None:
        """Alias of close()."""
        self.close()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the session is closed.

        Returns:
            True if the session closed, False on timeout
        """
        return self._closed_event.wait(timeout)

    def _mark_closed(self, reason: str) -> None:
        with self._lock:
            self.state.phase = SessionPhase.CLOSED
            self.state.close_reason = reason
        self._closed_event.set()

    def _on_receiver_terminated(self, reason: str) -> None:
        """Receiver thread ended: the connection is gone for good."""
        with self._lock:
            if self.state.phase == SessionPhase.CLOSED:
                return
        logger.warning(f"Connection lost: {reason}")
        self._motor.cancel()
        self._socket.close()
        self._mark_closed(reason)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # ========================================================================
    # Properties
    # ========================================================================

    @property
    def is_connected(self) -> bool:
        with self._lock:
            return self.state.connected

    @property
    def dock_state(self) -> Optional[DockState]:
        """Current dock state, or None if the login response was unusable."""
        return self._dock.state

    @property
    def battery_level(self) -> Optional[int]:
        return self.state.battery_level

    @property
    def login_info(self) -> Optional[LoginResponse]:
        return self.state.login

    @property
    def speeds(self) -> MotorSpeeds:
        return self._speeds

    def audio_stats(self) -> PacingStats:
        return self._audio.stats()

    # ========================================================================
    # Commands
    # ========================================================================

    def _send(self, frame: bytes, description: str) -> None:
        """
        Send a command frame.

        Raises:
            SocketWriteError: If the session is not active or the send fails
        """
        with self._lock:
            if self.state.phase != SessionPhase.ACTIVE:
                raise SocketWriteError(
                    f"Cannot send {description}: session is {self.state.phase.value}"
                )
        logger.debug(f"Sending {description}: {frame.hex(' ')}")
        self._socket.send_all(frame)

    def move(self, movement: Movement) -> None:
        """
        Drive in a direction for a short time.

        The motor is stopped automatically after the movement's delay
        unless another movement command arrives first.
        """
        if movement is Movement.STOP:
            self.stop_motor()
            return

        left, right = self._speeds.command_for(movement)
        frame = encode_move(left, right)

        if movement is Movement.FORWARD:
            delay = self.config.forward_stop_delay
        else:
            delay = self.config.turn_stop_delay
        self._motor.arm(delay, send=lambda: self._send(frame, f"move {movement.value}"))

    def move_forward(self) -> None:
        self.move(Movement.FORWARD)

    def move_backward(self) -> None:
        self.move(Movement.BACKWARD)

    def move_left(self) -> None:
        self.move(Movement.LEFT)

    def move_right(self) -> None:
        self.move(Movement.RIGHT)

    def drive(self, left: int, right: int) -> None:
        """Send raw wheel bytes (0-255) without scheduling a stop."""
        self._send(encode_move(left, right), "drive")

    def stop_motor(self) -> None:
        """Stop both wheels now and cancel any pending delayed stop."""
        self._motor.cancel(send=lambda: self._send(encode_stop(), "stop"))

    def _send_motor_stop(self) -> None:
        self._send(encode_stop(), "delayed stop")

    def set_speeds(self, forward: Optional[int] = None, backward: Optional[int] = None,
                   turning: Optional[int] = None) -> None:
        """Change the movement speeds, each in [0, 100]."""
        self._speeds = MotorSpeeds(
            forward=self._speeds.forward if forward is None else forward,
            backward=self._speeds.backward if backward is None else backward,
            turning=self._speeds.turning if turning is None else turning,
        )

    def dock(self) -> None:
        """Start driving to the charging dock."""
        self._send(encode_dock(), "dock")
        self._dock.on_dock_sent()

    def undock(self) -> None:
        """Leave the charging dock."""
        self._send(encode_undock(), "undock")
        self._dock.on_undock_sent()

    def cancel_dock(self) -> None:
        """Abort a docking manoeuvre."""
        self._send(encode_cancel_dock(), "cancel dock")
        self._dock.on_cancel_dock_sent()

    def toggle_dock(self) -> Optional[DockState]:
        """
        Undock if docked, dock if undocked, cancel if docking.

        Returns:
            The resulting dock state
        """
        state = self.dock_state
        if state == DockState.DOCKED:
            self.undock()
        elif state == DockState.UNDOCKED:
            self.dock()
        elif state == DockState.DOCKING:
            self.cancel_dock()
        else:
            logger.warning("Dock state unknown, not toggling")
        return self.dock_state

    def set_stream(self, stream: StreamType, enabled: bool) -> None:
        self._send(
            encode_stream(stream, enabled),
            f"{'start' if enabled else 'stop'} {StreamType(stream).name.lower()}",
        )

    def start_video(self) -> None:
        self.set_stream(StreamType.VIDEO, True)

    def stop_video(self) -> None:
        self.set_stream(StreamType.VIDEO, False)

    def start_audio(self) -> None:
        self.set_stream(StreamType.AUDIO, True)

    def stop_audio(self) -> None:
        self.set_stream(StreamType.AUDIO, False)

    def set_volume(self, volume: int) -> None:
        """Set the robot's speaker volume (0-100)."""
        self._send(encode_volume(volume), f"volume {volume}")

    def play_sound_effect(self, effect: SoundEffect) -> None:
        """Play one of the robot's built-in sound effects."""
        effect = SoundEffect(effect)
        self._send(encode_sound_effect(effect), f"sound {effect.name.lower()}")

    # ========================================================================
    # Events (consumer context)
    # ========================================================================

    def process_events(self, timeout: Optional[float] = 0.0) -> int:
        """
        Deliver pending events on the calling thread.

        Only needed when config.dispatch_thread is False.

        Returns:
            Number of events delivered
        """
        return self._dispatcher.process_events(timeout)

    def on_playback_finished(self) -> None:
        """
        Report that the audio sink finished the previous clip.

        Safe to call from any thread; the next clip is pulled on the
        consumer context.
        """
        self._dispatcher.post(PlaybackFinished())

    def _handle_event(self, event: DeviceEvent) -> None:
        callbacks = self.config.callbacks

        if isinstance(event, BatteryLevel):
            self.state.battery_level = event.percent
            if callbacks.on_battery_level:
                callbacks.on_battery_level(event.percent)

        elif isinstance(event, VideoFrame):
            self.state.video_frames += 1
            if callbacks.on_video_frame:
                callbacks.on_video_frame(event.data)
            if self.config.frame_callback is not None and self._video_decoder is not None:
                self._decode_video_frame(event.data)

        elif isinstance(event, AudioReady):
            self.state.audio_clips += 1
            self._audio.start_if_idle()
            if callbacks.on_audio_clip_ready:
                callbacks.on_audio_clip_ready()

        elif isinstance(event, PlaybackFinished):
            self._audio.on_playback_finished()

        elif isinstance(event, DockChanged):
            if callbacks.on_dock_changed:
                callbacks.on_dock_changed(event.state)

        elif isinstance(event, Disconnected):
            if callbacks.on_disconnected:
                callbacks.on_disconnected(event.reason)

    def _decode_video_frame(self, data: bytes) -> None:
        try:
            image = self._video_decoder.decode(data)
        except DecodeError as e:
            logger.warning(f"Dropping video frame: {e}")
            return
        if image is not None:
            self.config.frame_callback(image)


# Convenience function
def connect_to_robot(
    host: str, port: int = ClientConfig.port, username: str = "",
    password: str = "", **kwargs
) -> SpykeeClient:
    """
    Connect to a Spykee robot.

    Args:
        host: Robot host
        port: Robot port
        username: Login name
        password: Login password
        **kwargs: Additional config options

    Returns:
        Connected SpykeeClient instance

    Example:
        >>> with connect_to_robot("192.168.1.20", username="admin", password="admin") as client:
        ...     client.activate()
        ...     client.play_sound_effect(SoundEffect.ALARM)
    """
    config = ClientConfig(host=host, port=port, username=username, password=password, **kwargs)
    client = SpykeeClient(config)
    client.connect()
    return client


def main():
    """Console entry point for spykee-connect command."""
    import argparse
    import sys

    parser = argparse.ArgumentParser(
        description="spykee-py - Connect to a Spykee robot"
    )
    parser.add_argument("--host", required=True, help="Robot host")
    parser.add_argument("--port", type=int, default=ClientConfig.port, help="Robot port")
    parser.add_argument("--user", default="admin", help="Login name")
    parser.add_argument("--password", default="admin", help="Login password")
    parser.add_argument("--no-audio", action="store_true", help="Disable audio")
    parser.add_argument("--no-video", action="store_true", help="Disable video")
    parser.add_argument("--volume", type=int, default=ClientConfig.default_volume,
                        help="Speaker volume (0-100)")
    parser.add_argument("--sound", choices=[e.name.lower() for e in SoundEffect],
                        help="Play a sound effect after connecting")
    dock_group = parser.add_mutually_exclusive_group()
    dock_group.add_argument("--dock", action="store_true", help="Drive to the dock")
    dock_group.add_argument("--undock", action="store_true", help="Leave the dock")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    from spykee_py.core.audio import SOUNDDEVICE_AVAILABLE, SoundDevicePlayer
    from spykee_py.core.events import EventCallbacks

    audio_sink = None
    if not args.no_audio:
        if SOUNDDEVICE_AVAILABLE:
            audio_sink = SoundDevicePlayer()
        else:
            logger.warning("sounddevice not installed, audio will not be played")

    config = ClientConfig(
        host=args.host,
        port=args.port,
        username=args.user,
        password=args.password,
        audio=not args.no_audio,
        video=not args.no_video,
        default_volume=args.volume,
        audio_sink=audio_sink,
        callbacks=EventCallbacks(
            on_battery_level=lambda level: logger.info(f"Battery level: {level}%"),
            on_dock_changed=lambda state: logger.info(f"Dock state: {state.value}"),
            on_disconnected=lambda reason: logger.info(f"Disconnected: {reason}"),
        ),
    )

    client = SpykeeClient(config)
    try:
        client.connect()
        client.activate()
        if args.dock:
            client.dock()
        elif args.undock and client.dock_state != DockState.UNDOCKED:
            client.undock()
        if args.sound:
            client.play_sound_effect(SoundEffect[args.sound.upper()])

        print("Press Ctrl+C to disconnect...")
        client.wait()
    except KeyboardInterrupt:
        print("\nDisconnected")
    except (SocketError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        client.close()


__all__ = [
    "SpykeeClient",
    "connect_to_robot",
    "main",
]
