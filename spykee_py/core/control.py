"""
Command frame serialization for Spykee.

This module builds the command frames sent to the robot during a session:
login, wheel movement, dock control, stream control, volume and sound
effects. Every function returns a complete frame ready for send_all().
"""

from dataclasses import dataclass
from typing import Tuple

from .frame import encode_frame
from .protocol import (
    CommandType,
    DockCommand,
    Movement,
    SoundEffect,
    StreamType,
    REVERSE_BASE,
    SPEED_MIN,
    SPEED_MAX,
    VOLUME_MIN,
    VOLUME_MAX,
)

# Login strings are sent as ISO-8859-1 with a one-byte length prefix
LOGIN_ENCODING = "iso-8859-1"
LOGIN_FIELD_MAX_LENGTH = 0xFF


def _check_range(name: str, value: int, low: int, high: int) -> int:
    value = int(value)
    if not low <= value <= high:
        raise ValueError(f"{name} must be in [{low}, {high}], got {value}")
    return value


def _length_prefixed(name: str, text: str) -> bytes:
    raw = text.encode(LOGIN_ENCODING)
    if len(raw) > LOGIN_FIELD_MAX_LENGTH:
        raise ValueError(
            f"{name} too long: {len(raw)} bytes (max {LOGIN_FIELD_MAX_LENGTH})"
        )
    return bytes([len(raw)]) + raw


@dataclass
class MotorSpeeds:
    """
    Configured wheel speeds, each in [0, 100].

    Reverse motion is encoded as 255 - speed, so backward at 50 sends 205
    on both wheels and a left turn at 15 sends (240, 15).
    """
    forward: int = 100
    backward: int = 50
    turning: int = 15

    def __post_init__(self):
        for name in ("forward", "backward", "turning"):
            _check_range(f"{name} speed", getattr(self, name), SPEED_MIN, SPEED_MAX)

    def command_for(self, movement: Movement) -> Tuple[int, int]:
        """Return the (left, right) wheel bytes for a movement intent."""
        if movement is Movement.FORWARD:
            return self.forward, self.forward
        if movement is Movement.BACKWARD:
            reverse = REVERSE_BASE - self.backward
            return reverse, reverse
        if movement is Movement.LEFT:
            return REVERSE_BASE - self.turning, self.turning
        if movement is Movement.RIGHT:
            return self.turning, REVERSE_BASE - self.turning
        return 0, 0


def encode_login(username: str, password: str) -> bytes:
    """
    Build the login frame.

    Payload: [user_len, user..., pass_len, pass...]; the frame length is
    therefore user_len + pass_len + 2.

    Raises:
        ValueError: If either string is longer than 255 bytes
    """
    payload = _length_prefixed("username", username) + _length_prefixed("password", password)
    return encode_frame(CommandType.LOGIN, payload)


def encode_move(left: int, right: int) -> bytes:
    """
    Build a wheel movement frame.

    Args:
        left: Left wheel byte (0-255)
        right: Right wheel byte (0-255)
    """
    left = _check_range("left speed", left, 0, 0xFF)
    right = _check_range("right speed", right, 0, 0xFF)
    return encode_frame(CommandType.MOVE, bytes([left, right]))


def encode_stop() -> bytes:
    """Build the frame that stops both wheels."""
    return encode_move(0, 0)


def encode_dock_control(command: DockCommand) -> bytes:
    """Build a dock control frame."""
    return encode_frame(CommandType.DOCK_CONTROL, bytes([DockCommand(command)]))


def encode_dock() -> bytes:
    return encode_dock_control(DockCommand.DOCK)


def encode_undock() -> bytes:
    return encode_dock_control(DockCommand.UNDOCK)


def encode_cancel_dock() -> bytes:
    return encode_dock_control(DockCommand.CANCEL_DOCK)


def encode_stream(stream: StreamType, enabled: bool) -> bytes:
    """
    Build a stream control frame.

    Args:
        stream: VIDEO or AUDIO
        enabled: Start (True) or stop (False) the stream
    """
    return encode_frame(
        CommandType.STREAM_CONTROL, bytes([StreamType(stream), 1 if enabled else 0])
    )


def encode_volume(volume: int) -> bytes:
    """
    Build a set-volume frame.

    Raises:
        ValueError: If volume is outside [0, 100]
    """
    volume = _check_range("volume", volume, VOLUME_MIN, VOLUME_MAX)
    return encode_frame(CommandType.SET_VOLUME, bytes([volume]))


def encode_sound_effect(effect: SoundEffect) -> bytes:
    """Build a frame that plays one of the robot's built-in sound effects."""
    return encode_frame(CommandType.SOUND_EFFECT, bytes([SoundEffect(effect)]))


__all__ = [
    "MotorSpeeds",
    "encode_login",
    "encode_move",
    "encode_stop",
    "encode_dock_control",
    "encode_dock",
    "encode_undock",
    "encode_cancel_dock",
    "encode_stream",
    "encode_volume",
    "encode_sound_effect",
]
