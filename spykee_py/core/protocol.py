"""
spykee_py/core/protocol.py

Protocol constants and enumerations for the Spykee client.

This module defines all protocol-level constants used for communication
with the robot, including frame layout, command IDs and payload codes.
"""

from enum import Enum, IntEnum
from typing import Final


# ============================================================================
# Frame Layout
# ============================================================================

# Every frame starts with a 5-byte header:
# ['P', 'K', command, length_hi, length_lo] followed by `length` payload bytes.

FRAME_MAGIC: Final[bytes] = b"PK"
FRAME_HEADER_SIZE: Final[int] = 5
FRAME_MAX_PAYLOAD: Final[int] = 0xFFFF

# Login response bodies shorter than this carry no robot information
LOGIN_RESPONSE_MIN_LENGTH: Final[int] = 8

DEFAULT_PORT: Final[int] = 9000


# ============================================================================
# Command IDs (Client -> Robot)
# ============================================================================

class CommandType(IntEnum):
    """Types of command frames sent from client to robot."""
    MOVE = 0x05
    SOUND_EFFECT = 0x07
    SET_VOLUME = 0x09
    LOGIN = 0x0A
    STREAM_CONTROL = 0x0F
    DOCK_CONTROL = 0x10


# ============================================================================
# Event IDs (Robot -> Client)
# ============================================================================

class DeviceMessageType(IntEnum):
    """Types of frames pushed from robot to client."""
    AUDIO = 1
    VIDEO_FRAME = 2
    BATTERY_LEVEL = 3
    DOCK = 16


class DockStatus(IntEnum):
    """Payload values of a DOCK frame."""
    UNDOCKED = 1
    DOCKED = 2


# ============================================================================
# Command Payload Codes
# ============================================================================

class DockCommand(IntEnum):
    """Payload byte of a DOCK_CONTROL frame."""
    UNDOCK = 5
    DOCK = 6
    CANCEL_DOCK = 7


class StreamType(IntEnum):
    """Stream identifiers used by STREAM_CONTROL."""
    VIDEO = 1
    AUDIO = 2


class SoundEffect(IntEnum):
    """Built-in sound effects played by the robot's speaker."""
    ALARM = 0
    BOMB = 1
    LASER = 2
    AH_AH_AH = 3
    ENGINE = 4
    ROBOT = 5
    CUSTOM1 = 6
    CUSTOM2 = 7


class DockState(Enum):
    """Dock state tracked by the client."""
    DOCKED = "docked"
    UNDOCKED = "undocked"
    DOCKING = "docking"


class Movement(Enum):
    """Named movement intents mapped to wheel speeds."""
    FORWARD = "forward"
    BACKWARD = "backward"
    LEFT = "left"
    RIGHT = "right"
    STOP = "stop"


# ============================================================================
# Command Limits
# ============================================================================

SPEED_MIN: Final[int] = 0
SPEED_MAX: Final[int] = 100
VOLUME_MIN: Final[int] = 0
VOLUME_MAX: Final[int] = 100
DEFAULT_VOLUME: Final[int] = 50

# Wheel speed byte for "reverse at speed s" is 255 - s
REVERSE_BASE: Final[int] = 255

# Delay (seconds) before the motor is stopped after a movement command
FORWARD_STOP_DELAY: Final[float] = 0.3
TURN_STOP_DELAY: Final[float] = 0.2


# ============================================================================
# Audio Stream
# ============================================================================

AUDIO_SAMPLE_RATE: Final[int] = 16000
AUDIO_CHANNELS: Final[int] = 1
AUDIO_BITS_PER_SAMPLE: Final[int] = 8

# Ring of clips between the network reader and playback
AUDIO_BUFFER_COUNT: Final[int] = 16

# Once this many clips are waiting, the oldest one is dropped on arrival
AUDIO_DROP_THRESHOLD: Final[int] = 8


# ============================================================================
# Utilities
# ============================================================================

def command_name(command: int) -> str:
    """Return a readable name for a frame command ID."""
    for enum_type in (DeviceMessageType, CommandType):
        try:
            return enum_type(command).name
        except ValueError:
            continue
    return f"unknown(0x{command:02x})"
