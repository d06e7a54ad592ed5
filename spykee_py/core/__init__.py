"""
spykee_py Core Module

This module provides core functionality for the Spykee client:
- Socket communication layer
- Protocol definitions and frame codec
- Command frame serialization
- Receiver thread and event dispatch
- Dock state tracking and motor stop debouncing
- Audio pacing and playback, JPEG frame decoding
"""

# ============================================================================
# Socket Module
# ============================================================================
from .socket import (
    SpykeeSocket,
    SocketConfig,
    SocketState,
    SocketError,
    SocketConnectionError,
    SocketReadError,
    SocketWriteError,
)

# ============================================================================
# Protocol Module
# ============================================================================
from .protocol import (
    CommandType,
    DeviceMessageType,
    DockCommand,
    DockState,
    DockStatus,
    Movement,
    SoundEffect,
    StreamType,
    FRAME_HEADER_SIZE,
    FRAME_MAGIC,
    command_name,
)
from .exceptions import ProtocolError, FramingError, PlaybackError
from .frame import encode_frame, decode_header, find_magic, format_hexdump

# ============================================================================
# Control Module
# ============================================================================
from .control import (
    MotorSpeeds,
    encode_login,
    encode_move,
    encode_stop,
    encode_dock,
    encode_undock,
    encode_cancel_dock,
    encode_stream,
    encode_volume,
    encode_sound_effect,
)

# ============================================================================
# Receiver, Events and State
# ============================================================================
from .events import (
    BatteryLevel,
    VideoFrame,
    AudioReady,
    DockChanged,
    Disconnected,
    DeviceEvent,
    EventCallbacks,
    EventDispatcher,
)
from .device_msg import (
    LoginResponse,
    parse_login_response,
    read_login_response,
    DeviceMessageReceiver,
)
from .dock import DockTracker
from .motor import MotorDebounceTimer

# ============================================================================
# Audio and Video
# ============================================================================
from .audio import (
    AudioPacingBuffer,
    AudioSink,
    PacingStats,
    SoundDevicePlayer,
    SOUNDDEVICE_AVAILABLE,
)
from .decoder import JpegFrameDecoder, DecodeError

__all__ = [
    # Socket
    "SpykeeSocket",
    "SocketConfig",
    "SocketState",
    "SocketError",
    "SocketConnectionError",
    "SocketReadError",
    "SocketWriteError",
    # Protocol
    "CommandType",
    "DeviceMessageType",
    "DockCommand",
    "DockState",
    "DockStatus",
    "Movement",
    "SoundEffect",
    "StreamType",
    "FRAME_HEADER_SIZE",
    "FRAME_MAGIC",
    "command_name",
    "ProtocolError",
    "FramingError",
    "PlaybackError",
    "encode_frame",
    "decode_header",
    "find_magic",
    "format_hexdump",
    # Control
    "MotorSpeeds",
    "encode_login",
    "encode_move",
    "encode_stop",
    "encode_dock",
    "encode_undock",
    "encode_cancel_dock",
    "encode_stream",
    "encode_volume",
    "encode_sound_effect",
    # Receiver, events, state
    "BatteryLevel",
    "VideoFrame",
    "AudioReady",
    "DockChanged",
    "Disconnected",
    "DeviceEvent",
    "EventCallbacks",
    "EventDispatcher",
    "LoginResponse",
    "parse_login_response",
    "read_login_response",
    "DeviceMessageReceiver",
    "DockTracker",
    "MotorDebounceTimer",
    # Audio and video
    "AudioPacingBuffer",
    "AudioSink",
    "PacingStats",
    "SoundDevicePlayer",
    "SOUNDDEVICE_AVAILABLE",
    "JpegFrameDecoder",
    "DecodeError",
]
