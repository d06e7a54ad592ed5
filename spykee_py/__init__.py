"""
spykee-py - Python client for the Spykee robot

This package provides functionality to:
- Log in to a Spykee robot over TCP
- Drive the motors, dock and undock
- Receive battery, dock, video (JPEG) and audio frames
- Play the robot's audio with a pacing buffer

Example:
    >>> from spykee_py import SpykeeClient, ClientConfig
    >>>
    >>> config = ClientConfig(host="192.168.1.20", username="admin", password="admin")
    >>> client = SpykeeClient(config)
    >>> if client.connect():
    ...     client.activate()
    ...     client.move_forward()
"""

from .core import (
    SpykeeSocket,
    SocketConfig,
    SocketError,
    SocketConnectionError,
    SocketWriteError,
    # Protocol types
    CommandType,
    DeviceMessageType,
    DockState,
    Movement,
    SoundEffect,
    StreamType,
    ProtocolError,
    # Events
    EventCallbacks,
    # Audio
    AudioPacingBuffer,
    AudioSink,
    SoundDevicePlayer,
    SOUNDDEVICE_AVAILABLE,
)
from .client import SpykeeClient, ClientConfig, ClientState, SessionPhase, connect_to_robot

__version__ = "0.1.0"
__all__ = [
    # Socket
    "SpykeeSocket",
    "SocketConfig",
    "SocketError",
    "SocketConnectionError",
    "SocketWriteError",
    # Client
    "SpykeeClient",
    "ClientConfig",
    "ClientState",
    "SessionPhase",
    "connect_to_robot",
    # Protocol
    "CommandType",
    "DeviceMessageType",
    "DockState",
    "Movement",
    "SoundEffect",
    "StreamType",
    "ProtocolError",
    # Events
    "EventCallbacks",
    # Audio
    "AudioPacingBuffer",
    "AudioSink",
    "SoundDevicePlayer",
    "SOUNDDEVICE_AVAILABLE",
]
