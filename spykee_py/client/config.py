"""
Configuration and state for the Spykee client.

This module contains the configuration and state tracking dataclasses
for the Spykee client.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Callable
import numpy as np

from spykee_py.core.audio.sink import AudioSink
from spykee_py.core.device_msg import LoginResponse
from spykee_py.core.events import EventCallbacks
from spykee_py.core.protocol import (
    AUDIO_BUFFER_COUNT,
    AUDIO_DROP_THRESHOLD,
    AUDIO_SAMPLE_RATE,
    DEFAULT_PORT,
    DEFAULT_VOLUME,
    FORWARD_STOP_DELAY,
    TURN_STOP_DELAY,
)


@dataclass
class ClientConfig:
    """
    Configuration for the Spykee client.
    """
    # Connection settings
    host: str = "localhost"
    port: int = DEFAULT_PORT
    username: str = ""
    password: str = ""

    # Connection timeouts (read_timeout None = block until data or close)
    connect_timeout: float = 10.0
    read_timeout: Optional[float] = None
    tcp_nodelay: bool = True

    # Motor settings, speeds in [0, 100]
    forward_speed: int = 100
    backward_speed: int = 50
    turning_speed: int = 15
    forward_stop_delay: float = FORWARD_STOP_DELAY
    turn_stop_delay: float = TURN_STOP_DELAY

    # Streams enabled by activate()
    video: bool = True
    audio: bool = True
    default_volume: int = DEFAULT_VOLUME

    # Audio pacing
    audio_buffers: int = AUDIO_BUFFER_COUNT
    audio_drop_threshold: int = AUDIO_DROP_THRESHOLD
    audio_sample_rate: int = AUDIO_SAMPLE_RATE
    audio_sink: Optional[AudioSink] = None  # None = audio is counted but not played

    # Deliver events on a dedicated thread; if False call process_events()
    dispatch_thread: bool = True

    # Event callbacks
    callbacks: EventCallbacks = field(default_factory=EventCallbacks)

    # Decoded video frames (RGB, height x width x 3), requires PyAV
    frame_callback: Optional[Callable[[np.ndarray], None]] = None


class SessionPhase(Enum):
    """Lifecycle of a client session. CLOSED is terminal."""
    CREATED = "created"
    CONNECTING = "connecting"
    ACTIVE = "active"
    CLOSED = "closed"


@dataclass
class ClientState:
    """Client state tracking."""
    phase: SessionPhase = SessionPhase.CREATED
    login: Optional[LoginResponse] = None
    battery_level: Optional[int] = None
    close_reason: str = ""

    # Statistics
    video_frames: int = 0
    audio_clips: int = 0

    @property
    def connected(self) -> bool:
        return self.phase == SessionPhase.ACTIVE


__all__ = [
    "ClientConfig",
    "ClientState",
    "SessionPhase",
]
