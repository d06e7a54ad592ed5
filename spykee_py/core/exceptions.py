"""
spykee_py/core/exceptions.py

Exception classes for protocol and playback errors.

Socket-level failures live in spykee_py.core.socket.types and video decode
failures in spykee_py.core.decoder.exceptions.
"""


__all__ = [
    'ProtocolError',
    'FramingError',
    'PlaybackError',
]


class ProtocolError(Exception):
    """Base exception for malformed data received from the robot."""
    pass


class FramingError(ProtocolError):
    """Raised when a frame header does not start with the magic bytes."""
    pass


class PlaybackError(Exception):
    """Raised by an audio sink when a clip cannot be played."""
    pass
