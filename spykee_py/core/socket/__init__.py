"""
Socket Communication Package

This package provides the socket communication layer for the Spykee
client. A single TCP connection carries login, commands, and both
media streams.
"""

# Export types and exceptions
from .types import (
    SocketState,
    SocketConfig,
    SocketError,
    SocketConnectionError,
    SocketReadError,
    SocketWriteError,
)

# Export socket class
from .base import SpykeeSocket

__all__ = [
    # Types
    "SocketState",
    "SocketConfig",
    # Exceptions
    "SocketError",
    "SocketConnectionError",
    "SocketReadError",
    "SocketWriteError",
    # Socket
    "SpykeeSocket",
]
