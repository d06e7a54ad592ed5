"""
Socket Types and Configuration

This module defines socket states, configuration, and exceptions
for Spykee socket communication.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..protocol import DEFAULT_PORT


class SocketState(Enum):
    """Socket connection state"""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


@dataclass
class SocketConfig:
    """
    Socket configuration

    Attributes:
        host: Robot host address
        port: Robot port number
        connect_timeout: Timeout for establishing the connection in seconds
        read_timeout: Timeout for blocking reads (None = block forever)
        buffer_size: Maximum bytes requested per recv() call
        tcp_nodelay: Enable TCP_NODELAY
    """

    host: str = "127.0.0.1"
    port: int = DEFAULT_PORT
    connect_timeout: float = 10.0
    read_timeout: Optional[float] = None
    buffer_size: int = 64 * 1024  # 64KB default buffer
    tcp_nodelay: bool = True


class SocketError(Exception):
    """Base exception for socket operations"""

    pass


class SocketConnectionError(SocketError):
    """Exception raised when connection fails"""

    pass


class SocketReadError(SocketError):
    """Exception raised when read operation fails or the peer closes"""

    pass


class SocketWriteError(SocketError):
    """Exception raised when write operation fails"""

    pass
