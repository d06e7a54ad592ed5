"""
Base Socket Class

This module provides the SpykeeSocket class that owns the TCP connection
to the robot and exposes blocking "send all" and "receive exactly N bytes"
primitives.

Only the reader thread reads from the socket; command senders write to it.
Writes are serialized by a dedicated lock so frames from concurrent
callers never interleave.
"""

import socket
import threading
import logging
from typing import Optional

from .types import (
    SocketConfig,
    SocketState,
    SocketConnectionError,
    SocketReadError,
    SocketWriteError,
)

logger = logging.getLogger(__name__)


class SpykeeSocket:
    """
    TCP connection to a Spykee robot

    Handles low-level socket operations including:
    - Connection establishment
    - Exact-size reads and complete writes
    - Connection state management
    - Interrupting a blocked reader by closing

    No reconnection is attempted: once the socket fails or is closed it
    stays closed.

    Example:
        >>> sock = SpykeeSocket(SocketConfig(host="192.168.1.20"))
        >>> sock.connect()
        >>> sock.send_all(frame)
        >>> header = sock.recv_exactly(5)
        >>> sock.close()
    """

    def __init__(self, config: SocketConfig, sock: Optional[socket.socket] = None):
        """
        Initialize socket

        Args:
            config: Socket configuration
            sock: Already connected socket to adopt (e.g. one end of a
                socketpair); connect() then only applies socket options
        """
        self.config = config
        self._socket: Optional[socket.socket] = sock
        self._state = SocketState.DISCONNECTED
        self._lock = threading.RLock()
        self._send_lock = threading.Lock()
        self._closed = False

    @property
    def state(self) -> SocketState:
        """Get current socket state"""
        with self._lock:
            return self._state

    @property
    def is_connected(self) -> bool:
        """Check if socket is connected"""
        with self._lock:
            return self._state == SocketState.CONNECTED

    @property
    def address(self) -> str:
        return f"{self.config.host}:{self.config.port}"

    def connect(self) -> None:
        """
        Establish the TCP connection

        Raises:
            SocketConnectionError: If the host is unreachable, refuses the
                connection, or the socket was already closed
        """
        with self._lock:
            if self._closed:
                raise SocketConnectionError("Socket is closed")
            if self._state == SocketState.CONNECTED:
                logger.warning(f"Socket to {self.address} already connected")
                return
            self._state = SocketState.CONNECTING

        try:
            sock = self._socket
            if sock is None:
                logger.debug(f"Connecting to {self.address}")
                sock = socket.create_connection(
                    (self.config.host, self.config.port),
                    timeout=self.config.connect_timeout,
                )
            sock.settimeout(self.config.read_timeout)
            if self.config.tcp_nodelay and sock.family in (socket.AF_INET, socket.AF_INET6):
                sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        except socket.timeout:
            self._fail()
            raise SocketConnectionError(f"Connection timeout to {self.address}")
        except ConnectionRefusedError:
            self._fail()
            raise SocketConnectionError(f"Connection refused by {self.address}")
        except OSError as e:
            self._fail()
            raise SocketConnectionError(f"Failed to connect to {self.address}: {e}")

        with self._lock:
            self._socket = sock
            self._state = SocketState.CONNECTED

        logger.info(f"Socket connected to {self.address}")

    def _fail(self) -> None:
        with self._lock:
            self._state = SocketState.ERROR

    def _require_socket(self, error_type) -> socket.socket:
        with self._lock:
            if not self._socket or self._state != SocketState.CONNECTED:
                raise error_type(f"Socket to {self.address} not connected")
            return self._socket

    def recv(self, size: int) -> bytes:
        """
        Receive up to `size` bytes

        Raises:
            SocketReadError: If the peer closed, the read timed out, or the
                connection failed
        """
        sock = self._require_socket(SocketReadError)

        try:
            data = sock.recv(size)
        except socket.timeout:
            self._fail()
            raise SocketReadError("Receive timeout")
        except OSError as e:
            self._fail()
            raise SocketReadError(f"Receive error: {e}")

        if not data:
            self._fail()
            raise SocketReadError("Connection closed by remote")
        return data

    def recv_exactly(self, size: int) -> bytes:
        """
        Receive exactly `size` bytes

        A short read is a connection failure, never a partial frame.

        Raises:
            SocketReadError: If the stream ends or fails before `size` bytes
        """
        data = bytearray()
        remaining = size

        while remaining > 0:
            chunk = self.recv(min(remaining, self.config.buffer_size))
            data.extend(chunk)
            remaining -= len(chunk)

        return bytes(data)

    def send_all(self, data: bytes) -> None:
        """
        Send all of `data`

        Raises:
            SocketWriteError: If the socket is closed or the send fails
        """
        sock = self._require_socket(SocketWriteError)

        with self._send_lock:
            try:
                sock.sendall(data)
            except OSError as e:
                self._fail()
                raise SocketWriteError(f"Send error: {e}")

    def interrupt(self) -> None:
        """Unblock a pending recv() without releasing the socket"""
        with self._lock:
            if self._socket:
                try:
                    self._socket.shutdown(socket.SHUT_RDWR)
                except OSError:
                    pass

    def close(self) -> None:
        """Close socket connection"""
        with self._lock:
            if self._closed:
                return

            self._closed = True
            self._state = SocketState.DISCONNECTED

            if self._socket:
                try:
                    self._socket.shutdown(socket.SHUT_RDWR)
                except OSError:
                    pass  # Not connected or already shut down

                self._socket.close()
                self._socket = None

                logger.debug(f"Socket to {self.address} closed")
