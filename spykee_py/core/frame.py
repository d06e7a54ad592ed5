"""
spykee_py/core/frame.py

Frame codec for the Spykee protocol.

Wire format (all frames, both directions):

    +-----+-----+---------+--------+--------+-------------------+
    | 'P' | 'K' | command | len_hi | len_lo | payload (len) ... |
    +-----+-----+---------+--------+--------+-------------------+

The codec is pure: it never touches a socket. Callers read the 5 header
bytes, decode them, then read exactly `length` payload bytes.
"""

import struct
from typing import Tuple

from .exceptions import FramingError
from .protocol import FRAME_HEADER_SIZE, FRAME_MAGIC, FRAME_MAX_PAYLOAD


__all__ = [
    'encode_frame',
    'decode_header',
    'find_magic',
    'format_hexdump',
]

_HEADER = struct.Struct(">2sBH")

# Hexdump layout
HEXDUMP_MAX_BYTES = 256
HEXDUMP_BYTES_PER_LINE = 32
HEXDUMP_GROUP = 8


def encode_frame(command: int, payload: bytes = b"") -> bytes:
    """
    Build a complete frame.

    Args:
        command: Command ID (0-255)
        payload: Frame payload (at most 65535 bytes)

    Returns:
        Header followed by payload

    Raises:
        ValueError: If command or payload length is out of range
    """
    if not 0 <= command <= 0xFF:
        raise ValueError(f"Command ID out of range: {command}")
    if len(payload) > FRAME_MAX_PAYLOAD:
        raise ValueError(
            f"Payload too large: {len(payload)} bytes (max {FRAME_MAX_PAYLOAD})"
        )
    return _HEADER.pack(FRAME_MAGIC, command, len(payload)) + bytes(payload)


def decode_header(header: bytes) -> Tuple[int, int]:
    """
    Decode a frame header.

    Args:
        header: Exactly 5 header bytes

    Returns:
        Tuple of (command, payload_length)

    Raises:
        ValueError: If header is not 5 bytes long
        FramingError: If the magic bytes do not match
    """
    if len(header) != FRAME_HEADER_SIZE:
        raise ValueError(
            f"Frame header must be {FRAME_HEADER_SIZE} bytes, got {len(header)}"
        )
    magic, command, length = _HEADER.unpack(header)
    if magic != FRAME_MAGIC:
        raise FramingError(f"Bad frame magic: {bytes(header).hex(' ')}")
    return command, length


def find_magic(data: bytes) -> int:
    """
    Find where the next frame could start in a misaligned buffer.

    Returns the offset of the first b"PK", or of a trailing b"P" that may be
    completed by the next byte read. Returns len(data) if neither is present,
    meaning every byte can be discarded.
    """
    index = bytes(data).find(FRAME_MAGIC)
    if index >= 0:
        return index
    if data and data[-1:] == FRAME_MAGIC[:1]:
        return len(data) - 1
    return len(data)


def format_hexdump(data: bytes, tag: str = "") -> str:
    """
    Format bytes as a hex and ASCII dump for debug logging.

    At most 256 bytes are shown, 32 per line, with an extra space after
    every group of 8.
    """
    data = bytes(data[:HEXDUMP_MAX_BYTES])
    lines = []
    for start in range(0, len(data), HEXDUMP_BYTES_PER_LINE):
        chunk = data[start:start + HEXDUMP_BYTES_PER_LINE]
        hex_groups = []
        ascii_groups = []
        for group in range(0, HEXDUMP_BYTES_PER_LINE, HEXDUMP_GROUP):
            part = chunk[group:group + HEXDUMP_GROUP]
            hex_groups.append(" ".join(f"{b:02x}" for b in part).ljust(HEXDUMP_GROUP * 3 - 1))
            ascii_groups.append("".join(chr(b) if 0x20 <= b <= 0x7E else "." for b in part))
        prefix = f"{tag} " if tag else ""
        lines.append(f"{prefix}{'  '.join(hex_groups)}  {' '.join(ascii_groups).rstrip()}")
    return "\n".join(lines)
