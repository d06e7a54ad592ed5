"""Tests for the PK frame codec."""

import pytest

from spykee_py.core.exceptions import FramingError, ProtocolError
from spykee_py.core.frame import decode_header, encode_frame, find_magic, format_hexdump


def test_encode_frame_header_and_payload():
    assert encode_frame(0x05, b"\x64\x64") == b"PK\x05\x00\x02\x64\x64"


def test_encode_frame_empty_payload():
    assert encode_frame(0x10) == b"PK\x10\x00\x00"


def test_encode_frame_big_endian_length():
    frame = encode_frame(0x02, bytes(0x0102))
    assert frame[:5] == b"PK\x02\x01\x02"
    assert len(frame) == 5 + 0x0102


def test_encode_frame_rejects_bad_input():
    with pytest.raises(ValueError):
        encode_frame(256)
    with pytest.raises(ValueError):
        encode_frame(1, bytes(0x10000))


def test_decode_header():
    assert decode_header(b"PK\x03\x00\x01") == (3, 1)
    assert decode_header(b"PK\x02\xff\xff") == (2, 0xFFFF)


def test_decode_header_bad_magic():
    with pytest.raises(FramingError):
        decode_header(b"XK\x03\x00\x01")


def test_framing_error_is_protocol_error():
    with pytest.raises(ProtocolError):
        decode_header(b"\x00\x00\x00\x00\x00")


def test_decode_header_wrong_size():
    with pytest.raises(ValueError):
        decode_header(b"PK\x03")


@pytest.mark.parametrize("data, expected", [
    (b"PK\x01\x00\x00", 0),
    (b"xyzPK", 3),
    (b"abcdP", 4),
    (b"abcde", 5),
    (b"", 0),
])
def test_find_magic(data, expected):
    assert find_magic(data) == expected


def test_format_hexdump_layout():
    dump = format_hexdump(bytes(range(40)), "recv")
    lines = dump.split("\n")
    assert len(lines) == 2
    assert lines[0].startswith("recv 00 01 02 03 04 05 06 07  08 09")
    assert lines[1].startswith("recv 20 21 22 23 24 25 26 27")


def test_format_hexdump_truncates():
    dump = format_hexdump(bytes(1000))
    assert len(dump.split("\n")) == 8


def test_format_hexdump_ascii_column():
    assert format_hexdump(b"PK\x00").endswith("PK.")


@pytest.mark.parametrize("command", [0, 255])
@pytest.mark.parametrize("size", [0, 1, 256, 0xFFFF])
def test_encode_then_decode(command, size):
    payload = bytes(i & 0xFF for i in range(size))
    frame = encode_frame(command, payload)
    decoded_command, length = decode_header(frame[:5])
    assert (decoded_command, frame[5:5 + length]) == (command, payload)
    assert len(frame) == 5 + length
