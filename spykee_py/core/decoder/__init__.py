"""
spykee_py/core/decoder

Video frame decoding for the Spykee video stream.
"""

from .exceptions import (
    DecoderError,
    DecoderInitializationError,
    DecodeError,
)
from .video import JpegFrameDecoder

__all__ = [
    'DecoderError',
    'DecoderInitializationError',
    'DecodeError',
    'JpegFrameDecoder',
]
