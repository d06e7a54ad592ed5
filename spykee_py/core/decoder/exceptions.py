"""
spykee_py/core/decoder/exceptions.py

Exception classes for decoder errors.
"""


__all__ = [
    'DecoderError',
    'DecoderInitializationError',
    'DecodeError'
]


class DecoderError(Exception):
    """Base exception for decoder errors."""
    pass


class DecoderInitializationError(DecoderError):
    """Raised when decoder initialization fails."""
    pass


class DecodeError(DecoderError):
    """Raised when a frame cannot be decoded."""
    pass
