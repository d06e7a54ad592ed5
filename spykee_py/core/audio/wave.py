"""
PCM conversion and WAV clip packaging.

The robot streams signed 16-bit little-endian mono samples at 16 kHz. Each
network packet is converted to unsigned 8-bit samples (offset binary) and
wrapped in a minimal 44-byte RIFF/WAVE header so any player can handle it.
"""

import struct

import numpy as np

from ..protocol import AUDIO_BITS_PER_SAMPLE, AUDIO_CHANNELS, AUDIO_SAMPLE_RATE


__all__ = [
    'WAVE_HEADER_SIZE',
    'convert_s16le_to_u8',
    'build_wave_header',
    'build_wave_clip',
    'read_wave_samples',
]

WAVE_HEADER_SIZE = 44

# Offsets of the two per-clip fields in the header
WAVE_CHUNK_SIZE_OFFSET = 4
WAVE_DATA_SIZE_OFFSET = 40


def convert_s16le_to_u8(data: bytes) -> np.ndarray:
    """
    Convert signed 16-bit little-endian samples to unsigned 8-bit.

    sample8 = (sample16 + 32768) >> 8, so 0x0000 -> 128, 0x8000 (-32768) -> 0,
    0x7fff -> 255 and 0xffff (-1) -> 127. A trailing odd byte is dropped.

    Args:
        data: Raw PCM bytes

    Returns:
        uint8 array with one element per input sample
    """
    usable = len(data) - (len(data) % 2)
    samples = np.frombuffer(data[:usable], dtype="<i2").astype(np.int32)
    return ((samples + 0x8000) >> 8).astype(np.uint8)


def build_wave_header(
    data_size: int,
    sample_rate: int = AUDIO_SAMPLE_RATE,
    channels: int = AUDIO_CHANNELS,
    bits_per_sample: int = AUDIO_BITS_PER_SAMPLE,
) -> bytes:
    """
    Build a PCM WAV header for `data_size` bytes of sample data.

    The RIFF chunk size is data_size + 36.
    """
    block_align = channels * bits_per_sample // 8
    byte_rate = sample_rate * block_align
    return (
        b"RIFF"
        + struct.pack("<I", data_size + 36)
        + b"WAVE"
        + b"fmt "
        + struct.pack("<IHHIIHH", 16, 1, channels, sample_rate, byte_rate, block_align, bits_per_sample)
        + b"data"
        + struct.pack("<I", data_size)
    )


def build_wave_clip(samples: np.ndarray, sample_rate: int = AUDIO_SAMPLE_RATE) -> bytes:
    """Wrap unsigned 8-bit mono samples in a complete WAV file image."""
    data = samples.astype(np.uint8, copy=False).tobytes()
    return build_wave_header(len(data), sample_rate=sample_rate) + data


def read_wave_samples(clip: bytes) -> np.ndarray:
    """
    Extract float32 samples in [-1.0, 1.0) from a clip built by build_wave_clip().

    Raises:
        ValueError: If the clip is not an 8-bit mono PCM WAV image
    """
    if len(clip) < WAVE_HEADER_SIZE or clip[:4] != b"RIFF" or clip[8:12] != b"WAVE":
        raise ValueError("Not a WAV clip")
    audio_format, channels = struct.unpack_from("<HH", clip, 20)
    bits = struct.unpack_from("<H", clip, 34)[0]
    if audio_format != 1 or channels != 1 or bits != 8:
        raise ValueError(
            f"Unsupported WAV format: format={audio_format}, channels={channels}, bits={bits}"
        )
    data_size = struct.unpack_from("<I", clip, WAVE_DATA_SIZE_OFFSET)[0]
    data = np.frombuffer(clip, dtype=np.uint8, count=min(data_size, len(clip) - WAVE_HEADER_SIZE),
                         offset=WAVE_HEADER_SIZE)
    return (data.astype(np.float32) - 128.0) / 128.0
