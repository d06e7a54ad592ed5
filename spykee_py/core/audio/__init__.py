"""
Audio subsystem for spykee_py.

This package provides PCM conversion, WAV clip packaging, the pacing
(jitter) buffer, and clip playback for the robot's audio stream.
"""

from spykee_py.core.audio.wave import (
    convert_s16le_to_u8,
    build_wave_header,
    build_wave_clip,
    read_wave_samples,
)
from spykee_py.core.audio.sink import AudioSink
from spykee_py.core.audio.pacing import AudioPacingBuffer, PacingStats

# SoundDevice player (optional, requires sounddevice)
from spykee_py.core.audio.sounddevice_player import (
    SOUNDDEVICE_AVAILABLE,
    SoundDevicePlayer,
)

__all__ = [
    # Conversion and packaging
    'convert_s16le_to_u8',
    'build_wave_header',
    'build_wave_clip',
    'read_wave_samples',

    # Pacing
    'AudioPacingBuffer',
    'PacingStats',

    # Sinks
    'AudioSink',
    'SoundDevicePlayer',

    # Availability flags
    'SOUNDDEVICE_AVAILABLE',
]
