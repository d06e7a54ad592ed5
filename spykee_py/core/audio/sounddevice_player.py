"""
SoundDevice-based clip player for the Spykee audio stream.

This module provides an AudioSink built on the sounddevice library. Each
WAV clip handed over by the pacing buffer is decoded to float32 with NumPy
and played through its own OutputStream; the stream's finished callback
reports completion so the next clip can be pulled.

Resources:
- https://python-sounddevice.readthedocs.io/en/0.5.3/
- https://python-sounddevice.readthedocs.io/en/0.5.3/api/streams.html
"""

import logging
import threading
from typing import Optional, Any, TYPE_CHECKING

import numpy as np

# Import sounddevice
try:
    import sounddevice as sd
    SOUNDDEVICE_AVAILABLE = True
except ImportError:
    SOUNDDEVICE_AVAILABLE = False
    sd = None

from ..exceptions import PlaybackError
from ..protocol import AUDIO_CHANNELS, AUDIO_SAMPLE_RATE
from .sink import AudioSink
from .wave import read_wave_samples

logger = logging.getLogger(__name__)

# Type hint for callback flags (only used for type checking)
if TYPE_CHECKING and sd is not None:
    CallbackFlagsType = sd.CallbackFlags
else:
    CallbackFlagsType = Any

DEFAULT_BLOCKSIZE = 0  # 0 = optimal (variable) blocksize


class SoundDevicePlayer(AudioSink):
    """
    Clip player using sounddevice's OutputStream.

    One clip plays at a time. When the clip's samples run out the callback
    raises CallbackStop, the stream finishes, and the completion callback
    registered by the client is invoked (from the PortAudio thread).

    Example:
        >>> player = SoundDevicePlayer()
        >>> player.set_completion_callback(lambda: print("done"))
        >>> player.play(clip)  # WAV bytes from the pacing buffer
        >>> player.close()
    """

    def __init__(
        self,
        sample_rate: int = AUDIO_SAMPLE_RATE,
        device: Optional[Any] = None,
        blocksize: int = DEFAULT_BLOCKSIZE,
    ):
        """
        Initialize the sounddevice clip player.

        Args:
            sample_rate: Output sample rate (the robot streams 16 kHz)
            device: sounddevice output device (None = system default)
            blocksize: Number of frames per callback (0 = optimal/variable)
        """
        if not SOUNDDEVICE_AVAILABLE:
            raise RuntimeError(
                "sounddevice not available. Install with: pip install sounddevice"
            )
        super().__init__()

        self._sample_rate = sample_rate
        self._device = device
        self._blocksize = blocksize

        self._stream: Optional["sd.OutputStream"] = None
        self._lock = threading.Lock()
        self._samples: np.ndarray = np.zeros(0, dtype=np.float32)
        self._position = 0
        self._playing = False

        # Statistics
        self._clips_played = 0
        self._underflows = 0

    @property
    def is_playing(self) -> bool:
        with self._lock:
            return self._playing

    def play(self, clip: bytes) -> None:
        """
        Start playing a WAV clip.

        Raises:
            PlaybackError: If the clip is malformed or the stream fails
        """
        try:
            samples = read_wave_samples(clip)
        except ValueError as e:
            raise PlaybackError(f"Invalid clip: {e}")

        # Closing an unfinished stream must not report a completion
        with self._lock:
            self._playing = False
        self._close_stream()

        with self._lock:
            self._samples = samples
            self._position = 0
            self._playing = True

        try:
            self._stream = sd.OutputStream(
                samplerate=self._sample_rate,
                channels=AUDIO_CHANNELS,
                dtype="float32",
                device=self._device,
                blocksize=self._blocksize,
                callback=self._audio_callback,
                finished_callback=self._stream_finished,
            )
            self._stream.start()
        except sd.PortAudioError as e:
            with self._lock:
                self._playing = False
            raise PlaybackError(f"Failed to start audio stream: {e}")

        self._clips_played += 1

    def _audio_callback(self, outdata: np.ndarray, frames: int,
                        time: Any, status: CallbackFlagsType) -> None:
        """
        sounddevice callback providing the clip's samples.

        Args:
            outdata: NumPy array to fill with audio samples (frames, channels)
            frames: Number of frames to provide
            time: Timestamp info
            status: Callback status flags
        """
        if status and status.output_underflow:
            self._underflows += 1

        with self._lock:
            chunk = self._samples[self._position:self._position + frames]
            self._position += len(chunk)

        outdata[:len(chunk), 0] = chunk
        if len(chunk) < frames:
            outdata[len(chunk):].fill(0.0)
            raise sd.CallbackStop

    def _stream_finished(self) -> None:
        """Called when the stream finishes (becomes inactive)."""
        with self._lock:
            was_playing = self._playing
            self._playing = False
        if was_playing:
            self._notify_finished()

    def _close_stream(self) -> None:
        stream = self._stream
        self._stream = None
        if stream is None:
            return
        try:
            stream.close()
        except sd.PortAudioError as e:
            logger.debug(f"Error closing stream: {e}")

    def close(self) -> None:
        """Stop playback and release the stream without reporting completion."""
        with self._lock:
            self._playing = False
        self._close_stream()
        logger.info(
            f"SoundDevicePlayer closed (clips: {self._clips_played}, "
            f"underflows: {self._underflows})"
        )


__all__ = [
    "SOUNDDEVICE_AVAILABLE",
    "SoundDevicePlayer",
]
