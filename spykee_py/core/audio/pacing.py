"""
Audio pacing (jitter) buffer.

Audio packets from the robot arrive irregularly: usually 1/8 s of sound
(2000 samples at 16 kHz) per packet, but sometimes late or larger. Playback
therefore runs slightly behind real time from a small ring of clips.

Producer (reader thread):  push(pcm16) -> converted clip in slot
                           `downloading_index`, buffered += 1
Consumer (event thread):   start_if_idle() or play_next() -> clip from
                           slot `playing_index`, buffered -= 1, handed to
                           the AudioSink if it is idle

If `buffered` reaches the drop threshold on arrival, the oldest waiting clip
is skipped. This bounds latency and guarantees the producer never laps a
slot that has not been read.
"""

import logging
import threading
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from ..exceptions import PlaybackError
from ..protocol import AUDIO_BUFFER_COUNT, AUDIO_DROP_THRESHOLD, AUDIO_SAMPLE_RATE
from .sink import AudioSink
from .wave import build_wave_clip, convert_s16le_to_u8

logger = logging.getLogger(__name__)


__all__ = ['PacingStats', 'AudioPacingBuffer']


@dataclass
class PacingStats:
    """Snapshot of the pacing counters."""
    buffered: int
    playing_index: int
    downloading_index: int
    received: int
    played: int
    skips: int
    waits: int
    slot_reuses: int
    playback_errors: int


class AudioPacingBuffer:
    """
    Bounded ring of audio clips between the network and an AudioSink.

    Thread-safe: counters are only touched under an internal lock; the sink
    is called outside of it.

    Example:
        >>> pacing = AudioPacingBuffer(sink)
        >>> pacing.push(pcm_payload)       # reader thread
        >>> pacing.start_if_idle()         # consumer thread
        >>> pacing.on_playback_finished()  # after each clip
    """

    def __init__(
        self,
        sink: Optional[AudioSink] = None,
        capacity: int = AUDIO_BUFFER_COUNT,
        drop_threshold: int = AUDIO_DROP_THRESHOLD,
        sample_rate: int = AUDIO_SAMPLE_RATE,
    ):
        """
        Args:
            sink: Player for finished clips (None = keep counters only)
            capacity: Number of ring slots
            drop_threshold: Waiting clips that trigger a skip on arrival
            sample_rate: Sample rate written into the WAV header
        """
        if not 0 < drop_threshold <= capacity:
            raise ValueError(
                f"drop_threshold must be in [1, {capacity}], got {drop_threshold}"
            )
        self._sink = sink
        self._capacity = capacity
        self._drop_threshold = drop_threshold
        self._sample_rate = sample_rate
        self._lock = threading.Lock()
        self._slots: List[Optional[np.ndarray]] = [None] * capacity
        self._reset_counters()

    def _reset_counters(self) -> None:
        self._buffered = 0
        self._playing_index = 0
        self._downloading_index = 0
        self._received = 0
        self._played = 0
        self._skips = 0
        self._waits = 0
        self._slot_reuses = 0
        self._playback_errors = 0

    @property
    def sink(self) -> Optional[AudioSink]:
        return self._sink

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def buffered(self) -> int:
        with self._lock:
            return self._buffered

    def reset(self) -> None:
        """Drop all clips and zero the counters (new session)."""
        with self._lock:
            self._slots = [None] * self._capacity
            self._reset_counters()

    def stats(self) -> PacingStats:
        with self._lock:
            return PacingStats(
                buffered=self._buffered,
                playing_index=self._playing_index,
                downloading_index=self._downloading_index,
                received=self._received,
                played=self._played,
                skips=self._skips,
                waits=self._waits,
                slot_reuses=self._slot_reuses,
                playback_errors=self._playback_errors,
            )

    def push(self, pcm16: bytes) -> bool:
        """
        Store one network packet of 16-bit PCM.

        Args:
            pcm16: Signed 16-bit little-endian mono samples

        Returns:
            True if nothing was playing and this was the only queued clip
            when it arrived. This is a snapshot; the consumer decides with
            start_if_idle()
        """
        samples = convert_s16le_to_u8(pcm16)

        with self._lock:
            index = self._downloading_index
            # Every slot has been written once; from now on each arrival reuses one
            if self._received >= self._capacity:
                self._slot_reuses += 1
            self._slots[index] = samples
            self._downloading_index = (index + 1) % self._capacity
            self._buffered += 1
            self._received += 1

            if self._buffered >= self._drop_threshold:
                self._slots[self._playing_index] = None
                self._playing_index = (self._playing_index + 1) % self._capacity
                self._buffered -= 1
                self._skips += 1
                logger.debug(
                    f"Audio behind, skipped clip (skips: {self._skips}, waits: {self._waits})"
                )

            buffered = self._buffered

        if self._sink is None:
            return False
        return buffered == 1 and not self._sink.is_playing

    def _take(self) -> Optional[np.ndarray]:
        with self._lock:
            if self._buffered == 0:
                self._waits += 1
                return None
            self._buffered -= 1
            index = self._playing_index
            samples = self._slots[index]
            self._slots[index] = None
            self._playing_index = (index + 1) % self._capacity
            return samples

    def play_next(self) -> bool:
        """
        Hand the next waiting clip to the sink.

        A clip the sink fails to play is logged and skipped, and the next
        one is tried.

        Returns:
            True if a clip started playing, False if none was waiting
        """
        if self._sink is None:
            return False

        while True:
            samples = self._take()
            if samples is None:
                return False

            clip = build_wave_clip(samples, sample_rate=self._sample_rate)
            try:
                self._sink.play(clip)
            except (PlaybackError, OSError) as e:
                with self._lock:
                    self._playback_errors += 1
                logger.warning(f"Audio clip skipped: {e}")
                continue

            with self._lock:
                self._played += 1
            return True

    def start_if_idle(self) -> bool:
        """
        Start playback if a clip is waiting and the sink is idle.

        Called on the consumer context after a clip arrives. The sink state
        is checked at call time, so a clip that started in the meantime is
        never interrupted.

        Returns:
            True if a clip started playing
        """
        if self._sink is None or self._sink.is_playing:
            return False
        with self._lock:
            if self._buffered == 0:
                return False
        return self.play_next()

    def on_playback_finished(self) -> bool:
        """
        Consumer notification: the previous clip finished playing.

        A stale notification that arrives after another clip has already
        been started is ignored.
        """
        if self._sink is None or self._sink.is_playing:
            return False
        return self.play_next()
