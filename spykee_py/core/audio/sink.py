"""
Audio sink interface.

A sink plays one WAV clip at a time and reports when it has finished, so
the pacing buffer can hand it the next one.
"""

from typing import Callable, Optional


class AudioSink:
    """
    Base class for clip players.

    Subclasses must call self._notify_finished() when a clip has finished
    playing (on any thread).
    """

    def __init__(self):
        self._completion_callback: Optional[Callable[[], None]] = None

    def set_completion_callback(self, callback: Optional[Callable[[], None]]) -> None:
        """Register the function called after each clip completes."""
        self._completion_callback = callback

    @property
    def is_playing(self) -> bool:
        """True while a clip is being played."""
        raise NotImplementedError

    def play(self, clip: bytes) -> None:
        """
        Start playing a WAV clip.

        Raises:
            PlaybackError: If the clip cannot be played
        """
        raise NotImplementedError

    def close(self) -> None:
        """Stop playback and release resources."""
        raise NotImplementedError

    def _notify_finished(self) -> None:
        callback = self._completion_callback
        if callback is not None:
            callback()
