"""
Events delivered from the reader thread to the application.

The reader thread never runs application code. It posts events to a queue
owned by an EventDispatcher, which delivers them on the consumer context:
either its own thread, or whichever thread calls process_events().
"""

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Union

from .protocol import DockState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatteryLevel:
    """Battery charge reported by the robot."""
    percent: int


@dataclass(frozen=True)
class VideoFrame:
    """One compressed (JPEG) video frame."""
    data: bytes


@dataclass(frozen=True)
class AudioReady:
    """
    An audio clip was queued in the pacing buffer.

    Whether playback starts is decided by the consumer when the event is
    handled, since the sink may have started or finished a clip meanwhile.
    """


@dataclass(frozen=True)
class DockChanged:
    """The robot reported a new dock state."""
    state: DockState


@dataclass(frozen=True)
class Disconnected:
    """The reader loop ended; the session is dead."""
    reason: str


@dataclass(frozen=True)
class PlaybackFinished:
    """The audio sink finished a clip (posted by the sink's thread)."""


DeviceEvent = Union[BatteryLevel, VideoFrame, AudioReady, DockChanged, Disconnected, PlaybackFinished]


@dataclass
class EventCallbacks:
    """
    Application callbacks, called on the consumer context.

    Any callback may be None.
    """
    on_battery_level: Optional[Callable[[int], None]] = None
    on_video_frame: Optional[Callable[[bytes], None]] = None
    on_dock_changed: Optional[Callable[[DockState], None]] = None
    on_audio_clip_ready: Optional[Callable[[], None]] = None
    on_disconnected: Optional[Callable[[str], None]] = None


class EventDispatcher:
    """
    Single-consumer event queue.

    Example:
        >>> dispatcher = EventDispatcher(handler=client._handle_event)
        >>> dispatcher.start()          # deliver on a dedicated thread
        >>> dispatcher.post(BatteryLevel(80))
        >>> dispatcher.stop()

    Without start(), the owner pumps events with process_events().
    """

    POLL_INTERVAL = 0.1

    def __init__(self, handler: Callable[[DeviceEvent], None]):
        self._handler = handler
        self._queue: "queue.Queue[DeviceEvent]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._stopped = threading.Event()
        self._delivered = 0

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    @property
    def delivered(self) -> int:
        return self._delivered

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def post(self, event: DeviceEvent) -> None:
        """Queue an event (safe from any thread)."""
        self._queue.put(event)

    def start(self) -> None:
        if self._thread is not None:
            logger.warning("Event dispatcher already running")
            return

        self._stopped.clear()
        self._thread = threading.Thread(
            target=self._run,
            name="SpykeeEvents",
            daemon=True
        )
        self._thread.start()
        logger.debug("Event dispatcher thread started")

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the dispatcher thread after it delivers already queued events."""
        if self._thread is None:
            return

        self._stopped.set()
        if self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("Event dispatcher did not stop gracefully")
        self._thread = None

    def process_events(self, timeout: Optional[float] = 0.0) -> int:
        """
        Deliver queued events on the calling thread.

        Args:
            timeout: Seconds to wait for the first event (0 = don't wait,
                None = wait forever)

        Returns:
            Number of events delivered
        """
        count = 0
        block = timeout is None or timeout > 0
        while True:
            try:
                event = self._queue.get(block=block, timeout=timeout if block else None)
            except queue.Empty:
                return count
            self._dispatch(event)
            count += 1
            block = False

    def _run(self) -> None:
        while True:
            try:
                event = self._queue.get(timeout=self.POLL_INTERVAL)
            except queue.Empty:
                if self._stopped.is_set():
                    break
                continue
            self._dispatch(event)
        logger.debug("Event dispatcher loop ended")

    def _dispatch(self, event: DeviceEvent) -> None:
        try:
            self._handler(event)
        except Exception as e:
            logger.error(f"Error handling {type(event).__name__}: {e}", exc_info=True)
        self._delivered += 1


__all__ = [
    "BatteryLevel",
    "VideoFrame",
    "AudioReady",
    "DockChanged",
    "Disconnected",
    "PlaybackFinished",
    "DeviceEvent",
    "EventCallbacks",
    "EventDispatcher",
]
