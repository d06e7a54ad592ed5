"""
Motor stop debouncing.

Each movement command keeps the wheels turning only for a short time. The
client arms a timer per command; when a timer fires it stops the motor only
if no newer movement command was issued in the meantime. A burst of
commands therefore keeps the robot moving smoothly and the motor stops
exactly `delay` after the last one, without ever cancelling timers.
"""

import logging
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class MotorDebounceTimer:
    """
    Fire-and-recheck stop timer.

    Every arm() records a new deadline and bumps a generation counter. A
    timer only acts if its generation is still the current one when it
    fires, so only the most recently armed timer can stop the motor.

    Example:
        >>> timer = MotorDebounceTimer(send_stop=lambda: sock.send_all(encode_stop()))
        >>> timer.arm(0.3)   # forward
        >>> timer.arm(0.3)   # forward again 100 ms later
        >>> # exactly one stop, 300 ms after the second arm()
    """

    def __init__(
        self,
        send_stop: Callable[[], None],
        clock: Callable[[], float] = time.monotonic,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ):
        """
        Args:
            send_stop: Sends the stop-motor frame
            clock: Monotonic clock used for deadlines
            timer_factory: Creates a startable timer, called as
                timer_factory(delay, callback, args=(generation,))
        """
        self._send_stop = send_stop
        self._clock = clock
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        # Held while a movement, explicit stop or timer stop is being sent
        self._send_lock = threading.Lock()
        self._generation = 0
        self._deadline: Optional[float] = None

        # Statistics
        self._stops_sent = 0
        self._stops_skipped = 0

    @property
    def deadline(self) -> Optional[float]:
        """Clock value at which the motor will be stopped, or None."""
        with self._lock:
            return self._deadline

    @property
    def stops_sent(self) -> int:
        with self._lock:
            return self._stops_sent

    def arm(self, delay: float, send: Optional[Callable[[], None]] = None) -> None:
        """
        Schedule a stop `delay` seconds from now, superseding older ones.

        Args:
            delay: Seconds until the motor is stopped
            send: Sends the movement frame; runs under the same lock as a
                firing timer, so a stale stop can never follow it
        """
        with self._send_lock:
            if send is not None:
                send()
            with self._lock:
                self._generation += 1
                generation = self._generation
                self._deadline = self._clock() + delay

            timer = self._timer_factory(delay, self._fire, args=(generation,))
            timer.daemon = True
            timer.start()

    def cancel(self, send: Optional[Callable[[], None]] = None) -> None:
        """
        Neutralize any pending timer (the motor was stopped explicitly).

        Args:
            send: Sends the explicit stop frame after pending timers are disarmed
        """
        with self._send_lock:
            with self._lock:
                self._generation += 1
                self._deadline = None
            if send is not None:
                send()

    def _fire(self, generation: int) -> None:
        with self._send_lock:
            with self._lock:
                if generation != self._generation or self._deadline is None:
                    self._stops_skipped += 1
                    return
                self._deadline = None
                self._stops_sent += 1

            logger.debug("Motor stop deadline reached, stopping motor")
            try:
                self._send_stop()
            except Exception as e:
                logger.warning(f"Failed to send motor stop: {e}")
