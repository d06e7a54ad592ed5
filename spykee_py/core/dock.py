"""
Dock state tracking.

The robot reports dock changes with DOCK frames, and the client changes
its own view of the state when it issues dock commands:

    undock() sent         Docked   -> Undocked
    dock() sent           Undocked -> Docking
    cancel_dock() sent    Docking  -> Undocked
    DOCK frame = docked   any      -> Docked
    DOCK frame = undocked any      -> Undocked

The state is None until the login response has been parsed.
"""

import logging
import threading
from typing import Optional

from .protocol import DockState, DockStatus

logger = logging.getLogger(__name__)


class DockTracker:
    """Thread-safe holder of the current DockState."""

    def __init__(self, initial: Optional[DockState] = None):
        self._state = initial
        self._lock = threading.Lock()

    @property
    def state(self) -> Optional[DockState]:
        with self._lock:
            return self._state

    def reset(self, state: Optional[DockState]) -> None:
        """Set the state reported by the login response."""
        self._set(state, "login")

    def on_undock_sent(self) -> DockState:
        return self._set(DockState.UNDOCKED, "undock sent")

    def on_dock_sent(self) -> DockState:
        return self._set(DockState.DOCKING, "dock sent")

    def on_cancel_dock_sent(self) -> DockState:
        return self._set(DockState.UNDOCKED, "cancel dock sent")

    def on_status(self, value: int) -> Optional[DockState]:
        """
        Apply the payload byte of a DOCK frame.

        Returns:
            The new state, or None if the value is not a known status
        """
        if value == DockStatus.DOCKED:
            return self._set(DockState.DOCKED, "robot status")
        if value == DockStatus.UNDOCKED:
            return self._set(DockState.UNDOCKED, "robot status")
        logger.warning(f"Ignoring unknown dock status value: {value}")
        return None

    def _set(self, state: Optional[DockState], reason: str) -> Optional[DockState]:
        with self._lock:
            previous = self._state
            self._state = state
        if previous != state:
            logger.info(f"Dock state {previous} -> {state} ({reason})")
        return state
