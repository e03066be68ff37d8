import logging
import threading
from datetime import datetime

from site_monitor.model.enum.site_state_enum import SiteState
from site_monitor.util.time_util import utc_now


class SiteStateTracker:
    """
    Holds the last observed site state to prevent duplicate notifications.

    The state starts as UNKNOWN and is only changed by `exchange()`, once per
    completed check cycle. Memory-based, lost on restart.
    """

    def __init__(self, initial_state: SiteState = SiteState.UNKNOWN):
        self._state: SiteState = initial_state
        self._changed_at: datetime | None = None
        self._lock = threading.Lock()
        self.logger = logging.getLogger(__class__.__name__)

    @property
    def current(self) -> SiteState:
        with self._lock:
            return self._state

    @property
    def changed_at(self) -> datetime | None:
        """UTC time of the last real state change (None until the first one)"""
        with self._lock:
            return self._changed_at

    def exchange(self, new_state: SiteState) -> SiteState:
        """
        Atomically store `new_state` and return the state it replaced.

        The value returned to cycle N is exactly what cycle N-1 stored, even
        when cycles overlap.
        """
        with self._lock:
            previous_state: SiteState = self._state
            self._state = new_state
            if previous_state != new_state:
                self._changed_at = utc_now()

        if previous_state != new_state:
            self.logger.info(f"[STATE] {previous_state} → {new_state}")
        else:
            self.logger.debug(f"[STATE] {new_state} (unchanged)")

        return previous_state
