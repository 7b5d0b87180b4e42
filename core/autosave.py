"""
Debounced draft persistence.

Every committed edit schedules a write; edits arriving within the delay
replace the pending payload, so a burst of edits produces one write of the
latest state. Writes are whole-document replaces, which makes a late or
repeated write harmless. A failed write is logged and reported through
status; editing is never blocked and there is no automatic retry.
"""

import logging
import threading
from enum import Enum
from typing import Any, Callable

from utils.timezone import now_utc

logger = logging.getLogger(__name__)


class SaveStatus(str, Enum):
    """Visible state of the draft write."""

    IDLE = "idle"
    PENDING = "pending"
    SAVED = "saved"
    FAILED = "failed"


class DebouncedSaver:
    """
    Coalesces save requests and writes the latest payload after a delay.

    Usage:
        saver = DebouncedSaver(draft_service.save, delay=1.0)
        saver.schedule(draft)   # restarts the delay
        saver.flush()           # write now (e.g. on shutdown)
    """

    def __init__(
        self,
        save: Callable[[Any], Any],
        delay: float = 1.0,
        timer_factory: Callable[..., Any] = threading.Timer,
    ):
        self._save = save
        self.delay = delay
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._timer = None
        self._pending: Any = None
        self._has_pending = False

        self.status = SaveStatus.IDLE
        self.last_saved = None
        self.last_error: str | None = None

    def schedule(self, payload: Any):
        """Replace the pending payload and restart the delay."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = payload
            self._has_pending = True
            self.status = SaveStatus.PENDING

            timer = self._timer_factory(self.delay, self.flush)
            if hasattr(timer, "daemon"):
                timer.daemon = True
            self._timer = timer
        timer.start()

    def cancel(self):
        """Drop the pending write, if any."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._pending = None
            self._has_pending = False
            if self.status == SaveStatus.PENDING:
                self.status = SaveStatus.IDLE

    def flush(self) -> bool:
        """
        Write the pending payload now.

        Returns:
            True if a write happened and succeeded
        """
        with self._lock:
            if not self._has_pending:
                return False
            payload = self._pending
            self._pending = None
            self._has_pending = False
            self._timer = None

        try:
            self._save(payload)
        except Exception as e:
            logger.exception("Draft autosave failed")
            with self._lock:
                self.status = SaveStatus.FAILED
                self.last_error = str(e)
            return False

        with self._lock:
            # A newer edit may have been scheduled while writing
            if not self._has_pending:
                self.status = SaveStatus.SAVED
            self.last_saved = now_utc()
            self.last_error = None
        return True

    @property
    def has_pending(self) -> bool:
        return self._has_pending
