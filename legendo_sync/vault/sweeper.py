"""
LEGENDO SYNC Vault Expiry Sweeper

Periodically deletes entries older than a maximum age.
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from .store import EntryStore


logger = logging.getLogger(__name__)


DEFAULT_SWEEP_INTERVAL = 30 * 60.0  # 30 minutes
DEFAULT_MAX_AGE = 60 * 60.0  # 1 hour


class ExpirySweeper:
    """
    Enforces age-based expiry on store entries.

    Runs on a background thread. Removal is eventual: an entry past its
    maximum age stays readable until the next cycle reaches it.
    """

    def __init__(
        self,
        store: EntryStore,
        interval: float = DEFAULT_SWEEP_INTERVAL,
        max_age: float = DEFAULT_MAX_AGE,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize expiry sweeper.

        Args:
            store: Entry store to sweep
            interval: Seconds between sweep cycles
            max_age: Seconds after creation an entry becomes eligible for deletion
            clock: Source of the current time
        """
        if interval <= 0:
            raise ValueError("Sweep interval must be positive")
        if max_age <= 0:
            raise ValueError("Max age must be positive")

        self._store = store
        self._interval = interval
        self._max_age = max_age
        self._clock = clock

        self._running = False
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

        self._last_sweep_at: Optional[datetime] = None
        self._total_swept = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def max_age(self) -> float:
        return self._max_age

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def last_sweep_at(self) -> Optional[datetime]:
        return self._last_sweep_at

    @property
    def total_swept(self) -> int:
        return self._total_swept

    def start(self) -> None:
        """Start periodic sweeping."""
        if self._running:
            return

        self._running = True
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._sweep_loop,
            name="legendo-expiry-sweeper",
            daemon=True,
        )
        self._thread.start()
        logger.info(
            f"Expiry sweeper started (interval={self._interval}s, max_age={self._max_age}s)"
        )

    def stop(self) -> None:
        """Stop periodic sweeping."""
        if not self._running:
            return

        self._running = False
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=5)
            self._thread = None
        logger.info("Expiry sweeper stopped")

    def sweep_now(self) -> int:
        """
        Run one sweep cycle.

        Returns:
            Number of entries deleted
        """
        now = self._clock()
        count = 0

        for entry_id, entry in self._store.scan():
            try:
                if entry.age_seconds(now) > self._max_age:
                    if self._store.delete(entry_id):
                        count += 1
            except Exception as e:
                logger.error(f"Failed to expire entry {entry_id}: {e}")

        self._last_sweep_at = now
        self._total_swept += count

        if count > 0:
            logger.info(f"Expiry sweeper deleted {count} expired entries")

        return count

    def _sweep_loop(self) -> None:
        """Main sweep loop."""
        while not self._stop_event.wait(self._interval):
            try:
                self.sweep_now()
            except Exception as e:
                logger.error(f"Expiry sweep error: {e}")
