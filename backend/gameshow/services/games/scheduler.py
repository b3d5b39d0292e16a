import logging
import math
import threading
import time
from typing import Callable, Optional


logger = logging.getLogger(__name__)


class Ticker:
    """Countdown for one timed question.

    - Fires every ``interval`` seconds while running
    - Each firing reports the whole seconds left until ``ends_at``
    - On reaching zero calls ``on_expire`` once and cancels itself
    - Once cancelled it never calls back again, even if a firing was in flight

    ``lock`` is the owning session's lock; firings run under it so they are
    serialized with player and host actions.
    """

    def __init__(
        self,
        hub,
        ends_at: float,
        on_tick: Callable[[int], None],
        on_expire: Callable[[], None],
        lock=None,
        interval: float = 0.5,
        clock: Callable[[], float] = time.time,
        label: str = '',
    ):
        self.hub = hub
        self.ends_at = ends_at
        self.on_tick = on_tick
        self.on_expire = on_expire
        self.lock = lock if lock is not None else threading.RLock()
        self.interval = interval
        self.clock = clock
        self.label = label
        self._cancelled = threading.Event()
        self.started = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> int:
        # Halves round up so the last half second still shows 1
        return max(0, int(math.floor(self.ends_at - self.clock() + 0.5)))

    def start(self) -> None:
        if self.started or self.cancelled:
            return
        self.started = True
        logger.info(f"[timer-set] {self.label} interval={self.interval}s deadline={self.ends_at}")
        self.hub.start_background_task(self._run)

    def cancel(self) -> None:
        if not self.cancelled:
            self._cancelled.set()
            logger.info(f"[timer-cancel] {self.label}")

    def fire(self) -> Optional[int]:
        """Run one firing. Returns the remaining seconds, or None if cancelled."""
        with self.lock:
            if self.cancelled:
                return None
            remaining = self.remaining()
            self.on_tick(remaining)
            if remaining <= 0:
                logger.info(f"[timer-fire] {self.label} time up")
                self.cancel()
                self.on_expire()
            return remaining

    def _run(self) -> None:
        while not self.cancelled:
            self.hub.sleep(self.interval)
            if self.cancelled:
                break
            self.fire()
