# position_feed.py
# Subscriber-list fan-out for live position fixes.
# The caller owns the feed and pushes samples into it from its GPS source.

import logging
import threading
from typing import Callable, List, Optional

from .models import PositionSample

logger = logging.getLogger(__name__)

PositionCallback = Callable[[PositionSample], None]

# Fixes at most this many seconds behind the newest one count as reordered.
REORDER_WINDOW_S: float = 30.0


class PositionFeed:
    """
    Delivers PositionSample objects to every subscriber.

    A fix stamped slightly earlier than the newest delivered one (within
    reorder_window_s) arrived out of order and is dropped. Anything further
    back is taken as a clock reset and delivered, restarting the clock.
    Fixes less accurate than max_accuracy_m are dropped when it is set.
    The clock also restarts whenever the first subscriber joins.

    Usage:
        feed = PositionFeed()
        tracker = RouteTracker(graph, feed=feed)

        # Inside GPS loop:
        feed.publish(PositionSample(lat, lon, accuracy=4.0, timestamp=t))
    """

    def __init__(
        self,
        max_accuracy_m: Optional[float] = None,
        reorder_window_s: float = REORDER_WINDOW_S,
    ) -> None:
        self.max_accuracy_m = max_accuracy_m
        self.reorder_window_s = reorder_window_s
        self._subscribers: List[PositionCallback] = []
        self._last_timestamp: Optional[float] = None
        self._lock = threading.Lock()

    def reset(self) -> None:
        """Forget the newest timestamp so the next fix is always delivered."""
        with self._lock:
            self._last_timestamp = None

    def subscribe(self, callback: PositionCallback) -> bool:
        with self._lock:
            if not self._subscribers:
                self._last_timestamp = None
            if callback not in self._subscribers:
                self._subscribers.append(callback)
        return True

    def unsubscribe(self, callback: PositionCallback) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def publish(self, sample: PositionSample) -> bool:
        """
        Push one fix to the subscribers.

        Returns:
            True if the sample was delivered, False if it was filtered out.
        """
        with self._lock:
            last = self._last_timestamp
            if last is not None and sample.timestamp < last:
                if last - sample.timestamp <= self.reorder_window_s:
                    logger.debug(f"Dropping out-of-order fix at t={sample.timestamp}.")
                    return False
                logger.warning(
                    f"Fix at t={sample.timestamp} is {last - sample.timestamp:.0f} s behind "
                    f"the last one; treating it as a clock reset."
                )
            if self.max_accuracy_m is not None and sample.accuracy > self.max_accuracy_m:
                logger.debug(f"Dropping low-accuracy fix ({sample.accuracy} m).")
                return False
            self._last_timestamp = sample.timestamp
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(sample)
            except Exception:
                logger.exception("Position subscriber failed.")
        return True
