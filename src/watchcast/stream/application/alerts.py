"""
Rate-limited alert side channel.
"""
import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional
from ..domain.protocols import AlertSink
from ...common.metrics import MetricsCollector

logger = logging.getLogger(__name__)


class AlertLimiter:
    """
    Time-window limiter with capacity 1.

    `fire()` succeeds when `min_interval` seconds have passed since the last
    successful fire. Rejected triggers are dropped, not queued.
    """

    def __init__(self, min_interval: float, clock: Callable[[], float] = time.monotonic):
        if min_interval <= 0:
            raise ValueError("min_interval must be positive")
        self.min_interval = min_interval
        self._clock = clock
        self._last_fired: Optional[float] = None
        self._lock = threading.Lock()

    @property
    def last_fired(self) -> Optional[float]:
        return self._last_fired

    def fire(self) -> bool:
        with self._lock:
            now = self._clock()
            if self._last_fired is not None and now - self._last_fired < self.min_interval:
                return False
            self._last_fired = now
            return True


class AlertDispatcher:
    """
    Runs the alert sink on a single background worker so a slow or failing
    alert never stalls the capture loop. Failures are logged, never retried.
    """

    def __init__(
        self,
        limiter: AlertLimiter,
        sink: AlertSink,
        message: str,
        metrics_collector: Optional[MetricsCollector] = None
    ):
        self.limiter = limiter
        self.sink = sink
        self.message = message
        self.metrics_collector = metrics_collector
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="AlertThread")
        self._pending: Optional[Future] = None

    def trigger(self) -> bool:
        """Returns True if an alert was dispatched."""
        if self._pending is not None and not self._pending.done():
            logger.debug("Previous alert still running, dropping trigger")
            return False
        if not self.limiter.fire():
            return False

        try:
            self._pending = self._executor.submit(self.sink.notify, self.message)
        except RuntimeError:
            # Executor already shut down
            return False
        self._pending.add_done_callback(self._on_done)
        return True

    def _on_done(self, future: Future):
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error(f"Alert failed: {error}")
        if self.metrics_collector:
            self.metrics_collector.record_alert(failed=error is not None)

    def shutdown(self):
        self._executor.shutdown(wait=False, cancel_futures=True)
