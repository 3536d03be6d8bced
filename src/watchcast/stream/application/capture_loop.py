"""
Demand-aware capture loop running on a dedicated thread.
Pulls frames only while someone is watching, annotates, encodes and
publishes them to the broadcaster.
"""
import logging
import threading
import time
from enum import Enum
from typing import List, Optional
from ..domain.entities import Detection, EncodedFrame, Frame
from ..domain.protocols import Annotator, FrameEncoder, FrameSource
from ..infrastructure.broadcast.frame_broadcaster import FrameBroadcaster
from ..presentation.visualization.opencv_visualizer import OpenCVVisualizer
from .alerts import AlertDispatcher
from ...common.exceptions import BroadcastClosed, DetectionError, EncodeError, SourceError
from ...common.metrics import MetricsCollector

logger = logging.getLogger(__name__)


class LoopState(str, Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    STOPPED = "stopped"


class CaptureLoop:
    """
    Single producer of the broadcast.

    Each tick checks demand first: with no viewers the device is never read.
    The loop is paced to `interval` seconds per tick and waits on the stop
    event, so `stop()` interrupts the wait instead of polling.
    """

    def __init__(
        self,
        source: FrameSource,
        broadcaster: FrameBroadcaster,
        encoder: FrameEncoder,
        annotator: Optional[Annotator] = None,
        alerts: Optional[AlertDispatcher] = None,
        visualizer: Optional[OpenCVVisualizer] = None,
        interval: float = 0.03,
        publish_when_idle: bool = True,
        metrics_collector: Optional[MetricsCollector] = None
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.source = source
        self.broadcaster = broadcaster
        self.encoder = encoder
        self.annotator = annotator
        self.alerts = alerts
        self.visualizer = visualizer
        self.interval = interval
        self.publish_when_idle = publish_when_idle
        self.metrics_collector = metrics_collector

        self._state = LoopState.IDLE
        self._stop_event = threading.Event()
        self._finished = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._release_lock = threading.Lock()
        self._released = False

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def detection_enabled(self) -> bool:
        return self.annotator is not None

    def start(self):
        """Starts the loop on its own thread."""
        if self._thread is not None:
            raise RuntimeError("Capture loop already started")
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run,
            name="CaptureThread",
            daemon=True
        )
        self._thread.start()

    def run(self):
        """Blocking loop body. Returns once stopped and resources are released."""
        logger.info(f"Capture loop running (interval {self.interval * 1000:.0f}ms)")
        try:
            while not self._stop_event.is_set():
                started = time.monotonic()
                if not self.tick():
                    break
                remaining = self.interval - (time.monotonic() - started)
                if remaining > 0 and self._stop_event.wait(remaining):
                    break
        except Exception:
            logger.exception("Capture loop failed")
            self.broadcaster.close()
        finally:
            self._state = LoopState.STOPPED
            self.release()
            self._finished.set()
            logger.info("Capture loop stopped")

    def tick(self) -> bool:
        """
        Runs one iteration. Returns False when the loop must stop.
        """
        if self._stop_event.is_set():
            return self._halt()

        if self.broadcaster.demand_count() == 0:
            self._state = LoopState.IDLE
            if self.metrics_collector:
                self.metrics_collector.record_tick(idle=True)
            if self.publish_when_idle:
                return self._publish(EncodedFrame.empty())
            if self.broadcaster.closed:
                return self._halt()
            return True

        self._state = LoopState.CAPTURING
        if self.metrics_collector:
            self.metrics_collector.record_tick()

        frame = self._capture()
        if frame is None:
            return self._state != LoopState.STOPPED

        detections = self._annotate(frame)
        if detections:
            if self.alerts is not None:
                self.alerts.trigger()
            if self.visualizer is not None:
                frame.image = self.visualizer.draw(frame.image, detections)

        start = time.perf_counter()
        try:
            encoded = self.encoder.encode(frame)
        except EncodeError as e:
            logger.debug(f"Skipping frame {frame.id}: {e}")
            if self.metrics_collector:
                self.metrics_collector.record_encode_failure()
            return True
        if self.metrics_collector:
            self.metrics_collector.record_encode((time.perf_counter() - start) * 1000)

        return self._publish(encoded)

    def _capture(self) -> Optional[Frame]:
        start = time.perf_counter()
        try:
            frame = self.source.read()
        except SourceError as e:
            logger.error(f"Capture source lost: {e}")
            self.broadcaster.close()
            self._halt()
            return None

        if frame is None:
            if self.metrics_collector:
                self.metrics_collector.record_read_miss()
            return None

        if self.metrics_collector:
            self.metrics_collector.record_capture((time.perf_counter() - start) * 1000)
        return frame

    def _annotate(self, frame: Frame) -> List[Detection]:
        if self.annotator is None:
            return []
        start = time.perf_counter()
        try:
            detections = self.annotator.annotate(frame.image)
        except DetectionError as e:
            logger.debug(f"Detection skipped on frame {frame.id}: {e}")
            return []
        if self.metrics_collector:
            self.metrics_collector.record_annotation(
                (time.perf_counter() - start) * 1000, len(detections)
            )
        return detections

    def _publish(self, frame: EncodedFrame) -> bool:
        try:
            self.broadcaster.publish(frame)
        except BroadcastClosed:
            logger.info("Broadcaster closed, stopping capture")
            return self._halt()
        if self.metrics_collector and not frame.is_empty:
            self.metrics_collector.record_publish()
        return True

    def _halt(self) -> bool:
        self._state = LoopState.STOPPED
        return False

    def release(self):
        """Releases the source, annotator and alert worker exactly once."""
        with self._release_lock:
            if self._released:
                return
            self._released = True

        self.source.release()
        if self.annotator is not None:
            self.annotator.release()
        if self.alerts is not None:
            self.alerts.shutdown()

    def stop(self, timeout: Optional[float] = 5.0) -> bool:
        """
        Requests cancellation and waits for the loop to finish.
        Returns True if the loop has stopped and released its resources.
        """
        self._stop_event.set()
        if self._thread is None:
            self._state = LoopState.STOPPED
            self.release()
            return True

        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            logger.warning("Capture thread did not stop within %.1fs", timeout)
            return False
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Blocks until the loop thread has finished."""
        return self._finished.wait(timeout)
