from dataclasses import dataclass, asdict
from typing import Dict, List
import threading
import time

@dataclass
class PerformanceMetrics:
    """Capture pipeline metrics"""
    fps: float
    ticks: int
    idle_ticks: int
    frames_captured: int
    read_misses: int
    encode_failures: int
    frames_published: int
    detections: int
    alerts_fired: int
    alert_failures: int
    avg_capture_time_ms: float
    avg_annotate_time_ms: float
    avg_encode_time_ms: float

    def to_dict(self) -> Dict:
        return asdict(self)


class MetricsCollector:
    """Collects and aggregates capture loop metrics. Safe to read from any thread."""

    _WINDOW = 1000

    def __init__(self):
        self._lock = threading.Lock()
        self.capture_times: List[float] = []
        self.annotate_times: List[float] = []
        self.encode_times: List[float] = []
        self.ticks = 0
        self.idle_ticks = 0
        self.frames_captured = 0
        self.read_misses = 0
        self.encode_failures = 0
        self.frames_published = 0
        self.detections = 0
        self.alerts_fired = 0
        self.alert_failures = 0
        self.start_time = time.time()

    def _append(self, samples: List[float], value: float):
        samples.append(value)
        # Keep buffer size manageable
        if len(samples) > self._WINDOW:
            samples.pop(0)

    def record_tick(self, idle: bool = False):
        with self._lock:
            self.ticks += 1
            if idle:
                self.idle_ticks += 1

    def record_capture(self, duration_ms: float):
        with self._lock:
            self.frames_captured += 1
            self._append(self.capture_times, duration_ms)

    def record_read_miss(self):
        with self._lock:
            self.read_misses += 1

    def record_annotation(self, duration_ms: float, detection_count: int):
        with self._lock:
            self.detections += detection_count
            self._append(self.annotate_times, duration_ms)

    def record_encode(self, duration_ms: float):
        with self._lock:
            self._append(self.encode_times, duration_ms)

    def record_encode_failure(self):
        with self._lock:
            self.encode_failures += 1

    def record_publish(self):
        with self._lock:
            self.frames_published += 1

    def record_alert(self, failed: bool = False):
        with self._lock:
            if failed:
                self.alert_failures += 1
            else:
                self.alerts_fired += 1

    @staticmethod
    def _avg(samples: List[float]) -> float:
        return sum(samples) / len(samples) if samples else 0.0

    def get_metrics(self) -> PerformanceMetrics:
        with self._lock:
            elapsed = time.time() - self.start_time
            fps = self.frames_published / elapsed if elapsed > 0 else 0.0
            return PerformanceMetrics(
                fps=fps,
                ticks=self.ticks,
                idle_ticks=self.idle_ticks,
                frames_captured=self.frames_captured,
                read_misses=self.read_misses,
                encode_failures=self.encode_failures,
                frames_published=self.frames_published,
                detections=self.detections,
                alerts_fired=self.alerts_fired,
                alert_failures=self.alert_failures,
                avg_capture_time_ms=self._avg(self.capture_times),
                avg_annotate_time_ms=self._avg(self.annotate_times),
                avg_encode_time_ms=self._avg(self.encode_times),
            )
