import logging
from typing import Optional, Dict, Any

from ..domain import FrameSource, Annotator, FrameEncoder, AlertSink
from ..infrastructure.sources import create_source
from ..infrastructure.detection import create_annotator
from ..infrastructure.encoding import JpegEncoder
from ..infrastructure.alerts import SpeechAlertSink, LogAlertSink
from ..infrastructure.broadcast import FrameBroadcaster
from ..presentation.visualization import OpenCVVisualizer
from .alerts import AlertLimiter, AlertDispatcher
from .capture_loop import CaptureLoop
from ...common.config import AppConfig
from ...common.exceptions import DetectionError
from ...common.metrics import MetricsCollector

logger = logging.getLogger(__name__)


class StreamApplicationBuilder:
    """
    Builder pattern for constructing the broadcast application.
    Centralizes component instantiation and wiring.
    """

    def __init__(self, config: AppConfig):
        self.config = config
        self.metrics_collector = MetricsCollector()

        # Components
        self.source: Optional[FrameSource] = None
        self.annotator: Optional[Annotator] = None
        self.alert_sink: Optional[AlertSink] = None
        self.alerts: Optional[AlertDispatcher] = None
        self.encoder: Optional[FrameEncoder] = None
        self.visualizer: Optional[OpenCVVisualizer] = None
        self.broadcaster: Optional[FrameBroadcaster] = None
        self.capture_loop: Optional[CaptureLoop] = None

    def build_source(self) -> 'StreamApplicationBuilder':
        """Opens the capture device. SourceError here is fatal."""
        source_cfg = self.config.source
        logger.info(f"Opening source: {source_cfg.id} (Type: {source_cfg.type})...")
        self.source = create_source(
            source_config=source_cfg.id,
            source_type=source_cfg.type,
            buffer_size=source_cfg.buffer_size,
            target_width=source_cfg.target_width,
            target_height=source_cfg.target_height,
            loop_file=source_cfg.loop_file,
            reconnect_delay=source_cfg.reconnect_delay
        )
        return self

    def build_annotator(self) -> 'StreamApplicationBuilder':
        """Loads the detection model. A missing or unreadable model disables detection."""
        detection_cfg = self.config.detection
        if not detection_cfg.model_path:
            logger.info("Detection disabled: no model configured")
            return self

        try:
            self.annotator = create_annotator(detection_cfg)
        except DetectionError as e:
            logger.warning(f"Detection disabled: {e}")
            self.annotator = None
            return self

        if detection_cfg.show_detections:
            self.visualizer = OpenCVVisualizer()
        return self

    def build_alerts(self, sink: Optional[AlertSink] = None) -> 'StreamApplicationBuilder':
        alert_cfg = self.config.alert
        if not alert_cfg.enabled:
            logger.info("Alerts disabled: no message configured")
            return self
        if self.annotator is None:
            logger.info("Alerts disabled: detection is not available")
            return self

        if sink is not None:
            self.alert_sink = sink
        elif alert_cfg.command:
            self.alert_sink = SpeechAlertSink(alert_cfg.command)
        else:
            self.alert_sink = LogAlertSink()
        self.alerts = AlertDispatcher(
            limiter=AlertLimiter(alert_cfg.min_interval),
            sink=self.alert_sink,
            message=alert_cfg.message,
            metrics_collector=self.metrics_collector
        )
        logger.info(f"Alerts enabled, at most one every {alert_cfg.min_interval:.0f}s")
        return self

    def build_encoder(self) -> 'StreamApplicationBuilder':
        self.encoder = JpegEncoder(quality=self.config.stream.jpeg_quality)
        return self

    def build_broadcaster(self) -> 'StreamApplicationBuilder':
        self.broadcaster = FrameBroadcaster(
            queue_size=self.config.stream.queue_size,
            replay_latest=self.config.stream.replay_latest
        )
        return self

    def build_capture_loop(self) -> CaptureLoop:
        if not self.source:
            raise ValueError("Source must be built before the capture loop")
        if not self.encoder:
            self.build_encoder()
        if not self.broadcaster:
            self.build_broadcaster()

        self.capture_loop = CaptureLoop(
            source=self.source,
            broadcaster=self.broadcaster,
            encoder=self.encoder,
            annotator=self.annotator,
            alerts=self.alerts,
            visualizer=self.visualizer,
            interval=self.config.stream.interval,
            publish_when_idle=self.config.stream.publish_when_idle,
            metrics_collector=self.metrics_collector
        )
        return self.capture_loop

    def get_components(self) -> Dict[str, Any]:
        return {
            'source': self.source,
            'annotator': self.annotator,
            'alerts': self.alerts,
            'encoder': self.encoder,
            'broadcaster': self.broadcaster,
            'capture_loop': self.capture_loop,
            'metrics_collector': self.metrics_collector
        }
