import cv2
import pytest
import numpy as np
from pathlib import Path
from unittest.mock import patch, MagicMock
from watchcast.stream.application.builder import StreamApplicationBuilder
from watchcast.stream.application.capture_loop import LoopState
from watchcast.stream.infrastructure.detection.cascade_annotator import CascadeAnnotator
from watchcast.stream.infrastructure.alerts import LogAlertSink, SpeechAlertSink
from watchcast.common.config import ConfigManager
from watchcast.common.exceptions import SourceError

FRONTAL_FACE = str(Path(cv2.data.haarcascades) / "haarcascade_frontalface_default.xml")
CAPTURE = 'watchcast.stream.infrastructure.sources.video_source.cv2.VideoCapture'


@pytest.fixture
def mock_cap():
    with patch(CAPTURE) as mock_cap:
        mock_cap.return_value.isOpened.return_value = True
        mock_cap.return_value.read.return_value = (True, np.zeros((120, 160, 3), dtype=np.uint8))
        yield mock_cap

def load(*overrides):
    return ConfigManager().load(overrides=["source.id=test_video.mp4", *overrides])

def test_builder_constructs_capture_loop(mock_cap):
    builder = StreamApplicationBuilder(load("detection.model_path=null"))
    loop = (
        builder
        .build_source()
        .build_annotator()
        .build_alerts()
        .build_encoder()
        .build_broadcaster()
        .build_capture_loop()
    )

    assert loop is not None
    assert loop.source is builder.source
    assert loop.broadcaster is builder.broadcaster
    assert loop.metrics_collector is builder.metrics_collector
    assert builder.annotator is None
    assert set(builder.get_components()) >= {'source', 'broadcaster', 'capture_loop'}

def test_missing_model_serves_frames_without_alerts(mock_cap):
    config = load("detection.model_path=/nonexistent/faces.xml", "alert.message=Hello")

    with patch('watchcast.stream.application.alerts.AlertLimiter.fire') as mock_fire:
        builder = StreamApplicationBuilder(config)
        loop = builder.build_source().build_annotator().build_alerts().build_capture_loop()
        handle = builder.broadcaster.subscribe()

        for _ in range(5):
            assert loop.tick()

        mock_fire.assert_not_called()

    assert builder.annotator is None
    assert builder.alerts is None
    frames = handle.drain()
    assert frames and frames[-1].data[:2] == b"\xff\xd8"
    assert loop.state == LoopState.CAPTURING

def test_cascade_with_alerts_and_overlay(mock_cap):
    config = load(
        f"detection.model_path={FRONTAL_FACE}",
        "detection.show_detections=true",
        "alert.message=Someone is at the door",
    )
    sink = MagicMock()

    builder = StreamApplicationBuilder(config)
    builder.build_source().build_annotator().build_alerts(sink=sink).build_capture_loop()

    assert isinstance(builder.annotator, CascadeAnnotator)
    assert builder.visualizer is not None
    assert builder.alerts is not None
    assert builder.alerts.message == "Someone is at the door"
    assert builder.alerts.limiter.min_interval == 10.0
    builder.capture_loop.stop()

def test_alerts_disabled_without_message(mock_cap):
    builder = StreamApplicationBuilder(load(f"detection.model_path={FRONTAL_FACE}"))
    builder.build_source().build_annotator().build_alerts()

    assert builder.annotator is not None
    assert builder.alerts is None

def test_unopenable_source_is_fatal():
    with patch(CAPTURE) as mock_cap:
        mock_cap.return_value.isOpened.return_value = False
        builder = StreamApplicationBuilder(load())
        with pytest.raises(SourceError):
            builder.build_source()

def test_capture_loop_requires_source():
    with pytest.raises(ValueError):
        StreamApplicationBuilder(load()).build_capture_loop()

def test_empty_alert_command_logs_alerts(mock_cap):
    config = load(
        f"detection.model_path={FRONTAL_FACE}",
        "alert.message=Someone is at the door",
        "alert.command=[]",
    )
    builder = StreamApplicationBuilder(config)
    builder.build_source().build_annotator().build_alerts()

    assert isinstance(builder.alert_sink, LogAlertSink)
    builder.alerts.shutdown()

def test_default_alert_command_speaks(mock_cap):
    config = load(f"detection.model_path={FRONTAL_FACE}", "alert.message=Hello")
    builder = StreamApplicationBuilder(config)
    builder.build_source().build_annotator().build_alerts()

    assert isinstance(builder.alert_sink, SpeechAlertSink)
    assert builder.alert_sink.command == ["spd-say", "-r", "-30"]
    builder.alerts.shutdown()

def test_replay_latest_follows_config(mock_cap):
    builder = StreamApplicationBuilder(load("stream.replay_latest=false"))
    builder.build_broadcaster()

    assert builder.broadcaster.replay_latest is False
