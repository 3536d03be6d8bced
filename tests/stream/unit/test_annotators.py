import cv2
import pytest
import numpy as np
from pathlib import Path
from unittest.mock import MagicMock, patch
from watchcast.stream.infrastructure.detection import create_annotator
from watchcast.stream.infrastructure.detection.cascade_annotator import CascadeAnnotator
from watchcast.stream.domain.entities import Detection
from watchcast.common.config import DetectionSettings
from watchcast.common.exceptions import DetectionError

FRONTAL_FACE = str(Path(cv2.data.haarcascades) / "haarcascade_frontalface_default.xml")

def test_missing_model_path():
    with pytest.raises(DetectionError):
        create_annotator(DetectionSettings(model_path=None))

def test_nonexistent_cascade():
    with pytest.raises(DetectionError):
        create_annotator(DetectionSettings(model_path="/nonexistent/faces.xml"))

def test_nonexistent_yolo_weights():
    with pytest.raises(DetectionError):
        create_annotator(DetectionSettings(model_path="/nonexistent/yolo11n.pt"))

def test_unsupported_model_type(tmp_path):
    model = tmp_path / "model.bin"
    model.write_bytes(b"\x00")
    with pytest.raises(DetectionError):
        create_annotator(DetectionSettings(model_path=str(model)))

def test_corrupt_cascade(tmp_path):
    model = tmp_path / "broken.xml"
    model.write_text("this is not a cascade")
    with pytest.raises(DetectionError):
        CascadeAnnotator(str(model))

def test_cascade_on_blank_image():
    annotator = create_annotator(DetectionSettings(model_path=FRONTAL_FACE))
    assert isinstance(annotator, CascadeAnnotator)

    detections = annotator.annotate(np.zeros((120, 160, 3), dtype=np.uint8))
    assert detections == []

def test_cascade_returns_detections():
    annotator = CascadeAnnotator(FRONTAL_FACE)
    annotator.classifier = MagicMock()
    annotator.classifier.detectMultiScale.return_value = np.array([[5, 6, 30, 40]])

    detections = annotator.annotate(np.zeros((120, 160, 3), dtype=np.uint8))
    assert detections == [Detection(5, 6, 30, 40)]

def test_yolo_annotator(tmp_path):
    weights = tmp_path / "faces.pt"
    weights.write_bytes(b"\x00")

    box = MagicMock()
    box.xyxy = [[10.4, 20.0, 30.0, 60.9]]
    result = MagicMock()
    result.boxes = [box]

    with patch('watchcast.stream.infrastructure.detection.yolo_annotator.YOLO') as mock_yolo:
        mock_yolo.return_value.return_value = [result]
        annotator = create_annotator(DetectionSettings(model_path=str(weights), classes=[0]))

        detections = annotator.annotate(np.zeros((120, 160, 3), dtype=np.uint8))

    assert detections == [Detection(10, 20, 20, 40)]
    assert mock_yolo.return_value.call_args[1]["classes"] == [0]

def test_yolo_inference_failure(tmp_path):
    weights = tmp_path / "faces.pt"
    weights.write_bytes(b"\x00")

    with patch('watchcast.stream.infrastructure.detection.yolo_annotator.YOLO') as mock_yolo:
        mock_yolo.return_value.side_effect = RuntimeError("CUDA out of memory")
        annotator = create_annotator(DetectionSettings(model_path=str(weights)))

        with pytest.raises(DetectionError):
            annotator.annotate(np.zeros((120, 160, 3), dtype=np.uint8))

def test_bundled_cascade_by_name():
    annotator = create_annotator(DetectionSettings())
    assert isinstance(annotator, CascadeAnnotator)
