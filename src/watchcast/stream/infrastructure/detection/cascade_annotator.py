import logging
import cv2
import numpy as np
from pathlib import Path
from typing import List
from ...domain.entities import Detection
from ...domain.protocols import Annotator
from ....common.logging import log_execution_time
from ....common.exceptions import DetectionError

logger = logging.getLogger(__name__)

def resolve_cascade(model_path: str) -> str:
    """Finds a cascade file, falling back to the cascades bundled with OpenCV."""
    path = Path(model_path)
    if path.is_file():
        return str(path)
    bundled = Path(cv2.data.haarcascades) / path
    if bundled.is_file():
        return str(bundled)
    raise DetectionError(f"Cascade file not found: {model_path}")


class CascadeAnnotator(Annotator):
    """
    Implementation of Annotator using an OpenCV Haar cascade.
    """
    def __init__(self, model_path: str, scale_factor: float = 1.1, min_neighbors: int = 3):
        model_path = resolve_cascade(model_path)

        self.classifier = cv2.CascadeClassifier()
        try:
            loaded = self.classifier.load(model_path)
        except cv2.error as e:
            raise DetectionError(f"Unable to load cascade {model_path}: {e}") from e
        if not loaded or self.classifier.empty():
            raise DetectionError(f"Unable to load cascade: {model_path}")

        self.scale_factor = scale_factor
        self.min_neighbors = min_neighbors
        logger.info(f"Loaded cascade classifier: {model_path}")

    @log_execution_time(logger)
    def annotate(self, image: np.ndarray) -> List[Detection]:
        try:
            if image.ndim == 3:
                gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
            else:
                gray = image
            rects = self.classifier.detectMultiScale(
                gray,
                scaleFactor=self.scale_factor,
                minNeighbors=self.min_neighbors,
            )
        except cv2.error as e:
            raise DetectionError(f"Cascade detection failed: {e}") from e

        return [Detection(int(x), int(y), int(w), int(h)) for (x, y, w, h) in rects]

    def release(self):
        self.classifier = None
