import logging
import numpy as np
from pathlib import Path
from typing import List, Optional, Sequence
from ultralytics import YOLO
from ...domain.entities import Detection
from ...domain.protocols import Annotator
from ....common.logging import log_execution_time
from ....common.exceptions import DetectionError

logger = logging.getLogger(__name__)

class YoloAnnotator(Annotator):
    """
    Implementation of Annotator using YOLO weights.
    """
    def __init__(
        self,
        model_path: str,
        conf_threshold: float = 0.5,
        classes: Optional[Sequence[int]] = None
    ):
        # YOLO() downloads unknown weight names, only accept local files
        if not Path(model_path).is_file():
            raise DetectionError(f"Model file not found: {model_path}")

        # Dynamic device selection
        import torch
        if torch.cuda.is_available():
            device = 'cuda'
        elif torch.backends.mps.is_available():
            device = 'mps'
        else:
            device = 'cpu'

        try:
            self.model = YOLO(model_path)
            if Path(model_path).suffix == ".pt":
                self.model.to(device)
        except Exception as e:
            raise DetectionError(f"Unable to load model {model_path}: {e}") from e

        self.conf_threshold = conf_threshold
        self.classes = list(classes) if classes else None
        logger.info(f"Loaded YOLO model {model_path} on {device}")

    @log_execution_time(logger)
    def annotate(self, image: np.ndarray) -> List[Detection]:
        try:
            results = self.model(
                image,
                verbose=False,
                conf=self.conf_threshold,
                classes=self.classes
            )[0]
        except Exception as e:
            raise DetectionError(f"YOLO inference failed: {e}") from e

        detections = []
        for box in results.boxes:
            x1, y1, x2, y2 = map(int, box.xyxy[0])
            detections.append(Detection.from_xyxy(x1, y1, x2, y2))
        return detections

    def release(self):
        self.model = None
