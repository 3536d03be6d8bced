import cv2
import numpy as np
from typing import Sequence, Tuple
from ...domain.entities import Detection

class OpenCVVisualizer:
    """
    Burns detection rectangles into a frame using OpenCV.
    Drawing happens after detection and never feeds back into it.
    """
    def __init__(self, color: Tuple[int, int, int] = (255, 0, 0), thickness: int = 2):
        self.color = color # BGR
        self.thickness = thickness

    def draw(self, frame: np.ndarray, detections: Sequence[Detection]) -> np.ndarray:
        for detection in detections:
            top_left, bottom_right = detection.corners
            cv2.rectangle(frame, top_left, bottom_right, self.color, self.thickness)
        return frame
