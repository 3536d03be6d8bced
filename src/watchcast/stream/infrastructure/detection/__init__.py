"""
Annotator selection by model file type.
"""
from pathlib import Path
from ...domain.protocols import Annotator
from ....common.config import DetectionSettings
from ....common.exceptions import DetectionError

CASCADE_SUFFIXES = (".xml",)
YOLO_SUFFIXES = (".pt", ".onnx", ".engine")


def create_annotator(settings: DetectionSettings) -> Annotator:
    """
    Builds the annotator for `settings.model_path`.
    Raises DetectionError when the model cannot be used.
    """
    if not settings.model_path:
        raise DetectionError("No detection model configured")

    suffix = Path(settings.model_path).suffix.lower()
    if suffix in CASCADE_SUFFIXES:
        from .cascade_annotator import CascadeAnnotator
        return CascadeAnnotator(
            settings.model_path,
            scale_factor=settings.scale_factor,
            min_neighbors=settings.min_neighbors
        )
    if suffix in YOLO_SUFFIXES:
        from .yolo_annotator import YoloAnnotator
        return YoloAnnotator(
            settings.model_path,
            conf_threshold=settings.conf_threshold,
            classes=settings.classes
        )
    raise DetectionError(f"Unsupported model type: {settings.model_path}")
