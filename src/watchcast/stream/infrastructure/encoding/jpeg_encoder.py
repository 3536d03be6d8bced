import logging
import cv2
from ...domain.entities import Frame, EncodedFrame
from ...domain.protocols import FrameEncoder
from ....common.logging import log_execution_time
from ....common.exceptions import EncodeError

logger = logging.getLogger(__name__)

class JpegEncoder(FrameEncoder):
    """
    Encodes frames as JPEG using OpenCV.
    """
    content_type = "image/jpeg"

    def __init__(self, quality: int = 80):
        if not 1 <= quality <= 100:
            raise ValueError("JPEG quality must be between 1 and 100")
        self.quality = quality

    @log_execution_time(logger)
    def encode(self, frame: Frame) -> EncodedFrame:
        try:
            ok, buf = cv2.imencode(".jpg", frame.image, [cv2.IMWRITE_JPEG_QUALITY, self.quality])
        except cv2.error as e:
            raise EncodeError(f"JPEG encoding failed for frame {frame.id}: {e}") from e
        if not ok:
            raise EncodeError(f"JPEG encoding failed for frame {frame.id}")

        return EncodedFrame(
            data=buf.tobytes(),
            content_type=self.content_type,
            frame_id=frame.id,
            timestamp=frame.timestamp,
        )
