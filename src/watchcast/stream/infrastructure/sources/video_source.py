"""
OpenCV-based capture source implementation.
"""
import cv2
import logging
import time
from typing import Optional, Union
from ...domain.entities import Frame
from ...domain.protocols import FrameSource
from ....common.exceptions import SourceError
from .base import SourceConfig

logger = logging.getLogger(__name__)

class OpenCVSource(FrameSource):
    """
    Base class for OpenCV-based capture sources.
    Opening happens in the constructor so an unreachable device fails at startup.
    """
    def __init__(self, source: Union[int, str], config: SourceConfig):
        self.source = source
        self.config = config
        self.cap = None
        self._frame_id = 0
        self._initialize()

    def _open(self):
        cap = cv2.VideoCapture(self.source)
        if cap.isOpened() and self.config.buffer_size:
            # Set buffer size to reduce latency
            cap.set(cv2.CAP_PROP_BUFFERSIZE, self.config.buffer_size)
        return cap

    def _initialize(self):
        try:
            logger.info(f"Opening capture source: {self.source}")
            self.cap = self._open()

            if not self.cap.isOpened():
                raise SourceError(
                    f"Could not open capture source: {self.source}. "
                    f"Check if the file exists or the camera is connected."
                )

            if self.config.target_width and self.config.target_height:
                logger.info(f"Will resize frames to {self.config.target_width}x{self.config.target_height}")
        except cv2.error as e:
            raise SourceError(f"OpenCV error initializing source: {e}") from e

    def read(self) -> Optional[Frame]:
        if self.cap is None:
            raise SourceError(f"Capture source {self.source} has been released")

        try:
            ret, img = self.cap.read()
        except cv2.error as e:
            logger.debug(f"Read failed on {self.source}: {e}")
            ret, img = False, None

        if not ret or img is None:
            self._on_read_miss()
            return None

        if self.config.target_width and self.config.target_height:
            img = cv2.resize(img, (self.config.target_width, self.config.target_height))

        frame = Frame(id=self._frame_id, timestamp=time.time(), image=img)
        self._frame_id += 1
        return frame

    def _on_read_miss(self):
        pass

    def release(self):
        if self.cap:
            self.cap.release()
            self.cap = None
            logger.info(f"Capture source released: {self.source}")

class VideoFileSource(OpenCVSource):
    """
    Reads from a local video file, optionally rewinding at end of file.
    """
    def _on_read_miss(self):
        if self.config.loop_file:
            self.cap.set(cv2.CAP_PROP_POS_FRAMES, 0)

class NetworkStreamSource(OpenCVSource):
    """
    Reads from an RTSP/HTTP stream. Reopens the stream after a read miss,
    at most once per reconnect_delay. Never sleeps on the capture thread.
    """
    def __init__(self, url: str, config: SourceConfig):
        self._last_reconnect: Optional[float] = None
        super().__init__(url, config)

    def _on_read_miss(self):
        now = time.monotonic()
        if self._last_reconnect is not None and now - self._last_reconnect < self.config.reconnect_delay:
            return
        self._last_reconnect = now

        logger.warning(f"Stream {self.source} stalled. Reconnecting...")
        self.cap.release()
        try:
            self.cap = self._open()
        except cv2.error as e:
            logger.error(f"Reconnection failed: {e}")
            self.cap = cv2.VideoCapture()
            return
        if self.cap.isOpened():
            logger.info("Stream reconnected.")
