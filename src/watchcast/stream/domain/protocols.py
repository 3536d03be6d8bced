"""
Domain protocols for the collaborators of the capture loop.
"""
from typing import List, Optional, Protocol
from .entities import Frame, Detection, EncodedFrame

class FrameSource(Protocol):
    """
    Capture device. Owned exclusively by the capture loop.
    """
    def read(self) -> Optional[Frame]:
        """Returns the next frame, or None on a transient read miss."""
        ...

    def release(self):
        ...

class Annotator(Protocol):
    """
    Finds regions of interest in an image.
    """
    def annotate(self, image: object) -> List[Detection]:
        ...

    def release(self):
        ...

class FrameEncoder(Protocol):
    """
    Serializes an image into a transport-ready buffer.
    """
    def encode(self, frame: Frame) -> EncodedFrame:
        ...

class AlertSink(Protocol):
    """
    Delivers an alert message to the outside world.
    """
    def notify(self, text: str) -> None:
        ...
