"""
Domain entities for the broadcast pipeline.
"""
from dataclasses import dataclass
from typing import Tuple

@dataclass
class Frame:
    """
    Represents a single captured video frame.
    Owned by the capture loop until it is encoded.
    """
    id: int
    timestamp: float
    image: object # numpy array

@dataclass(frozen=True)
class Detection:
    """
    A rectangular region of interest flagged by an annotator.
    """
    x: int
    y: int
    width: int
    height: int

    @classmethod
    def from_xyxy(cls, x1: int, y1: int, x2: int, y2: int) -> 'Detection':
        return cls(x=x1, y=y1, width=x2 - x1, height=y2 - y1)

    @property
    def corners(self) -> Tuple[Tuple[int, int], Tuple[int, int]]:
        return (self.x, self.y), (self.x + self.width, self.y + self.height)

@dataclass(frozen=True)
class EncodedFrame:
    """
    One frame in wire format. Immutable, shared by every subscriber.
    """
    data: bytes
    content_type: str = "image/jpeg"
    frame_id: int = -1
    timestamp: float = 0.0

    @classmethod
    def empty(cls) -> 'EncodedFrame':
        return cls(data=b"")

    @property
    def is_empty(self) -> bool:
        return not self.data
