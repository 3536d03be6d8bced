import threading
import time
import pytest
import numpy as np
from typing import List, Optional
from watchcast.stream.domain.entities import Frame, Detection, EncodedFrame
from watchcast.stream.infrastructure.broadcast import FrameBroadcaster


class FakeSource:
    """Counts reads. Yields a fresh 8x8 black frame on every read."""

    def __init__(self, misses: int = 0):
        self.reads = 0
        self.released = False
        self._misses = misses
        self._lock = threading.Lock()

    def read(self) -> Optional[Frame]:
        with self._lock:
            self.reads += 1
            reads = self.reads
        if reads <= self._misses:
            return None
        return Frame(
            id=reads,
            timestamp=time.time(),
            image=np.zeros((8, 8, 3), dtype=np.uint8)
        )

    def release(self):
        self.released = True


class FakeEncoder:
    def encode(self, frame: Frame) -> EncodedFrame:
        return EncodedFrame(
            data=f"frame-{frame.id}".encode(),
            frame_id=frame.id,
            timestamp=frame.timestamp
        )


class FakeAnnotator:
    def __init__(self, detections: Optional[List[Detection]] = None):
        self.detections = detections or []
        self.calls = 0
        self.released = False

    def annotate(self, image) -> List[Detection]:
        self.calls += 1
        return list(self.detections)

    def release(self):
        self.released = True


def encoded(frame_id: int) -> EncodedFrame:
    return EncodedFrame(data=f"frame-{frame_id}".encode(), frame_id=frame_id, timestamp=float(frame_id))


@pytest.fixture
def mock_frame():
    return Frame(
        id=0,
        timestamp=1234567890.0,
        image=np.zeros((100, 100, 3), dtype=np.uint8)
    )

@pytest.fixture
def fake_source():
    return FakeSource()

@pytest.fixture
def fake_encoder():
    return FakeEncoder()

@pytest.fixture
def face_annotator():
    return FakeAnnotator([Detection(10, 10, 20, 20)])

@pytest.fixture
def empty_annotator():
    return FakeAnnotator([])

@pytest.fixture
def broadcaster():
    return FrameBroadcaster(queue_size=4)

@pytest.fixture
def make_encoded():
    return encoded

@pytest.fixture
def make_source():
    return FakeSource
