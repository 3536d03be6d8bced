"""
Domain module initialization.
"""
from .entities import (
    Frame,
    Detection,
    EncodedFrame
)
from .protocols import (
    FrameSource,
    Annotator,
    FrameEncoder,
    AlertSink
)
