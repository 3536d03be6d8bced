"""
Source module initialization and factory registry.
"""
from typing import Dict
from ...domain.protocols import FrameSource
from .base import SourceFactory, SourceConfig
from .webcam_source import WebcamSource
from .video_source import OpenCVSource, VideoFileSource, NetworkStreamSource

STREAM_SCHEMES = ("rtsp://", "rtmp://", "http://", "https://", "udp://")


class WebcamFactory(SourceFactory):
    def can_handle(self, config: str, source_type: str) -> bool:
        if source_type == "webcam":
            return True
        return source_type == "auto" and str(config).isdigit()

    def create(self, config: str, **kwargs) -> FrameSource:
        device_id = int(config)
        source_config = self._create_config(**kwargs)
        return WebcamSource(device_id, source_config)


class NetworkStreamFactory(SourceFactory):
    def can_handle(self, config: str, source_type: str) -> bool:
        if source_type == "stream":
            return True
        return source_type == "auto" and str(config).lower().startswith(STREAM_SCHEMES)

    def create(self, config: str, **kwargs) -> FrameSource:
        source_config = self._create_config(**kwargs)
        return NetworkStreamSource(str(config), source_config)


class VideoFileFactory(SourceFactory):
    def can_handle(self, config: str, source_type: str) -> bool:
        return source_type == "file" or source_type == "auto"

    def create(self, config: str, **kwargs) -> FrameSource:
        source_config = self._create_config(**kwargs)
        return VideoFileSource(str(config), source_config)


class SourceRegistry:
    """
    Centralized registry for source factories. Factories are tried in
    registration order.
    """

    def __init__(self):
        self._factories: Dict[str, SourceFactory] = {}

    def register(self, name: str, factory: SourceFactory):
        self._factories[name] = factory

    def create_source(self, config: str, source_type: str = "auto", **kwargs) -> FrameSource:
        for factory in self._factories.values():
            if factory.can_handle(config, source_type):
                return factory.create(config, **kwargs)

        raise ValueError(f"No factory found for source: {config} (type: {source_type})")


# Setup global registry
_registry = SourceRegistry()
_registry.register("webcam", WebcamFactory())
_registry.register("stream", NetworkStreamFactory())
_registry.register("file", VideoFileFactory())


def create_source(source_config: str, source_type: str = "auto", **kwargs) -> FrameSource:
    """
    Factory function to create the appropriate FrameSource using the registry.
    """
    return _registry.create_source(source_config, source_type, **kwargs)
