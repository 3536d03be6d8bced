"""
Base classes and configuration for capture sources.
"""
from typing import Optional
from abc import ABC, abstractmethod
from pydantic import BaseModel, field_validator, Field
from ...domain.protocols import FrameSource

class SourceConfig(BaseModel):
    """Validated configuration for capture sources"""
    buffer_size: int = Field(3, ge=1, le=120, description="OpenCV buffer size")
    target_width: Optional[int] = Field(None, gt=0, description="Target width in pixels")
    target_height: Optional[int] = Field(None, gt=0, description="Target height in pixels")
    loop_file: bool = Field(False, description="Rewind video files at end of file")
    reconnect_delay: float = Field(2.0, ge=0, description="Seconds between reconnect attempts")

    @field_validator('target_width', 'target_height')
    @classmethod
    def validate_resolution(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v % 2 != 0:
            raise ValueError('Resolution must be even number for video encoding')
        return v

class SourceFactory(ABC):
    """
    Abstract factory for creating capture sources.
    """

    @abstractmethod
    def create(self, config: str, **kwargs) -> FrameSource:
        pass

    @abstractmethod
    def can_handle(self, config: str, source_type: str) -> bool:
        pass

    def _create_config(self, **kwargs) -> SourceConfig:
        return SourceConfig(**kwargs)
