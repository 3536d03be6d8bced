"""
Validated, immutable application configuration.
"""
from typing import Optional, List, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Settings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class SourceSettings(_Settings):
    id: str = Field("0", description="Device index, video file path or stream URL")
    type: str = Field("auto", description="webcam, file, stream or auto")
    buffer_size: int = Field(3, ge=1, le=120, description="OpenCV buffer size")
    target_width: Optional[int] = Field(None, gt=0)
    target_height: Optional[int] = Field(None, gt=0)
    loop_file: bool = False
    reconnect_delay: float = Field(2.0, ge=0)

    @field_validator('id', mode='before')
    @classmethod
    def coerce_id(cls, v):
        # `source.id=0` on the command line arrives as an int
        return str(v)


class DetectionSettings(_Settings):
    model_path: Optional[str] = "haarcascade_frontalface_default.xml"
    show_detections: bool = False
    scale_factor: float = Field(1.1, gt=1.0)
    min_neighbors: int = Field(3, ge=0)
    conf_threshold: float = Field(0.5, ge=0.0, le=1.0)
    classes: Optional[List[int]] = None


class AlertSettings(_Settings):
    message: str = ""
    min_interval: float = Field(10.0, gt=0, description="Seconds between alerts")
    command: List[str] = Field(
        default_factory=lambda: ["spd-say", "-r", "-30"],
        description="Speech command, the message is appended. Empty logs the alert instead"
    )

    @property
    def enabled(self) -> bool:
        return bool(self.message)


class StreamSettings(_Settings):
    interval: float = Field(0.03, gt=0, description="Minimum seconds between ticks")
    queue_size: int = Field(4, ge=1, description="Pending frames kept per viewer")
    jpeg_quality: int = Field(80, ge=1, le=100)
    publish_when_idle: bool = True
    replay_latest: bool = Field(True, description="Send the latest frame to new viewers right away")


class ServerSettings(_Settings):
    host: str = "0.0.0.0"
    port: int = Field(8080, ge=0, le=65535)
    credential: Optional[str] = Field(None, description="user:password for the landing page")
    shutdown_grace_period: float = Field(5.0, ge=0)

    @field_validator('credential')
    @classmethod
    def validate_credential(cls, v: Optional[str]) -> Optional[str]:
        if v == "":
            return None
        if v is not None and ":" not in v:
            raise ValueError("credential must be in the form user:password")
        return v

    def basic_auth(self) -> Optional[Tuple[str, str]]:
        if self.credential is None:
            return None
        username, _, password = self.credential.partition(":")
        return username, password


class AppConfig(_Settings):
    source: SourceSettings = Field(default_factory=SourceSettings)
    detection: DetectionSettings = Field(default_factory=DetectionSettings)
    alert: AlertSettings = Field(default_factory=AlertSettings)
    stream: StreamSettings = Field(default_factory=StreamSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    log_level: str = "INFO"

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return v
