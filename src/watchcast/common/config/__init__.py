from .models import (
    AppConfig,
    SourceSettings,
    DetectionSettings,
    AlertSettings,
    StreamSettings,
    ServerSettings,
)
from .manager import ConfigManager, to_app_config
