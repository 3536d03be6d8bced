from omegaconf import DictConfig, OmegaConf
from omegaconf.errors import OmegaConfBaseException
from pathlib import Path
from typing import Optional, Sequence
from pydantic import ValidationError
from .models import AppConfig
from ..exceptions import ConfigurationError

DEFAULT_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent / "conf"


def to_app_config(cfg: DictConfig) -> AppConfig:
    """Validates a loaded DictConfig into the immutable AppConfig."""
    try:
        data = OmegaConf.to_container(cfg, resolve=True)
        data.pop("defaults", None)
        data.pop("hydra", None)
        return AppConfig.model_validate(data)
    except (ValidationError, OmegaConfBaseException) as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


class ConfigManager:
    """Centralizes configuration loading and validation"""

    def __init__(self, config_dir: Path = DEFAULT_CONFIG_DIR):
        self.config_dir = Path(config_dir)

    def load_raw(self, profile: str = "config", overrides: Optional[Sequence[str]] = None) -> DictConfig:
        config_path = self.config_dir / f"{profile}.yaml"

        if not config_path.exists():
            raise ConfigurationError(f"Config not found: {config_path}")

        try:
            cfg = OmegaConf.load(config_path)
            if overrides:
                cfg = OmegaConf.merge(cfg, OmegaConf.from_dotlist(list(overrides)))
        except OmegaConfBaseException as e:
            raise ConfigurationError(f"Could not load {config_path}: {e}") from e
        return cfg

    def load(self, profile: str = "config", overrides: Optional[Sequence[str]] = None) -> AppConfig:
        """Loads a profile, applies `key=value` overrides and validates the result."""
        return to_app_config(self.load_raw(profile, overrides))
