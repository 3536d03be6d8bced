import pytest
from pydantic import ValidationError
from hydra import compose, initialize_config_module
from watchcast.common.config import AppConfig, ConfigManager, ServerSettings, to_app_config
from watchcast.common.exceptions import ConfigurationError

@pytest.fixture
def manager():
    return ConfigManager()

def test_defaults(manager):
    config = manager.load()

    assert isinstance(config, AppConfig)
    assert config.source.id == "0"
    assert config.server.port == 8080
    assert config.stream.interval == pytest.approx(0.03)
    assert config.alert.min_interval == 10.0
    assert config.alert.command == ["spd-say", "-r", "-30"]
    assert not config.alert.enabled
    assert config.server.basic_auth() is None

def test_overrides(manager):
    config = manager.load(overrides=[
        "source.id=1",
        "server.port=9000",
        "alert.message=Hello there",
        "detection.show_detections=true",
        "server.credential=admin:pa:ss",
    ])

    assert config.source.id == "1"
    assert config.server.port == 9000
    assert config.alert.enabled
    assert config.detection.show_detections
    assert config.server.basic_auth() == ("admin", "pa:ss")

def test_invalid_value(manager):
    with pytest.raises(ConfigurationError):
        manager.load(overrides=["stream.interval=-1"])

def test_unknown_key(manager):
    with pytest.raises(ConfigurationError):
        manager.load(overrides=["stream.fps=30"])

def test_credential_format():
    with pytest.raises(ValidationError):
        ServerSettings(credential="no-colon")
    assert ServerSettings(credential="").credential is None

def test_missing_profile(manager):
    with pytest.raises(ConfigurationError):
        manager.load(profile="does-not-exist")

def test_config_is_immutable(manager):
    config = manager.load()
    with pytest.raises(ValidationError):
        config.server.port = 1

def test_log_level_normalized():
    assert AppConfig(log_level="debug").log_level == "DEBUG"
    with pytest.raises(ValidationError):
        AppConfig(log_level="chatty")

def test_packaged_config_composes_through_hydra():
    with initialize_config_module(config_module="watchcast.conf", version_base=None):
        cfg = compose(config_name="config", overrides=["source.id=3", "stream.replay_latest=false"])

    config = to_app_config(cfg)
    assert config.source.id == "3"
    assert config.stream.replay_latest is False
    assert config.detection.model_path == "haarcascade_frontalface_default.xml"

def test_packaged_config_keeps_existing_loggers_enabled():
    with initialize_config_module(config_module="watchcast.conf", version_base=None):
        cfg = compose(config_name="config", return_hydra_config=True)

    assert cfg.hydra.job_logging.get("disable_existing_loggers", False) is False
    assert cfg.hydra.hydra_logging.get("disable_existing_loggers", False) is False
