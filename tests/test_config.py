import logging
import pytest
from patient_portal.config import EnvConfigError, get_env_config, get_safe_env_config, validate_env

VARS = ("PORTAL_API_BASE_URL", "PORTAL_WS_BASE_URL", "PORTAL_DEMO_MODE", "PORTAL_ENV")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in VARS:
        monkeypatch.delenv(name, raising=False)


def test_missing_api_url_raises():
    with pytest.raises(EnvConfigError, match="PORTAL_API_BASE_URL is required"):
        get_env_config()


@pytest.mark.parametrize("bad", ["not a url", "localhost:3001", "ftp://files.example.com"])
def test_malformed_api_url_raises(monkeypatch, bad):
    monkeypatch.setenv("PORTAL_API_BASE_URL", bad)
    with pytest.raises(EnvConfigError):
        get_env_config()


def test_ws_url_derived_from_api_url(monkeypatch):
    monkeypatch.setenv("PORTAL_API_BASE_URL", "https://api.example.com")
    config = get_env_config()
    assert config.ws_base_url == "wss://api.example.com"
    assert config.demo_mode is False
    assert config.environment == "development"


def test_ws_url_must_be_websocket(monkeypatch):
    monkeypatch.setenv("PORTAL_API_BASE_URL", "http://localhost:3001")
    monkeypatch.setenv("PORTAL_WS_BASE_URL", "http://localhost:3002")
    with pytest.raises(EnvConfigError, match="ws:// or wss://"):
        get_env_config()


def test_explicit_ws_url_kept(monkeypatch):
    monkeypatch.setenv("PORTAL_API_BASE_URL", "http://localhost:3001")
    monkeypatch.setenv("PORTAL_WS_BASE_URL", "wss://push.example.com")
    assert get_env_config().ws_base_url == "wss://push.example.com"


@pytest.mark.parametrize("raw, expected", [
    ("true", True), ("True", True), ("TRUE", True), ("1", True),
    ("yes", False), ("false", False), ("0", False),
])
def test_demo_mode_flag(monkeypatch, raw, expected):
    monkeypatch.setenv("PORTAL_API_BASE_URL", "http://localhost:3001")
    monkeypatch.setenv("PORTAL_DEMO_MODE", raw)
    assert get_env_config().demo_mode is expected


def test_safe_config_falls_back_to_demo_defaults(monkeypatch, caplog):
    monkeypatch.setenv("PORTAL_API_BASE_URL", "nope")
    config = get_safe_env_config()
    assert config.api_base_url == "http://localhost:3001"
    assert config.ws_base_url == "ws://localhost:3001"
    assert config.demo_mode is True
    assert "demo defaults" in caplog.text


def test_validate_env_warns_on_demo_in_production(monkeypatch, caplog):
    monkeypatch.setenv("PORTAL_API_BASE_URL", "https://api.example.com")
    monkeypatch.setenv("PORTAL_DEMO_MODE", "true")
    monkeypatch.setenv("PORTAL_ENV", "production")
    with caplog.at_level(logging.WARNING):
        validate_env()
    assert "Demo mode is enabled in production" in caplog.text


def test_validate_env_reraises(caplog):
    with pytest.raises(EnvConfigError):
        validate_env()
    assert "Environment configuration error" in caplog.text
