"""Environment configuration for the portal client.

Values come from the process environment (a local ``.env`` file is loaded
first if present).
"""
from __future__ import annotations
import logging
import os
import httpx
from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

logger = logging.getLogger(__name__)

API_BASE_URL_VAR = "PORTAL_API_BASE_URL"
WS_BASE_URL_VAR = "PORTAL_WS_BASE_URL"
DEMO_MODE_VAR = "PORTAL_DEMO_MODE"
ENVIRONMENT_VAR = "PORTAL_ENV"

_TRUTHY = {"true", "True", "TRUE", "1"}


class EnvConfigError(ValueError):
    """Raised when the portal environment variables are missing or malformed."""


class EnvConfig(BaseModel):
    api_base_url: str
    ws_base_url: str
    demo_mode: bool
    environment: str = "development"


SAFE_DEFAULTS = EnvConfig(
    api_base_url="http://localhost:3001",
    ws_base_url="ws://localhost:3001",
    demo_mode=True,
    environment="development",
)


def _parse_url(raw: str) -> httpx.URL | None:
    try:
        url = httpx.URL(raw)
    except httpx.InvalidURL:
        return None
    if not url.scheme or not url.host:
        return None
    return url


def get_env_config() -> EnvConfig:
    """Read and validate the portal environment. Raises :class:`EnvConfigError`."""
    api_base_url = os.getenv(API_BASE_URL_VAR)
    ws_base_url = os.getenv(WS_BASE_URL_VAR)
    demo_mode = os.getenv(DEMO_MODE_VAR)
    environment = os.getenv(ENVIRONMENT_VAR) or "development"

    if not api_base_url:
        raise EnvConfigError(
            f"{API_BASE_URL_VAR} is required. Please set it in your .env file.\n"
            f"Example: {API_BASE_URL_VAR}=http://localhost:3001"
        )

    api_url = _parse_url(api_base_url)
    if api_url is None or api_url.scheme not in ("http", "https"):
        raise EnvConfigError(
            f'Invalid {API_BASE_URL_VAR} format: "{api_base_url}". Must be a valid URL.\n'
            "Example: http://localhost:3001 or https://api.example.com"
        )

    if ws_base_url:
        ws_url = _parse_url(ws_base_url)
        if ws_url is None:
            raise EnvConfigError(
                f'Invalid {WS_BASE_URL_VAR} format: "{ws_base_url}". Must be a valid WebSocket URL.\n'
                "Example: ws://localhost:3001 or wss://api.example.com"
            )
        if ws_url.scheme not in ("ws", "wss"):
            raise EnvConfigError("WebSocket URL must use ws:// or wss:// protocol")
    else:
        # http -> ws, https -> wss
        ws_base_url = "ws" + api_base_url[len("http"):]

    return EnvConfig(
        api_base_url=api_base_url,
        ws_base_url=ws_base_url,
        demo_mode=demo_mode in _TRUTHY,
        environment=environment,
    )


def get_safe_env_config() -> EnvConfig:
    """Like :func:`get_env_config` but falls back to local demo defaults instead of raising."""
    try:
        return get_env_config()
    except EnvConfigError as exc:
        logger.warning("Portal environment invalid, using demo defaults: %s", exc)
        return SAFE_DEFAULTS.model_copy()


def validate_env() -> EnvConfig:
    """Validate at startup and log what was resolved."""
    try:
        config = get_env_config()
    except EnvConfigError as exc:
        logger.error("Environment configuration error: %s", exc)
        logger.error("Check your .env file and ensure all required variables are set.")
        raise

    if config.environment == "development":
        logger.info(
            "Environment configuration: api_base_url=%s ws_base_url=%s demo_mode=%s environment=%s",
            config.api_base_url, config.ws_base_url, config.demo_mode, config.environment,
        )
        if config.demo_mode:
            logger.info("Demo mode is enabled. Using mock data; the backend API will not be called.")
        else:
            logger.info("Will connect to backend API at %s", config.api_base_url)

    if config.environment == "production" and config.demo_mode:
        logger.warning("Demo mode is enabled in production. This should only be used for development.")

    return config
