"""Startup probe that checks the backend is reachable."""
from __future__ import annotations
import logging
from typing import Optional
import httpx
from pydantic import BaseModel
from .config import EnvConfig, get_safe_env_config

logger = logging.getLogger(__name__)

PROBE_TIMEOUT = 5.0


class ConnectionStatus(BaseModel):
    connected: bool
    error: Optional[str] = None
    api_url: str
    demo_mode: bool


async def _probe(client: httpx.AsyncClient, url: str) -> httpx.Response:
    return await client.get(url, headers={"Content-Type": "application/json"})


async def check_backend_connection(config: EnvConfig | None = None) -> ConnectionStatus:
    """Try ``/health`` then the base URL. A 404 still proves the server is up."""
    config = config or get_safe_env_config()
    if config.demo_mode:
        return ConnectionStatus(connected=True, api_url=config.api_base_url, demo_mode=True)

    base = config.api_base_url.rstrip("/")
    try:
        async with httpx.AsyncClient(http2=True, timeout=PROBE_TIMEOUT) as client:
            try:
                resp = await _probe(client, f"{base}/health")
            except httpx.TransportError:
                try:
                    resp = await _probe(client, base)
                except httpx.TransportError as exc:
                    raise ConnectionError("Unable to reach backend API") from exc
        if not resp.is_success and resp.status_code != 404:
            raise ConnectionError(f"Backend responded with status {resp.status_code}")
    except ConnectionError as exc:
        return ConnectionStatus(connected=False, error=str(exc), api_url=config.api_base_url, demo_mode=False)
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        # misconfigured base URL or a broken response, not an outage
        return ConnectionStatus(
            connected=False, error=f"Backend check failed: {exc}", api_url=config.api_base_url, demo_mode=False
        )

    return ConnectionStatus(connected=True, api_url=config.api_base_url, demo_mode=False)


async def validate_backend_connection(config: EnvConfig | None = None) -> ConnectionStatus:
    """Log a warning with hints when the backend is unreachable. Never raises."""
    status = await check_backend_connection(config)
    if not status.connected and not status.demo_mode:
        logger.warning("Backend API connection warning: %s", status.error or "Unable to connect to backend API")
        logger.warning(
            "Please ensure: 1. the backend API is running; 2. the backend URL is correct: %s; "
            "3. CORS is configured on the backend; 4. network connectivity is available",
            status.api_url,
        )
        logger.warning("Tip: enable demo mode by setting PORTAL_DEMO_MODE=true in .env")
    elif status.connected and not status.demo_mode:
        logger.info("Backend API connection successful: %s", status.api_url)
    return status
