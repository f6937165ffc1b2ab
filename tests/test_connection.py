import pytest, respx, httpx
from patient_portal.config import EnvConfig
from patient_portal.connection import check_backend_connection, validate_backend_connection

BASE = "http://portal.test"
LIVE = EnvConfig(api_base_url=BASE, ws_base_url="ws://portal.test", demo_mode=False)


@pytest.mark.asyncio
async def test_demo_mode_is_connected_without_io():
    config = LIVE.model_copy(update={"demo_mode": True})
    with respx.mock(assert_all_called=False) as m:
        status = await check_backend_connection(config)
        assert not m.calls
    assert status.connected and status.demo_mode


@pytest.mark.asyncio
async def test_health_endpoint_ok():
    with respx.mock(base_url=BASE) as m:
        m.get("/health").respond(200)
        status = await check_backend_connection(LIVE)
    assert status.connected
    assert status.api_url == BASE


@pytest.mark.asyncio
async def test_404_counts_as_reachable():
    with respx.mock(base_url=BASE) as m:
        m.get("/health").respond(404)
        assert (await check_backend_connection(LIVE)).connected


@pytest.mark.asyncio
async def test_falls_back_to_root_when_health_unreachable():
    with respx.mock(base_url=BASE) as m:
        m.get("/health").mock(side_effect=httpx.ConnectTimeout("slow"))
        root = m.get("/").respond(200)
        status = await check_backend_connection(LIVE)
    assert status.connected
    assert root.called


@pytest.mark.asyncio
async def test_unreachable_backend():
    with respx.mock(base_url=BASE) as m:
        m.get("/health").mock(side_effect=httpx.ConnectError("refused"))
        m.get("/").mock(side_effect=httpx.ConnectError("refused"))
        status = await check_backend_connection(LIVE)
    assert not status.connected
    assert status.error == "Unable to reach backend API"


@pytest.mark.asyncio
async def test_server_error_is_not_connected():
    with respx.mock(base_url=BASE) as m:
        m.get("/health").respond(503)
        status = await check_backend_connection(LIVE)
    assert not status.connected
    assert status.error == "Backend responded with status 503"


@pytest.mark.asyncio
async def test_validate_never_raises_and_logs_hints(caplog):
    with respx.mock(base_url=BASE) as m:
        m.get("/health").mock(side_effect=httpx.ConnectError("refused"))
        m.get("/").mock(side_effect=httpx.ConnectError("refused"))
        status = await validate_backend_connection(LIVE)
    assert not status.connected
    assert "PORTAL_DEMO_MODE" in caplog.text


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [httpx.InvalidURL("bad host"), httpx.DecodingError("garbled")])
async def test_unexpected_probe_failures_are_reported_not_raised(monkeypatch, caplog, error):
    async def failing(client, url):
        raise error

    monkeypatch.setattr("patient_portal.connection._probe", failing)
    status = await validate_backend_connection(LIVE)
    assert not status.connected
    assert status.error.startswith("Backend check failed")
    assert "Backend API connection warning" in caplog.text
