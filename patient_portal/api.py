"""Typed portal operations. The rest of the application calls only these.

The data source (live backend or demo fixtures) is chosen once, when the
façade is built.
"""
from __future__ import annotations
import logging
from typing import Any, Protocol, Union
from pydantic import TypeAdapter, ValidationError
from .client import ApiClient
from .config import EnvConfig, get_safe_env_config
from .demo import DemoDataSource
from .errors import ApiError, INVALID_RESPONSE
from .models import (
    Appointment,
    LabResult,
    Medication,
    PatientLoginRequest,
    PatientLoginResponse,
    VisitSummary,
)
from .token_store import AuthTokenStore

logger = logging.getLogger(__name__)

LOGIN_PATH = "/auth/patient/login"
LABS_PATH = "/api/patient/labs"
MEDICATIONS_PATH = "/api/patient/medications"
APPOINTMENTS_PATH = "/api/patient/appointments"
SUMMARIES_PATH = "/api/patient/summaries"

_login = TypeAdapter(PatientLoginResponse)
_labs = TypeAdapter(list[LabResult])
_medications = TypeAdapter(list[Medication])
_appointments = TypeAdapter(list[Appointment])
_summaries = TypeAdapter(list[VisitSummary])


class DataSource(Protocol):
    async def login(self, credentials: PatientLoginRequest) -> PatientLoginResponse: ...
    async def get_labs(self) -> list[LabResult]: ...
    async def get_medications(self) -> list[Medication]: ...
    async def get_appointments(self) -> list[Appointment]: ...
    async def get_summaries(self) -> list[VisitSummary]: ...
    async def request(self, endpoint: str, method: str = "GET", body: Any = None, headers: Any = None) -> Any: ...


class LiveDataSource:
    """Talks to the backend through :class:`ApiClient`."""

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def _parse(self, adapter: TypeAdapter, payload: Any, endpoint: str) -> Any:
        try:
            return adapter.validate_python(payload)
        except ValidationError as exc:
            # field details can carry patient data, so only the count is logged
            logger.warning("Unexpected response shape endpoint=%s errors=%d", endpoint, exc.error_count())
            raise ApiError("Unexpected response from the server.", 0, INVALID_RESPONSE) from exc

    async def login(self, credentials: PatientLoginRequest) -> PatientLoginResponse:
        return self._parse(_login, await self.client.post(LOGIN_PATH, body=credentials), LOGIN_PATH)

    async def get_labs(self) -> list[LabResult]:
        return self._parse(_labs, await self.client.get(LABS_PATH), LABS_PATH)

    async def get_medications(self) -> list[Medication]:
        return self._parse(_medications, await self.client.get(MEDICATIONS_PATH), MEDICATIONS_PATH)

    async def get_appointments(self) -> list[Appointment]:
        return self._parse(_appointments, await self.client.get(APPOINTMENTS_PATH), APPOINTMENTS_PATH)

    async def get_summaries(self) -> list[VisitSummary]:
        return self._parse(_summaries, await self.client.get(SUMMARIES_PATH), SUMMARIES_PATH)

    async def request(self, endpoint: str, method: str = "GET", body: Any = None, headers: Any = None) -> Any:
        return await self.client.request(endpoint, method=method, body=body, headers=headers)


class AuthApi:
    def __init__(self, source: DataSource, token_store: AuthTokenStore) -> None:
        self.source = source
        self.token_store = token_store

    async def login(self, credentials: Union[PatientLoginRequest, dict]) -> PatientLoginResponse:
        """Exchange email + access code for a token. The token is stored only if the call succeeds."""
        if not isinstance(credentials, PatientLoginRequest):
            credentials = PatientLoginRequest.model_validate(credentials)
        response = await self.source.login(credentials)
        self.token_store.set(response.token)
        logger.info("Patient login succeeded")
        return response

    def logout(self) -> None:
        self.token_store.clear()


class PatientApi:
    """Read-only patient data."""

    def __init__(self, source: DataSource) -> None:
        self.source = source

    async def get_labs(self) -> list[LabResult]:
        return await self.source.get_labs()

    async def get_medications(self) -> list[Medication]:
        return await self.source.get_medications()

    async def get_appointments(self) -> list[Appointment]:
        return await self.source.get_appointments()

    async def get_summaries(self) -> list[VisitSummary]:
        return await self.source.get_summaries()


class PortalApi:
    def __init__(self, config: EnvConfig, token_store: AuthTokenStore, source: DataSource) -> None:
        self.config = config
        self.token_store = token_store
        self.source = source
        self.auth = AuthApi(source, token_store)
        self.patient = PatientApi(source)


def create_portal_api(config: EnvConfig | None = None, token_store: AuthTokenStore | None = None) -> PortalApi:
    """Build the façade, picking demo fixtures or the live backend from ``config.demo_mode``."""
    config = config or get_safe_env_config()
    token_store = token_store or AuthTokenStore()
    if config.demo_mode:
        logger.info("Demo mode enabled; backend at %s will not be called", config.api_base_url)
        source: DataSource = DemoDataSource()
    else:
        source = LiveDataSource(ApiClient(config.api_base_url, token_store))
    return PortalApi(config, token_store, source)
