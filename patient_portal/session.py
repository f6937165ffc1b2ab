"""Tracks who is signed in, driven by the token store."""
from __future__ import annotations
import logging
from typing import Callable, Optional
from .api import AuthApi
from .models import Patient, PatientLoginRequest, PatientLoginResponse
from .token_store import AuthTokenStore

logger = logging.getLogger(__name__)


class PatientSession:
    """Mirror of the auth state for the presentation layer.

    ``on_logout`` fires whenever the token disappears, whether from an explicit
    logout or from a 401 clearing the store mid-request.
    """

    def __init__(self, auth: AuthApi, token_store: AuthTokenStore,
                 on_logout: Optional[Callable[[], None]] = None) -> None:
        self.auth = auth
        self.token_store = token_store
        self.on_logout = on_logout
        self.is_authenticated = bool(token_store.get())
        self.patient: Patient | None = None
        self.is_loading = False
        self._unsubscribe = token_store.subscribe(self._on_token_change)

    def _on_token_change(self, token: str | None) -> None:
        self.is_loading = False
        if token:
            self.is_authenticated = True
            return
        self.is_authenticated = False
        self.patient = None
        if self.on_logout is not None:
            self.on_logout()

    async def login(self, credentials: PatientLoginRequest | dict) -> PatientLoginResponse:
        self.is_loading = True
        try:
            response = await self.auth.login(credentials)
        except Exception:
            self.is_loading = False
            raise
        self.is_authenticated = True
        self.patient = response.patient
        self.is_loading = False
        return response

    def logout(self) -> None:
        # the store listener resets state and fires on_logout
        self.auth.logout()

    def close(self) -> None:
        self._unsubscribe()
