"""In-memory bearer token holder.

The token is never written to disk. Listeners are called synchronously, in
subscription order, every time the value is written.
"""
from __future__ import annotations
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

TokenListener = Callable[[Optional[str]], None]


class AuthTokenStore:
    def __init__(self) -> None:
        self._token: str | None = None
        # registration handle -> listener, insertion ordered
        self._listeners: dict[object, TokenListener] = {}

    def get(self) -> str | None:
        return self._token

    def set(self, token: str | None) -> None:
        """Replace the token and notify every listener, even if the value did not change."""
        self._token = token
        for listener in list(self._listeners.values()):
            try:
                listener(token)
            except Exception:
                logger.exception("Auth token listener %r failed", listener)

    def clear(self) -> None:
        self.set(None)

    def subscribe(self, listener: TokenListener) -> Callable[[], None]:
        """Register *listener*; the returned callable removes this registration only."""
        handle = object()
        self._listeners[handle] = listener

        def unsubscribe() -> None:
            self._listeners.pop(handle, None)

        return unsubscribe

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)
