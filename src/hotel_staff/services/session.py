"""Session state machine for the authenticated staff member."""

import logging
from dataclasses import dataclass, field
from typing import Protocol

from hotel_staff.domain.sessions import (
    AuthState,
    SessionSnapshot,
    SessionTransitionError,
)

_logger = logging.getLogger(__name__)


class CredentialStoreError(RuntimeError):
    """Raised when the credential store cannot be read or written."""


class CredentialStore(Protocol):
    """Durable, encrypted key-value persistence for credentials."""

    async def get_item(self, key: str) -> str | None:
        """Return the stored value for a key, if present."""

    async def set_item(self, key: str, value: str) -> None:
        """Store a value under a key."""

    async def delete_item(self, key: str) -> None:
        """Remove a key; missing keys are ignored."""


@dataclass
class SessionManager:
    """Owns the bearer token and the authentication state.

    One instance exists per process. The API client reads the token through
    ``authorization_headers`` on every request; nothing else mutates it.
    """

    credential_store: CredentialStore
    token_key: str = "hotelToken"
    token: str | None = field(default=None, init=False)
    state: AuthState = field(default=AuthState.LOADING, init=False)
    is_loading: bool = field(default=True, init=False)

    @property
    def render_state(self) -> AuthState:
        return self.state

    @property
    def is_authenticated(self) -> bool:
        return self.state is AuthState.AUTHENTICATED

    def snapshot(self) -> SessionSnapshot:
        """Return the current session as an immutable value."""
        return SessionSnapshot(
            state=self.state, token=self.token, is_loading=self.is_loading
        )

    def authorization_headers(self) -> dict[str, str]:
        """Return the Authorization header for outgoing requests."""
        if self.token is None:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def initialize(self) -> SessionSnapshot:
        """Load the persisted token, if any, and leave the loading state."""
        if self.state is not AuthState.LOADING:
            return self.snapshot()
        self.is_loading = True
        token: str | None = None
        try:
            token = await self.credential_store.get_item(self.token_key)
        except Exception:
            # A missing or unreadable token is a normal first-run state.
            _logger.exception("Token extraction error")
        finally:
            if token and token.strip():
                self.token = token
                self.state = AuthState.AUTHENTICATED
            else:
                self.state = AuthState.UNAUTHENTICATED
            self.is_loading = False
        _logger.info("Session initialized: state=%s", self.state.value)
        return self.snapshot()

    async def login(self, token: str) -> SessionSnapshot:
        """Persist a token and authenticate subsequent requests with it."""
        if not isinstance(token, str) or not token.strip():
            raise ValueError("Token must be a non-empty string")
        if self.state is AuthState.LOADING:
            raise SessionTransitionError("Cannot log in before the session is loaded")
        if self.state is AuthState.AUTHENTICATED:
            raise SessionTransitionError("Already logged in; log out first")
        self.is_loading = True
        try:
            await self.credential_store.set_item(self.token_key, token)
            self.token = token
            self.state = AuthState.AUTHENTICATED
        finally:
            self.is_loading = False
        _logger.info("Session authenticated")
        return self.snapshot()

    async def logout(self) -> SessionSnapshot:
        """Drop the token, then remove it from persistent storage."""
        self.token = None
        self.state = AuthState.UNAUTHENTICATED
        self.is_loading = True
        try:
            await self.credential_store.delete_item(self.token_key)
        finally:
            self.is_loading = False
        _logger.info("Session logged out")
        return self.snapshot()
