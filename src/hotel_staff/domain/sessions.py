"""Domain models for the authentication session."""

from dataclasses import dataclass
from enum import Enum


class AuthState(Enum):
    """Render states observable by the rest of the app."""

    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


SCREEN_STACKS: dict[AuthState, tuple[str, ...]] = {
    AuthState.LOADING: ("loading",),
    AuthState.UNAUTHENTICATED: ("login", "otp"),
    AuthState.AUTHENTICATED: ("dashboard", "add_menu", "profile"),
}


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of the session at a point in time."""

    state: AuthState
    token: str | None
    is_loading: bool

    @property
    def screens(self) -> tuple[str, ...]:
        return SCREEN_STACKS[self.state]


class SessionTransitionError(RuntimeError):
    """Raised when a session operation is not valid in the current state."""
