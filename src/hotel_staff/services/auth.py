"""OTP login flow feeding the session manager."""

import logging
from dataclasses import dataclass

from hotel_staff.adapters.hotel_api_client import HotelApiClient
from hotel_staff.domain.notices import ActionResult
from hotel_staff.domain.responses import ApiResponse, TokenResponse
from hotel_staff.services.errors import (
    REQUEST_ERRORS,
    SERVER_FALLBACK,
    failure_message,
    response_message,
    status_code_from_exception,
)
from hotel_staff.services.session import CredentialStoreError, SessionManager

_logger = logging.getLogger(__name__)


@dataclass
class AuthService:
    """Requests and verifies OTPs, then hands the token to the session."""

    api_client: HotelApiClient
    session_manager: SessionManager
    mobile_number_min_length: int = 10
    otp_length: int = 5
    allow_direct_login: bool = False
    is_loading: bool = False

    def validate_mobile_number(self, mobile_number: str) -> ActionResult | None:
        """Return a validation failure for implausible numbers, else None."""
        cleaned = mobile_number.strip()
        if not cleaned or len(cleaned) < self.mobile_number_min_length:
            return ActionResult.invalid(
                "Invalid Input", "Please enter a valid mobile number"
            )
        return None

    async def request_otp(self, mobile_number: str) -> ActionResult:
        """Ask the server to send an OTP to the given number."""
        invalid = self.validate_mobile_number(mobile_number)
        if invalid is not None:
            return invalid
        if self.is_loading:
            return ActionResult.info("Please wait", "A request is already in progress.")

        self.is_loading = True
        try:
            payload = await self.api_client.send_otp(mobile_number.strip())
            response = ApiResponse.model_validate(payload)
        except REQUEST_ERRORS as exc:
            _logger.warning(
                "Send OTP failed (status=%s): %s", status_code_from_exception(exc), exc
            )
            return ActionResult.error("Error", failure_message(exc, SERVER_FALLBACK))
        finally:
            self.is_loading = False

        if not response.success:
            return ActionResult.error(
                "Error", response_message(response, "Failed to send OTP")
            )
        return ActionResult.success(
            "OTP Sent", f"An OTP has been sent to {mobile_number.strip()}."
        )

    async def verify_otp(
        self,
        mobile_number: str,
        code: str,
        name: str | None = None,
        hotel_name: str | None = None,
    ) -> ActionResult:
        """Verify an OTP and log in with the returned token."""
        if self.session_manager.is_authenticated:
            return ActionResult.info("Already signed in", "Log out before verifying.")
        cleaned = code.strip()
        if len(cleaned) != self.otp_length or not (
            cleaned.isascii() and cleaned.isdigit()
        ):
            return ActionResult.invalid(
                "Invalid OTP", f"Please enter the {self.otp_length}-digit OTP"
            )
        if self.is_loading:
            return ActionResult.info("Please wait", "A request is already in progress.")

        self.is_loading = True
        try:
            payload = await self.api_client.verify_otp(
                mobile_number.strip(), cleaned, name=name, hotel_name=hotel_name
            )
            response = TokenResponse.model_validate(payload)
            return await self._login_with(response, fallback="Invalid OTP")
        except REQUEST_ERRORS as exc:
            _logger.warning(
                "Verify OTP failed (status=%s): %s",
                status_code_from_exception(exc),
                exc,
            )
            return ActionResult.error("Error", failure_message(exc, SERVER_FALLBACK))
        finally:
            self.is_loading = False

    async def direct_login(
        self,
        mobile_number: str,
        name: str | None = None,
        hotel_name: str | None = None,
    ) -> ActionResult:
        """Log in without an OTP; only available when enabled in settings."""
        if not self.allow_direct_login:
            return ActionResult.info(
                "Unavailable", "Direct login is disabled. Use OTP login instead."
            )
        if self.session_manager.is_authenticated:
            return ActionResult.info("Already signed in", "Log out before logging in.")
        invalid = self.validate_mobile_number(mobile_number)
        if invalid is not None:
            return invalid

        self.is_loading = True
        try:
            payload = await self.api_client.direct_login(
                mobile_number.strip(), name=name, hotel_name=hotel_name
            )
            response = TokenResponse.model_validate(payload)
            return await self._login_with(response, fallback="Login failed")
        except REQUEST_ERRORS as exc:
            _logger.warning("Direct login failed: %s", exc)
            return ActionResult.error("Error", failure_message(exc, SERVER_FALLBACK))
        finally:
            self.is_loading = False

    async def _login_with(self, response: TokenResponse, fallback: str) -> ActionResult:
        if not response.success:
            return ActionResult.error("Error", response_message(response, fallback))
        if not response.token:
            _logger.warning("Login response did not include a token")
            return ActionResult.error("Error", SERVER_FALLBACK)
        try:
            await self.session_manager.login(response.token)
        except CredentialStoreError:
            _logger.exception("Failed to persist session token")
            return ActionResult.error(
                "Error", "Could not save your session. Please try again."
            )
        return ActionResult.success("Welcome", "You are now signed in.")
