"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from hotel_staff.adapters.fernet_credential_store import FernetCredentialStore
from hotel_staff.adapters.file_image_picker import FileImagePicker
from hotel_staff.adapters.hotel_api_client import HotelApiClient, HttpxHotelApiClient
from hotel_staff.config import Settings, normalize_base_url
from hotel_staff.services.auth import AuthService
from hotel_staff.services.menus import ImagePicker, MenuPublisher
from hotel_staff.services.otp import OtpVerification, ResendCountdown
from hotel_staff.services.profile import LocationProvider, ProfileService
from hotel_staff.services.session import CredentialStore, SessionManager


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    credential_store: CredentialStore
    session_manager: SessionManager
    api_client: HotelApiClient
    auth_service: AuthService
    menu_publisher: MenuPublisher
    profile_service: ProfileService
    close_resources: Callable[[], Awaitable[None]]

    def otp_verification(
        self,
        mobile_number: str,
        name: str | None = None,
        hotel_name: str | None = None,
        incoming_otp: str | None = None,
    ) -> OtpVerification:
        """Create the state for an OTP screen."""
        return OtpVerification(
            auth_service=self.auth_service,
            mobile_number=mobile_number,
            countdown=ResendCountdown(
                duration_seconds=self.settings.otp_resend_seconds
            ),
            name=name,
            hotel_name=hotel_name,
            incoming_otp=incoming_otp,
        )


def build_container(
    settings: Settings | None = None,
    image_picker: ImagePicker | None = None,
    location_provider: LocationProvider | None = None,
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    resolved_picker = image_picker or FileImagePicker()
    credential_store = FernetCredentialStore.create(
        path=resolved_settings.credential_store_path,
        key=resolved_settings.credential_key,
    )
    session_manager = SessionManager(
        credential_store=credential_store,
        token_key=resolved_settings.token_key,
    )
    api_client = HttpxHotelApiClient.create(
        base_url=normalize_base_url(resolved_settings.api_base_url),
        auth_headers=session_manager.authorization_headers,
        timeout=resolved_settings.request_timeout_seconds,
    )
    auth_service = AuthService(
        api_client=api_client,
        session_manager=session_manager,
        mobile_number_min_length=resolved_settings.mobile_number_min_length,
        otp_length=resolved_settings.otp_length,
        allow_direct_login=resolved_settings.allow_direct_login,
    )
    menu_publisher = MenuPublisher(
        api_client=api_client,
        image_picker=resolved_picker,
        history_limit=resolved_settings.menu_history_limit,
        note_max_length=resolved_settings.menu_note_max_length,
    )
    profile_service = ProfileService(
        api_client=api_client,
        image_picker=resolved_picker,
        location_provider=location_provider,
    )

    async def close_resources() -> None:
        await api_client.close()

    return AppContainer(
        settings=resolved_settings,
        credential_store=credential_store,
        session_manager=session_manager,
        api_client=api_client,
        auth_service=auth_service,
        menu_publisher=menu_publisher,
        profile_service=profile_service,
        close_resources=close_resources,
    )
