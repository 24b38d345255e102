"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest

from hotel_staff.adapters.hotel_api_client import HotelApiClient
from hotel_staff.config import Settings
from hotel_staff.containers import AppContainer
from hotel_staff.domain.hotel import GeocodedAddress
from hotel_staff.domain.images import LocalImage
from hotel_staff.services.auth import AuthService
from hotel_staff.services.menus import ImagePicker, ImageSource, MenuPublisher
from hotel_staff.services.profile import LocationProvider, ProfileService
from hotel_staff.services.session import (
    CredentialStore,
    CredentialStoreError,
    SessionManager,
)

JPEG_BYTES = b"\xff\xd8\xff\xe0fake-jpeg"
TEST_FERNET_KEY = "ZmDfcTF7_60GrrY167zsiPd67pEvs0aGOv2oasOM1Pg="


@dataclass
class InMemoryCredentialStore(CredentialStore):
    """In-memory credential store for tests."""

    items: dict[str, str] = field(default_factory=dict)
    fail_reads: bool = False
    fail_writes: bool = False
    writes: list[str] = field(default_factory=list)

    async def get_item(self, key: str) -> str | None:
        if self.fail_reads:
            raise CredentialStoreError("read failed")
        return self.items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise CredentialStoreError("write failed")
        self.writes.append(key)
        self.items[key] = value

    async def delete_item(self, key: str) -> None:
        self.items.pop(key, None)


@dataclass
class FakeHotelApiClient(HotelApiClient):
    """Fake API client returning queued payloads and recording calls.

    A queued exception is raised instead of returned.
    """

    responses: dict[str, list[object]] = field(default_factory=dict)
    calls: list[tuple[str, dict[str, object]]] = field(default_factory=list)

    def queue(self, operation: str, *results: object) -> None:
        self.responses.setdefault(operation, []).extend(results)

    def calls_to(self, operation: str) -> list[dict[str, object]]:
        return [args for name, args in self.calls if name == operation]

    async def _respond(self, operation: str, **kwargs: object) -> dict[str, object]:
        self.calls.append((operation, kwargs))
        queued = self.responses.get(operation) or [{"success": True}]
        result = queued.pop(0) if len(queued) > 1 else queued[0]
        if isinstance(result, Exception):
            raise result
        return result  # type: ignore[return-value]

    async def send_otp(self, mobile_number: str) -> dict[str, object]:
        return await self._respond("send_otp", mobile_number=mobile_number)

    async def verify_otp(
        self,
        mobile_number: str,
        otp: str,
        name: str | None = None,
        hotel_name: str | None = None,
    ) -> dict[str, object]:
        return await self._respond(
            "verify_otp",
            mobile_number=mobile_number,
            otp=otp,
            name=name,
            hotel_name=hotel_name,
        )

    async def direct_login(
        self,
        mobile_number: str,
        name: str | None = None,
        hotel_name: str | None = None,
    ) -> dict[str, object]:
        return await self._respond(
            "direct_login",
            mobile_number=mobile_number,
            name=name,
            hotel_name=hotel_name,
        )

    async def get_dashboard(self) -> dict[str, object]:
        return await self._respond("get_dashboard")

    async def update_profile(self, payload: dict[str, object]) -> dict[str, object]:
        return await self._respond("update_profile", payload=payload)

    async def upload_menu(
        self, image: LocalImage, note: str | None = None
    ) -> dict[str, object]:
        return await self._respond("upload_menu", image=image, note=note)

    async def get_menu_history(self) -> dict[str, object]:
        return await self._respond("get_menu_history")

    async def upload_hotel_photos(self, images: list[LocalImage]) -> dict[str, object]:
        return await self._respond("upload_hotel_photos", images=images)

    async def delete_hotel_photo(self, photo_url: str) -> dict[str, object]:
        return await self._respond("delete_hotel_photo", photo_url=photo_url)


@dataclass
class FakeImagePicker(ImagePicker):
    """Fake picker with configurable permission and picked images."""

    granted: bool = True
    images: list[LocalImage] = field(
        default_factory=lambda: [LocalImage.from_bytes("menu.jpg", JPEG_BYTES)]
    )
    permission_requests: list[ImageSource] = field(default_factory=list)
    picks: int = 0

    async def request_permission(self, source: ImageSource) -> bool:
        self.permission_requests.append(source)
        return self.granted

    async def pick(
        self, source: ImageSource, multiple: bool = False
    ) -> list[LocalImage]:
        self.picks += 1
        return list(self.images) if multiple else list(self.images[:1])


@dataclass
class FakeLocationProvider(LocationProvider):
    """Fake location provider with a fixed position."""

    granted: bool = True
    position: tuple[float, float] = (26.9124, 75.7873)
    addresses: list[GeocodedAddress] = field(
        default_factory=lambda: [
            GeocodedAddress(
                name="Hotel Khichdi",
                street="MI Road",
                city="Jaipur",
                region="Rajasthan",
                postal_code="302001",
                country="India",
            )
        ]
    )

    async def request_permission(self) -> bool:
        return self.granted

    async def current_position(self) -> tuple[float, float]:
        return self.position

    async def reverse_geocode(
        self, latitude: float, longitude: float
    ) -> list[GeocodedAddress]:
        return self.addresses


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        api_base_url="https://api.test/api",
        credential_store_path=str(tmp_path / "credentials.bin"),
        credential_key=TEST_FERNET_KEY,
    )


@pytest.fixture
def credential_store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture
def api_client() -> FakeHotelApiClient:
    return FakeHotelApiClient()


@pytest.fixture
def image_picker() -> FakeImagePicker:
    return FakeImagePicker()


@pytest.fixture
def container(
    settings: Settings,
    credential_store: InMemoryCredentialStore,
    api_client: FakeHotelApiClient,
    image_picker: FakeImagePicker,
) -> AppContainer:
    session_manager = SessionManager(credential_store=credential_store)
    auth_service = AuthService(api_client=api_client, session_manager=session_manager)
    menu_publisher = MenuPublisher(api_client=api_client, image_picker=image_picker)
    profile_service = ProfileService(
        api_client=api_client,
        image_picker=image_picker,
        location_provider=FakeLocationProvider(),
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        credential_store=credential_store,
        session_manager=session_manager,
        api_client=api_client,
        auth_service=auth_service,
        menu_publisher=menu_publisher,
        profile_service=profile_service,
        close_resources=close_resources,
    )
