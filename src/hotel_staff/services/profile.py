"""Hotel profile, photo gallery and location capture."""

import logging
from dataclasses import dataclass, field
from typing import Protocol

from hotel_staff.adapters.hotel_api_client import HotelApiClient
from hotel_staff.domain.hotel import GeocodedAddress, HotelProfile, ProfileDraft
from hotel_staff.domain.images import LocalImage
from hotel_staff.domain.notices import ActionResult
from hotel_staff.domain.responses import ApiResponse, DashboardResponse, PhotosResponse
from hotel_staff.services.errors import (
    REQUEST_ERRORS,
    failure_message,
    response_message,
)
from hotel_staff.services.menus import ImagePicker, ImagePickerError, ImageSource

_logger = logging.getLogger(__name__)


class LocationError(RuntimeError):
    """Raised by location providers when a position cannot be determined."""


class LocationProvider(Protocol):
    """Device location services."""

    async def request_permission(self) -> bool:
        """Ask for foreground location access."""

    async def current_position(self) -> tuple[float, float]:
        """Return the current (latitude, longitude)."""

    async def reverse_geocode(
        self, latitude: float, longitude: float
    ) -> list[GeocodedAddress]:
        """Return candidate addresses for a position, best first."""


@dataclass
class ProfileService:
    """Loads and edits the hotel profile shown on the dashboard."""

    api_client: HotelApiClient
    image_picker: ImagePicker
    location_provider: LocationProvider | None = None
    profile: HotelProfile | None = None
    draft: ProfileDraft = field(default_factory=ProfileDraft)
    photos: list[str] = field(default_factory=list)
    is_loading: bool = False
    is_saving: bool = False
    is_uploading_photos: bool = False
    is_fetching_location: bool = False

    async def fetch_profile(self) -> ActionResult:
        """Load the profile, draft fields and gallery from the server."""
        self.is_loading = True
        try:
            payload = await self.api_client.get_dashboard()
            response = DashboardResponse.model_validate(payload)
        except REQUEST_ERRORS as exc:
            _logger.warning("Error fetching profile: %s", exc)
            return ActionResult.error("Error", "Could not load profile data.")
        finally:
            self.is_loading = False

        if not response.success or response.hotel is None:
            return ActionResult.error(
                "Error", response_message(response, "Could not load profile data.")
            )
        self.profile = response.hotel
        self.draft = ProfileDraft.from_profile(response.hotel)
        self.photos = response.hotel.gallery
        return ActionResult.quiet()

    async def save_profile(self) -> ActionResult:
        """Send the edited draft to the server."""
        try:
            payload = self.draft.to_payload()
        except ValueError as exc:
            return ActionResult.invalid("Invalid Input", str(exc))
        if self.is_saving:
            return ActionResult.info("Please wait", "Saving is already in progress.")

        self.is_saving = True
        try:
            raw = await self.api_client.update_profile(payload)
            response = ApiResponse.model_validate(raw)
        except REQUEST_ERRORS as exc:
            _logger.warning("Error updating profile: %s", exc)
            return ActionResult.error(
                "Error",
                failure_message(exc, "An error occurred while saving profile."),
            )
        finally:
            self.is_saving = False

        if not response.success:
            return ActionResult.error("Error", "Failed to update profile.")
        return ActionResult.success("Success", "Profile updated successfully!")

    async def add_photos(self) -> ActionResult:
        """Pick gallery photos and upload them."""
        if self.is_uploading_photos:
            return ActionResult.info("Please wait", "Photos are already uploading.")
        if not await self.image_picker.request_permission(ImageSource.GALLERY):
            return ActionResult.info(
                "Permission needed",
                "Please grant camera roll permissions to upload hotel photos.",
            )
        try:
            images = await self.image_picker.pick(ImageSource.GALLERY, multiple=True)
        except ImagePickerError as exc:
            _logger.warning("Photo pick failed: %s", exc)
            return ActionResult.error("Error", "Could not load the selected photos.")
        if not images:
            return ActionResult.quiet()
        return await self.upload_photos(images)

    async def upload_photos(self, images: list[LocalImage]) -> ActionResult:
        """Upload gallery photos; the gallery becomes the server's list."""
        if not images:
            return ActionResult.invalid("No image", "Please select at least one photo.")
        self.is_uploading_photos = True
        try:
            payload = await self.api_client.upload_hotel_photos(images)
            response = PhotosResponse.model_validate(payload)
        except REQUEST_ERRORS as exc:
            _logger.warning("Photo upload failed: %s", exc)
            return ActionResult.error(
                "Error", "Could not upload the photos. Please try again."
            )
        finally:
            self.is_uploading_photos = False

        if not response.success:
            return ActionResult.error(
                "Error", response_message(response, "Failed to upload photos")
            )
        self.photos = list(response.photos)
        return ActionResult.success("Success", "Hotel photos updated successfully!")

    async def delete_photo(self, photo_url: str) -> ActionResult:
        """Remove one photo from the gallery."""
        try:
            payload = await self.api_client.delete_hotel_photo(photo_url)
            response = PhotosResponse.model_validate(payload)
        except REQUEST_ERRORS as exc:
            _logger.warning("Photo delete failed: %s", exc)
            return ActionResult.error("Error", "Could not delete photo.")

        if not response.success:
            return ActionResult.error(
                "Error", response_message(response, "Failed to delete photo")
            )
        self.photos = list(response.photos)
        return ActionResult.success("Success", "Photo deleted!")

    async def capture_location(self) -> ActionResult:
        """Fill latitude, longitude and address from the device position."""
        if self.location_provider is None:
            return ActionResult.info(
                "Unavailable", "Location services are not available on this device."
            )
        self.is_fetching_location = True
        try:
            if not await self.location_provider.request_permission():
                return ActionResult.info(
                    "Permission needed", "Permission to access location was denied"
                )
            latitude, longitude = await self.location_provider.current_position()
            self.draft.latitude = str(latitude)
            self.draft.longitude = str(longitude)
            addresses = await self.location_provider.reverse_geocode(
                latitude, longitude
            )
        except LocationError as exc:
            _logger.warning("Error getting location: %s", exc)
            return ActionResult.error(
                "Error",
                "Could not fetch your current location. "
                "Please ensure location services are enabled.",
            )
        finally:
            self.is_fetching_location = False

        if addresses:
            formatted = addresses[0].formatted()
            if formatted:
                self.draft.address = formatted
        return ActionResult.success(
            "Success", "Location and address captured successfully!"
        )
