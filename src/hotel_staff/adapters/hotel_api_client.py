"""Hotel backend REST API client."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import httpx

from hotel_staff.domain.images import LocalImage


class HotelApiClient(Protocol):
    """Interface for the hotel backend REST API."""

    async def send_otp(self, mobile_number: str) -> dict[str, object]:
        """Request an OTP for a mobile number."""

    async def verify_otp(
        self,
        mobile_number: str,
        otp: str,
        name: str | None = None,
        hotel_name: str | None = None,
    ) -> dict[str, object]:
        """Verify an OTP and return the token payload."""

    async def direct_login(
        self,
        mobile_number: str,
        name: str | None = None,
        hotel_name: str | None = None,
    ) -> dict[str, object]:
        """Log in without an OTP and return the token payload."""

    async def get_dashboard(self) -> dict[str, object]:
        """Fetch the hotel profile."""

    async def update_profile(self, payload: dict[str, object]) -> dict[str, object]:
        """Update the hotel profile."""

    async def upload_menu(
        self, image: LocalImage, note: str | None = None
    ) -> dict[str, object]:
        """Upload a daily menu image with an optional note."""

    async def get_menu_history(self) -> dict[str, object]:
        """Fetch the published menu history."""

    async def upload_hotel_photos(self, images: list[LocalImage]) -> dict[str, object]:
        """Upload one or more hotel gallery photos."""

    async def delete_hotel_photo(self, photo_url: str) -> dict[str, object]:
        """Delete a hotel gallery photo."""


@dataclass
class HttpxHotelApiClient(HotelApiClient):
    """HTTPX-backed hotel API client.

    Authorization is attached per request from ``auth_headers``, which the
    session manager owns. The client never stores a token itself.
    """

    base_url: str
    http_client: httpx.AsyncClient
    auth_headers: Callable[[], dict[str, str]]
    timeout: float = 15

    @classmethod
    def create(
        cls,
        base_url: str,
        auth_headers: Callable[[], dict[str, str]],
        timeout: float = 15,
    ) -> "HttpxHotelApiClient":
        """Create an API client with a managed httpx session."""
        return cls(
            base_url=base_url,
            http_client=httpx.AsyncClient(),
            auth_headers=auth_headers,
            timeout=timeout,
        )

    async def send_otp(self, mobile_number: str) -> dict[str, object]:
        """Request an OTP for a mobile number."""
        return await self._request(
            "POST", "/auth/send-otp", json={"mobileNumber": mobile_number}
        )

    async def verify_otp(
        self,
        mobile_number: str,
        otp: str,
        name: str | None = None,
        hotel_name: str | None = None,
    ) -> dict[str, object]:
        """Verify an OTP, optionally registering the staff and hotel names."""
        payload = _with_registration(
            {"mobileNumber": mobile_number, "otp": otp}, name, hotel_name
        )
        return await self._request("POST", "/auth/verify-otp", json=payload)

    async def direct_login(
        self,
        mobile_number: str,
        name: str | None = None,
        hotel_name: str | None = None,
    ) -> dict[str, object]:
        """Log in without an OTP."""
        payload = _with_registration({"mobileNumber": mobile_number}, name, hotel_name)
        return await self._request("POST", "/auth/direct-login", json=payload)

    async def get_dashboard(self) -> dict[str, object]:
        """Fetch the hotel profile."""
        return await self._request("GET", "/hotel/dashboard")

    async def update_profile(self, payload: dict[str, object]) -> dict[str, object]:
        """Update the hotel profile."""
        return await self._request("PUT", "/hotel/profile", json=payload)

    async def upload_menu(
        self, image: LocalImage, note: str | None = None
    ) -> dict[str, object]:
        """Upload a daily menu image as multipart form data."""
        data = {"note": note} if note else None
        return await self._request(
            "POST",
            "/menu/upload",
            files={"menuImage": image.as_upload()},
            data=data,
        )

    async def get_menu_history(self) -> dict[str, object]:
        """Fetch the published menu history."""
        return await self._request("GET", "/menu/history")

    async def upload_hotel_photos(self, images: list[LocalImage]) -> dict[str, object]:
        """Upload hotel gallery photos as repeated ``hotelImages`` parts."""
        files = [("hotelImages", image.as_upload()) for image in images]
        return await self._request("POST", "/hotel/upload-photos", files=files)

    async def delete_hotel_photo(self, photo_url: str) -> dict[str, object]:
        """Delete a hotel gallery photo."""
        return await self._request(
            "DELETE", "/hotel/photo", json={"photoUrl": photo_url}
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _request(
        self, method: str, path: str, **kwargs: object
    ) -> dict[str, object]:
        response = await self.http_client.request(
            method,
            f"{self.base_url}{path}",
            headers=self.auth_headers(),
            timeout=self.timeout,
            **kwargs,
        )
        response.raise_for_status()
        return response.json()


def _with_registration(
    payload: dict[str, object], name: str | None, hotel_name: str | None
) -> dict[str, object]:
    if name:
        payload["name"] = name
    if hotel_name:
        payload["hotelName"] = hotel_name
    return payload
