"""Domain models for the hotel profile."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class HotelProfile(BaseModel):
    """Hotel profile as returned by the dashboard endpoint."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str | None = None
    hotel_name: str | None = None
    mobile_number: str | None = None
    description: str | None = None
    address: str | None = None
    price: float | None = None
    latitude: float | None = None
    longitude: float | None = None
    photos: list[str] = Field(default_factory=list)
    image_url: str | None = None

    @property
    def display_name(self) -> str:
        return self.hotel_name or self.name or "My Hotel"

    @property
    def gallery(self) -> list[str]:
        if self.photos:
            return list(self.photos)
        if self.image_url:
            return [self.image_url]
        return []


@dataclass
class ProfileDraft:
    """Editable profile fields, held as the text the user typed."""

    hotel_name: str = ""
    description: str = ""
    address: str = ""
    price: str = ""
    latitude: str = ""
    longitude: str = ""

    @classmethod
    def from_profile(cls, profile: HotelProfile) -> "ProfileDraft":
        return cls(
            hotel_name=profile.hotel_name or "",
            description=profile.description or "",
            address=profile.address or "",
            price=_number_text(profile.price),
            latitude=_number_text(profile.latitude),
            longitude=_number_text(profile.longitude),
        )

    def to_payload(self) -> dict[str, object]:
        """Build the update payload; raises ValueError on non-numeric fields."""
        payload: dict[str, object] = {
            "hotelName": self.hotel_name,
            "description": self.description,
            "address": self.address,
        }
        for key, raw in (
            ("price", self.price),
            ("latitude", self.latitude),
            ("longitude", self.longitude),
        ):
            cleaned = raw.strip()
            if cleaned:
                try:
                    payload[key] = float(cleaned)
                except ValueError as exc:
                    raise ValueError(f"{key} must be a number") from exc
        return payload


@dataclass(frozen=True)
class GeocodedAddress:
    """Reverse-geocoded address parts for a position."""

    name: str | None = None
    street: str | None = None
    city: str | None = None
    region: str | None = None
    postal_code: str | None = None
    country: str | None = None

    def formatted(self) -> str:
        parts = [
            self.name,
            self.street,
            self.city,
            self.region,
            self.postal_code,
            self.country,
        ]
        return ", ".join(part for part in parts if part)


def _number_text(value: float | None) -> str:
    # Zero is treated as unset, matching the server's defaults.
    if not value:
        return ""
    return str(value)
