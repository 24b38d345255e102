"""Pydantic models for API response envelopes."""

from typing import Any

from pydantic import BaseModel, Field

from hotel_staff.domain.hotel import HotelProfile


class ApiResponse(BaseModel):
    """Common `{success, message}` envelope."""

    success: bool = False
    message: str | None = None


class TokenResponse(ApiResponse):
    """Response of OTP verification and direct login."""

    token: str | None = None


class DashboardResponse(ApiResponse):
    """Response of the hotel dashboard endpoint."""

    hotel: HotelProfile | None = None


class MenuHistoryResponse(ApiResponse):
    """Response of the menu history endpoint; records are parsed one by one."""

    menus: list[Any] = Field(default_factory=list)


class PhotosResponse(ApiResponse):
    """Response of the hotel photo endpoints."""

    photos: list[str] = Field(default_factory=list)
