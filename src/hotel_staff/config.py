"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    api_base_url: str = "http://localhost:5000/api"
    credential_store_path: str = "~/.hotel_staff/credentials.bin"
    credential_key: str
    token_key: str = "hotelToken"
    request_timeout_seconds: float = 15
    mobile_number_min_length: int = 10
    otp_length: int = 5
    otp_resend_seconds: int = 300
    menu_history_limit: int = 5
    menu_note_max_length: int = 200
    allow_direct_login: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def normalize_base_url(raw: str) -> str:
    """Strip whitespace and trailing slashes from the API base URL."""
    cleaned = raw.strip().rstrip("/")
    if not cleaned:
        raise ValueError("api_base_url must not be empty")
    return cleaned
