"""Normalization of transport and server failures into user messages."""

import httpx

from hotel_staff.domain.responses import ApiResponse

# Failures caught at service call sites: transport errors, error statuses,
# undecodable JSON and payloads that fail model validation.
REQUEST_ERRORS: tuple[type[Exception], ...] = (httpx.HTTPError, ValueError)

SERVER_FALLBACK = "Server error, please try again later"


def failure_message(exc: Exception, fallback: str) -> str:
    """Return the server's message from an error response, or the fallback."""
    if not isinstance(exc, httpx.HTTPStatusError):
        return fallback
    try:
        body = exc.response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message
    return fallback


def response_message(response: ApiResponse, fallback: str) -> str:
    """Return the message of a ``success: false`` body, or the fallback."""
    if response.message and response.message.strip():
        return response.message
    return fallback


def status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"
