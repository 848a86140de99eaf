"""Error taxonomy shared by the API client and the controllers."""

from typing import Any


class BookingClientError(Exception):
    """Base class for every error raised by booking_client."""


class NetworkError(BookingClientError):
    """Raised when the API is unreachable or the request timed out."""


class HttpError(BookingClientError):
    """Raised when the server rejects a request with a 4xx/5xx status."""

    def __init__(self, status: int, body: Any = None) -> None:
        self.status = status
        self.body = body
        super().__init__(f"HTTP {status}: {_detail(body) or 'no details'}")

    @property
    def is_unauthorized(self) -> bool:
        return self.status == 401

    @property
    def detail(self) -> str:
        return _detail(self.body)


class DecodeError(BookingClientError):
    """Raised when a response body cannot be parsed into the expected shape."""


class ValidationError(BookingClientError):
    """Raised by client-side form and field checks before any request is sent."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class SubmissionInProgressError(BookingClientError):
    """Raised when a step is submitted again while its request is still in flight."""


def describe_error(exc: BaseException) -> str:
    """Turn an error into a message fit for the user."""
    if isinstance(exc, ValidationError):
        return exc.message
    if isinstance(exc, NetworkError):
        return "Can't reach the booking service. Check your connection and try again."
    if isinstance(exc, HttpError):
        if exc.is_unauthorized:
            return "Your session has expired. Please log in again."
        if exc.status == 404:
            return "We couldn't find what you were looking for."
        if 400 <= exc.status < 500:
            return exc.detail or "The request was rejected. Please check your input."
        return "The booking service is having trouble. Please try again later."
    if isinstance(exc, DecodeError):
        return "Received an unexpected response from the booking service."
    if isinstance(exc, SubmissionInProgressError):
        return "Still working on your previous request."
    return "Something went wrong. Please try again."


def _detail(body: Any) -> str:
    # FastAPI-style bodies carry {"detail": "..."} or {"detail": [{"msg": ...}]}
    if isinstance(body, dict):
        detail = body.get("detail", "")
        if isinstance(detail, list):
            return "; ".join(str(d.get("msg", d)) if isinstance(d, dict) else str(d) for d in detail)
        return str(detail)
    if isinstance(body, str):
        return body
    return ""
