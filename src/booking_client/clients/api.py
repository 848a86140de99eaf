"""Booking API client: bearer auth, typed operations, error mapping."""

import logging
from pathlib import Path
from typing import Any

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaError

from booking_client.clients.token_store import TokenStore
from booking_client.config import settings
from booking_client.errors import DecodeError, HttpError, NetworkError
from booking_client.models.accommodation import (
    AccommodationCategory,
    AccommodationSummary,
    Page,
    Review,
    ReviewsPage,
    SortOrder,
)
from booking_client.models.booking import Booking, BookingRequest, BookingStatus, PaymentInitiateRequest
from booking_client.models.user import (
    AuthToken,
    RegisterUserData,
    UpdateLocationData,
    UpdateProfileData,
    UserProfile,
)

logger = logging.getLogger(__name__)

_AccommodationList = list[AccommodationSummary]
_BookingList = list[Booking]


class ApiClient:
    def __init__(
        self,
        token_store: TokenStore,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._tokens = token_store
        self._http = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=timeout if timeout is not None else settings.http_timeout_seconds,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        data: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
    ) -> Any:
        headers: dict[str, str] = {}
        token = self._tokens.get()
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            resp = await self._http.request(
                method,
                path,
                params=_drop_none(params),
                json=json,
                data=data,
                files=files,
                headers=headers,
            )
        except httpx.TransportError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise NetworkError(f"{method} {path}: {e}") from e

        if resp.is_error:
            logger.debug("%s %s -> %s", method, path, resp.status_code)
            raise HttpError(resp.status_code, _error_body(resp))

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise DecodeError(f"{method} {path}: response is not JSON") from e

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self._request("GET", path, params=params)

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    async def register(self, user_data: RegisterUserData) -> UserProfile:
        data = await self._request("POST", "/api/auth/register", json=user_data.model_dump(mode="json"))
        return _parse(UserProfile, data)

    async def login(self, email: str, password: str) -> AuthToken:
        """Exchange credentials for a bearer token and persist it."""
        data = await self._request(
            "POST",
            "/api/auth/token",
            data={"username": email, "password": password, "grant_type": "password"},
        )
        token = _parse(AuthToken, data)
        self._tokens.set(token.access_token)
        return token

    async def logout(self) -> None:
        self._tokens.clear()

    async def get_current_user(self) -> UserProfile:
        return _parse(UserProfile, await self._get("/api/auth/me"))

    async def request_password_reset(self, email: str) -> str:
        data = await self._request("POST", "/api/auth/request-password-reset", json={"email": email})
        return data.get("message", "") if isinstance(data, dict) else ""

    # ------------------------------------------------------------------
    # User profile
    # ------------------------------------------------------------------

    async def update_profile(self, profile_data: UpdateProfileData) -> UserProfile:
        data = await self._request(
            "PATCH", "/api/users/profile", json=profile_data.model_dump(exclude_none=True)
        )
        return _parse(UserProfile, data)

    async def upload_profile_image(self, image_path: Path) -> UserProfile:
        file_name = image_path.name or "profile_image.jpg"
        content_type = "image/png" if file_name.lower().endswith(".png") else "image/jpeg"
        with open(image_path, "rb") as f:
            data = await self._request(
                "POST",
                "/api/users/profile/image",
                files={"file": (file_name, f.read(), content_type)},
            )
        return _parse(UserProfile, data)

    async def update_location(self, location: UpdateLocationData) -> UserProfile:
        data = await self._request(
            "POST",
            "/api/users/location",
            data={
                "latitude": str(location.latitude),
                "longitude": str(location.longitude),
                "address": location.address,
            },
        )
        return _parse(UserProfile, data)

    async def get_user_bookings(self, status: BookingStatus | None = None) -> list[Booking]:
        data = await self._get("/api/users/bookings", {"status": _value(status)})
        return _parse(_BookingList, data)

    async def get_user_booking(self, booking_id: str) -> Booking:
        return _parse(Booking, await self._get(f"/api/users/bookings/{booking_id}"))

    # ------------------------------------------------------------------
    # Favorites
    # ------------------------------------------------------------------

    async def get_favorites(self) -> list[AccommodationSummary]:
        return _parse(_AccommodationList, await self._get("/api/users/favorites"))

    async def add_favorite(self, accommodation_id: str) -> None:
        await self._request("POST", f"/api/users/favorites/{accommodation_id}")

    async def remove_favorite(self, accommodation_id: str) -> None:
        await self._request("DELETE", f"/api/users/favorites/{accommodation_id}")

    # ------------------------------------------------------------------
    # Bookings and payments
    # ------------------------------------------------------------------

    async def create_booking(self, booking: BookingRequest) -> Booking:
        data = await self._request("POST", "/api/bookings/", json=booking.model_dump(mode="json"))
        return _parse(Booking, data)

    async def get_bookings(self, status: BookingStatus | None = None) -> list[Booking]:
        return _parse(_BookingList, await self._get("/api/bookings/", {"status": _value(status)}))

    async def get_booking(self, booking_id: str) -> Booking:
        return _parse(Booking, await self._get(f"/api/bookings/{booking_id}"))

    async def cancel_booking(self, booking_id: str) -> None:
        await self._request("DELETE", f"/api/bookings/{booking_id}")

    async def initiate_payment(self, payment: PaymentInitiateRequest) -> dict[str, Any]:
        data = await self._request("POST", "/api/payments/initiate", json=payment.model_dump(mode="json"))
        return data if isinstance(data, dict) else {}

    # ------------------------------------------------------------------
    # Accommodations
    # ------------------------------------------------------------------

    async def get_accommodations(
        self,
        accommodation_type: AccommodationCategory | None = None,
        page: int | None = None,
        limit: int | None = None,
        sort_by: str | None = None,
        sort_order: SortOrder | None = None,
    ) -> Page[AccommodationSummary]:
        params = {
            "accommodation_type": _value(accommodation_type),
            "page": page,
            "limit": limit,
            "sort_by": sort_by,
            "sort_order": _value(sort_order),
        }
        return _parse(Page[AccommodationSummary], await self._get("/api/accommodations/", params))

    async def get_accommodations_by_type(
        self,
        category: AccommodationCategory,
        page: int | None = None,
        limit: int | None = None,
        sort_by: str | None = None,
        sort_order: SortOrder | None = None,
    ) -> Page[AccommodationSummary]:
        params = {"page": page, "limit": limit, "sort_by": sort_by, "sort_order": _value(sort_order)}
        data = await self._get(f"/api/accommodations/{category.value}", params)
        return _parse(Page[AccommodationSummary], data)

    async def get_nearby_accommodations(
        self,
        latitude: float,
        longitude: float,
        distance: int,
        page: int | None = None,
        limit: int | None = None,
    ) -> Page[AccommodationSummary]:
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "distance": distance,  # metres
            "page": page,
            "limit": limit,
        }
        return _parse(Page[AccommodationSummary], await self._get("/api/accommodations/near-me", params))

    async def search_accommodations(
        self, query: str, page: int | None = None, limit: int | None = None
    ) -> Page[AccommodationSummary]:
        params = {"query": query, "page": page, "limit": limit}
        return _parse(Page[AccommodationSummary], await self._get("/api/accommodations/search", params))

    async def get_popular_accommodations(self, limit: int | None = None) -> list[AccommodationSummary]:
        return _parse(_AccommodationList, await self._get("/api/accommodations/popular", {"limit": limit}))

    async def get_trending_accommodations(
        self, days: int | None = None, limit: int | None = None
    ) -> list[AccommodationSummary]:
        data = await self._get("/api/accommodations/trending", {"days": days, "limit": limit})
        return _parse(_AccommodationList, data)

    async def get_recommended_accommodations(self, limit: int | None = None) -> list[AccommodationSummary]:
        data = await self._get("/api/accommodations/recommended", {"limit": limit})
        return _parse(_AccommodationList, data)

    async def get_accommodation(self, accommodation_id: str) -> AccommodationSummary:
        return _parse(AccommodationSummary, await self._get(f"/api/accommodations/{accommodation_id}"))

    async def get_accommodation_reviews(
        self,
        accommodation_id: str,
        page: int | None = None,
        limit: int | None = None,
        sort_by: str | None = None,
        sort_order: SortOrder | None = None,
    ) -> ReviewsPage:
        params = {"page": page, "limit": limit, "sort_by": sort_by, "sort_order": _value(sort_order)}
        data = await self._get(f"/api/accommodations/{accommodation_id}/reviews", params)
        return _parse(ReviewsPage, data)

    async def create_review(self, accommodation_id: str, rating: int, comment: str) -> Review:
        data = await self._request(
            "POST",
            f"/api/accommodations/{accommodation_id}/reviews",
            json={"rating": rating, "comment": comment},
        )
        return _parse(Review, data)

    async def get_cities(self) -> list[str]:
        return _parse(list[str], await self._get("/api/accommodations/cities/list"))

    async def get_countries(self) -> list[str]:
        return _parse(list[str], await self._get("/api/accommodations/countries/list"))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _parse(model: Any, data: Any) -> Any:
    try:
        return TypeAdapter(model).validate_python(data)
    except SchemaError as e:
        raise DecodeError(f"unexpected response shape for {getattr(model, '__name__', model)}: {e}") from e


def _drop_none(params: dict[str, Any] | None) -> dict[str, Any] | None:
    if params is None:
        return None
    return {k: v for k, v in params.items() if v is not None}


def _value(enum_or_none: Any) -> Any:
    return enum_or_none.value if enum_or_none is not None else None


def _error_body(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text
