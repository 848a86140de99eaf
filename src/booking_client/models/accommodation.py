from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field

from booking_client.models.user import GeoPoint

T = TypeVar("T")


class AccommodationCategory(str, Enum):
    hotels = "hotels"
    apartments = "apartments"
    hostels = "hostels"
    lodges = "lodges"


class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"


class Room(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str | None = Field(default=None, alias="_id")
    name: str
    description: str | None = None
    price_per_night: float
    capacity: int = 1
    amenities: tuple[str, ...] = ()
    images: tuple[str, ...] = ()
    is_available: bool = True

    @property
    def key(self) -> str:
        """Identifier used to select the room; unnamed-id rooms fall back to their name."""
        return self.id or self.name


class AccommodationSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str = Field(alias="_id")
    name: str
    description: str = ""
    accommodation_type: str = ""
    location: GeoPoint | None = None
    address: str = ""
    city: str = ""
    state: str = ""
    country: str = ""
    amenities: tuple[str, ...] = ()
    rooms: tuple[Room, ...] = ()
    images: tuple[str, ...] = ()
    rating: float = 0.0
    contact_email: str = ""
    contact_phone: str = ""
    average_rating: float | None = None
    reviews_count: int | None = None

    def find_room(self, room_key: str) -> Room | None:
        return next((r for r in self.rooms if r.key == room_key), None)

    @property
    def lowest_price(self) -> float | None:
        prices = [r.price_per_night for r in self.rooms if r.is_available]
        return min(prices) if prices else None


class Page(BaseModel, Generic[T]):
    results: list[T] = Field(default_factory=list)
    page: int = 1
    limit: int = 10
    total_count: int = 0
    total_pages: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


class ReviewAuthor(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    first_name: str = ""
    last_name: str = ""
    profile_image_url: str | None = None

    @property
    def display_name(self) -> str:
        initial = f" {self.last_name[0]}." if self.last_name else ""
        return f"{self.first_name}{initial}"


class Review(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id")
    rating: int
    comment: str = ""
    user_id: str = ""
    accommodation_id: str = ""
    created_at: str = ""
    updated_at: str | None = None
    user: ReviewAuthor = Field(default_factory=ReviewAuthor)


class ReviewsPage(Page[Review]):
    average_rating: float = 0.0
    reviews_count: int = 0


class AccommodationDetail(BaseModel):
    accommodation: AccommodationSummary
    reviews: ReviewsPage
