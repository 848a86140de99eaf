from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from booking_client.models.accommodation import AccommodationSummary


class BookingStatus(str, Enum):
    confirmed = "confirmed"
    pending = "pending"
    cancelled = "cancelled"
    completed = "completed"


class PaymentStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    refunded = "refunded"


class PaymentMethod(str, Enum):
    card = "card"
    paypal = "paypal"


class BookingTab(str, Enum):
    upcoming = "upcoming"
    past = "past"
    cancelled = "cancelled"


class Booking(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id")
    accommodation_id: str
    room_id: str
    check_in_date: str   # ISO 8601 date YYYY-MM-DD
    check_out_date: str  # ISO 8601 date YYYY-MM-DD
    guests: int = 1
    special_requests: str = ""
    user_id: str = ""
    total_price: float = 0.0
    booking_status: BookingStatus = BookingStatus.pending
    payment_status: PaymentStatus = PaymentStatus.pending
    created_at: str = ""
    accommodation_details: AccommodationSummary | None = None


class BookingRequest(BaseModel):
    accommodation_id: str
    room_id: str
    check_in_date: str
    check_out_date: str
    guests: int = 1
    special_requests: str = ""


class PaymentInitiateRequest(BaseModel):
    booking_id: str
    payment_method: PaymentMethod = PaymentMethod.card
    email: str
    callback_url: str
