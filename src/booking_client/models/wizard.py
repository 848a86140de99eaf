from enum import Enum

from pydantic import BaseModel, Field

from booking_client.models.booking import Booking, BookingRequest, PaymentMethod


class WizardStep(str, Enum):
    SELECT_ROOM = "SELECT_ROOM"
    ENTER_DETAILS = "ENTER_DETAILS"
    PAYMENT = "PAYMENT"
    CONFIRMED = "CONFIRMED"


class BookingDraft(BaseModel):
    check_in: str = ""   # ISO 8601 date YYYY-MM-DD
    check_out: str = ""  # ISO 8601 date YYYY-MM-DD
    guests: int = 1
    special_requests: str = ""


class PaymentDraft(BaseModel):
    email: str = ""
    payment_method: PaymentMethod = PaymentMethod.card


class Confirmation(BaseModel):
    booking_id: str
    accommodation_id: str
    room_id: str
    check_in: str
    check_out: str
    guests: int
    special_requests: str = ""
    email: str
    payment_method: PaymentMethod
    total_price: float | None = None


class BookingWizardState(BaseModel):
    step: WizardStep = WizardStep.SELECT_ROOM
    selected_room_id: str = ""
    booking_draft: BookingDraft = Field(default_factory=BookingDraft)
    created_booking_id: str | None = None
    created_for: BookingRequest | None = None
    booking: Booking | None = None
    payment_draft: PaymentDraft = Field(default_factory=PaymentDraft)
    error: str | None = None

    def advance_step(self, next_step: WizardStep) -> None:
        self.step = next_step
        self.error = None
