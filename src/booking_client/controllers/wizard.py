"""Booking wizard: SELECT_ROOM -> ENTER_DETAILS -> PAYMENT -> CONFIRMED."""

import logging
from datetime import date
from typing import Awaitable, NoReturn, TypeVar

from booking_client.clients.api import ApiClient
from booking_client.config import settings
from booking_client.errors import (
    BookingClientError,
    SubmissionInProgressError,
    ValidationError,
    describe_error,
)
from booking_client.models.accommodation import AccommodationSummary
from booking_client.models.booking import BookingRequest, PaymentInitiateRequest, PaymentMethod
from booking_client.models.wizard import (
    BookingDraft,
    BookingWizardState,
    Confirmation,
    PaymentDraft,
    WizardStep,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_PREVIOUS_STEP = {
    WizardStep.ENTER_DETAILS: WizardStep.SELECT_ROOM,
    WizardStep.PAYMENT: WizardStep.ENTER_DETAILS,
}


class BookingWizard:
    """Drives one booking flow for one accommodation.

    At most one network call is outstanding; advancing again while it is in
    flight raises SubmissionInProgressError.
    """

    def __init__(
        self,
        api: ApiClient,
        accommodation: AccommodationSummary,
        callback_url: str | None = None,
    ) -> None:
        self._api = api
        self._accommodation = accommodation
        self._callback_url = callback_url or settings.payment_callback_url
        self._state = BookingWizardState()
        self._in_flight = False

    @property
    def state(self) -> BookingWizardState:
        return self._state

    @property
    def step(self) -> WizardStep:
        return self._state.step

    @property
    def accommodation(self) -> AccommodationSummary:
        return self._accommodation

    @property
    def busy(self) -> bool:
        return self._in_flight

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def select_room(self, room_id: str) -> None:
        self._require_step(WizardStep.SELECT_ROOM)
        if room_id and self._accommodation.rooms and self._accommodation.find_room(room_id) is None:
            raise ValidationError("room", f"Room {room_id!r} is not offered here")
        self._state.selected_room_id = room_id

    def update_details(
        self,
        check_in: str | None = None,
        check_out: str | None = None,
        guests: int | None = None,
        special_requests: str | None = None,
    ) -> BookingDraft:
        self._require_step(WizardStep.ENTER_DETAILS)
        update = {
            k: v
            for k, v in {
                "check_in": check_in,
                "check_out": check_out,
                "guests": guests,
                "special_requests": special_requests,
            }.items()
            if v is not None
        }
        self._state.booking_draft = self._state.booking_draft.model_copy(update=update)
        return self._state.booking_draft

    def update_payment(
        self, email: str | None = None, payment_method: PaymentMethod | str | None = None
    ) -> PaymentDraft:
        self._require_step(WizardStep.PAYMENT)
        update: dict[str, object] = {}
        if email is not None:
            update["email"] = email
        if payment_method is not None:
            update["payment_method"] = PaymentMethod(payment_method)
        self._state.payment_draft = self._state.payment_draft.model_copy(update=update)
        return self._state.payment_draft

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def advance(self) -> WizardStep:
        if self._in_flight:
            raise SubmissionInProgressError(f"{self.step.value} is already being submitted")

        step = self._state.step
        if step == WizardStep.SELECT_ROOM:
            if self._state.selected_room_id:
                self._state.advance_step(WizardStep.ENTER_DETAILS)
        elif step == WizardStep.ENTER_DETAILS:
            await self._submit_details()
        elif step == WizardStep.PAYMENT:
            await self._submit_payment()
        return self._state.step

    def back(self) -> WizardStep:
        previous = _PREVIOUS_STEP.get(self._state.step)
        if previous is not None and not self._in_flight:
            self._state.advance_step(previous)
        return self._state.step

    def reset(self) -> None:
        """Start over from room selection, discarding all drafts.

        A call still in flight finishes against the discarded flow and never
        touches the new one.
        """
        self._state = BookingWizardState()

    def confirmation(self) -> Confirmation:
        self._require_step(WizardStep.CONFIRMED)
        s = self._state
        return Confirmation(
            booking_id=s.created_booking_id or "",
            accommodation_id=self._accommodation.id,
            room_id=s.selected_room_id,
            check_in=s.booking_draft.check_in,
            check_out=s.booking_draft.check_out,
            guests=s.booking_draft.guests,
            special_requests=s.booking_draft.special_requests,
            email=s.payment_draft.email,
            payment_method=s.payment_draft.payment_method,
            total_price=s.booking.total_price if s.booking else None,
        )

    # ------------------------------------------------------------------

    async def _submit_details(self) -> None:
        request = self._booking_request()

        if self._state.created_booking_id and self._state.created_for == request:
            self._state.advance_step(WizardStep.PAYMENT)
            return

        state = self._state
        booking = await self._call(self._api.create_booking(request))
        if self._state is not state:
            logger.info("Flow was reset; discarding booking %s", booking.id)
            return
        state.created_booking_id = booking.id
        state.created_for = request
        state.booking = booking
        logger.info("Created booking %s for %s", booking.id, self._accommodation.id)
        state.advance_step(WizardStep.PAYMENT)

    async def _submit_payment(self) -> None:
        draft = self._state.payment_draft
        if not draft.email.strip():
            self._fail(ValidationError("email", "Please enter your email address"))
        if not self._state.created_booking_id:
            self._fail(ValidationError("booking", "Create the booking before paying"))

        state = self._state
        await self._call(
            self._api.initiate_payment(
                PaymentInitiateRequest(
                    booking_id=state.created_booking_id,
                    payment_method=draft.payment_method,
                    email=draft.email.strip(),
                    callback_url=self._callback_url,
                )
            )
        )
        logger.info("Payment initiated for booking %s", state.created_booking_id)
        if self._state is state:
            state.advance_step(WizardStep.CONFIRMED)

    def _booking_request(self) -> BookingRequest:
        draft = self._state.booking_draft
        if not draft.check_in or not draft.check_out:
            self._fail(ValidationError("dates", "Please choose check-in and check-out dates"))
        try:
            check_in = date.fromisoformat(draft.check_in)
            check_out = date.fromisoformat(draft.check_out)
        except ValueError:
            self._fail(ValidationError("dates", "Dates must look like YYYY-MM-DD"))
        if check_out <= check_in:
            self._fail(ValidationError("dates", "Check-out must be after check-in"))
        if draft.guests < 1:
            self._fail(ValidationError("guests", "At least one guest is required"))

        return BookingRequest(
            accommodation_id=self._accommodation.id,
            room_id=self._state.selected_room_id,
            check_in_date=draft.check_in,
            check_out_date=draft.check_out,
            guests=draft.guests,
            special_requests=draft.special_requests,
        )

    async def _call(self, coro: Awaitable[T]) -> T:
        state = self._state
        self._in_flight = True
        try:
            return await coro
        except BookingClientError as e:
            logger.error("Booking wizard %s step failed: %s", state.step.value, e)
            state.error = describe_error(e)
            raise
        finally:
            self._in_flight = False

    def _fail(self, error: ValidationError) -> NoReturn:
        self._state.error = error.message
        raise error

    def _require_step(self, step: WizardStep) -> None:
        if self._state.step != step:
            raise ValidationError("step", f"Not available during {self._state.step.value}")
