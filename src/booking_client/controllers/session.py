"""Session/auth controller: owns authentication state and the current user."""

import asyncio
import logging
from pathlib import Path

from booking_client.clients.api import ApiClient
from booking_client.clients.token_store import TokenStore
from booking_client.config import settings
from booking_client.errors import BookingClientError, HttpError, ValidationError
from booking_client.models.session import Session, SessionEvent, SessionState
from booking_client.models.user import (
    RegisterUserData,
    UpdateLocationData,
    UpdateProfileData,
    UserProfile,
)
from booking_client.sync.cache import replace_if_changed
from booking_client.sync.debounce import Debouncer
from booking_client.sync.events import EventHub

logger = logging.getLogger(__name__)


class SessionController:
    def __init__(
        self,
        api: ApiClient,
        tokens: TokenStore,
        events: EventHub | None = None,
        location_debounce_s: float | None = None,
    ) -> None:
        self._api = api
        self._tokens = tokens
        self._events = events or EventHub()
        self._session = Session()
        self._location_debouncer = Debouncer(
            location_debounce_s if location_debounce_s is not None else settings.location_debounce_seconds
        )

    @property
    def session(self) -> Session:
        return self._session

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def user(self) -> UserProfile | None:
        return self._session.user

    @property
    def is_authenticated(self) -> bool:
        return self._session.is_authenticated

    @property
    def events(self) -> EventHub:
        return self._events

    async def start(self) -> SessionState:
        """Derive the initial state from the stored token."""
        if not self._tokens.is_authenticated():
            self._session.sign_out()
            return self.state
        try:
            user = await self._api.get_current_user()
        except BookingClientError as e:
            logger.warning("Stored token rejected on startup: %s", e)
            await self._api.logout()
            self._session.sign_out()
            return self.state
        self._session.sign_in(user)
        logger.info("Restored session for %s", user.email)
        return self.state

    async def login(self, email: str, password: str) -> UserProfile:
        previous_token = self._tokens.get() if self.is_authenticated else None
        try:
            await self._api.login(email, password)
            user = await self._api.get_current_user()
        except BookingClientError as e:
            logger.error("Login failed for %s: %s", email, e)
            # The stored token must keep matching the session's user
            if previous_token:
                self._tokens.set(previous_token)
            else:
                self._tokens.clear()
            raise
        self._session.sign_in(user)
        logger.info("Signed in as %s", user.email)
        self._events.publish(SessionEvent.SIGNED_IN)
        return user

    async def logout(self) -> None:
        await self._sign_out(SessionEvent.SIGNED_OUT)

    async def refresh_user(self) -> UserProfile | None:
        if not self.is_authenticated:
            return None
        try:
            user = await self._api.get_current_user()
        except BookingClientError as e:
            logger.warning("Session invalidated while refreshing user: %s", e)
            self._events.publish(SessionEvent.SESSION_EXPIRED)
            await self._sign_out(SessionEvent.SIGNED_OUT)
            return None
        self._set_user(user)
        return self.user

    def require_user(self) -> UserProfile:
        """Return the signed-in user, or announce that a login is needed."""
        if not self.is_authenticated or self.user is None:
            self._events.publish(SessionEvent.LOGIN_REQUIRED)
            raise HttpError(401, {"detail": "Please log in to continue"})
        return self.user

    async def register(self, data: RegisterUserData) -> UserProfile:
        if not data.email.strip():
            raise ValidationError("email", "Email is required")
        if not data.password:
            raise ValidationError("password", "Password is required")
        user = await self._api.register(data)
        logger.info("Registered %s", user.email)
        return user

    async def request_password_reset(self, email: str) -> str:
        if not email.strip():
            raise ValidationError("email", "Email is required")
        return await self._api.request_password_reset(email)

    # ------------------------------------------------------------------
    # Profile mutations
    # ------------------------------------------------------------------

    async def update_profile(self, data: UpdateProfileData) -> UserProfile:
        self.require_user()
        user = await self._api.update_profile(data)
        self._set_user(user)
        return user

    async def upload_profile_image(self, image_path: Path) -> UserProfile:
        self.require_user()
        if not image_path.is_file():
            raise ValidationError("image", f"No image at {image_path}")
        user = await self._api.upload_profile_image(image_path)
        self._set_user(user)
        return user

    async def update_location(self, latitude: float, longitude: float, address: str = "") -> UserProfile:
        self.require_user()
        user = await self._api.update_location(
            UpdateLocationData(latitude=latitude, longitude=longitude, address=address)
        )
        self._set_user(user)
        return user

    def schedule_location_update(
        self, latitude: float, longitude: float, address: str = ""
    ) -> "asyncio.Task[UserProfile]":
        """Debounced update_location: only the last fix in a quiet period is sent."""
        return self._location_debouncer.schedule(
            lambda: self.update_location(latitude, longitude, address)
        )

    # ------------------------------------------------------------------

    def _set_user(self, user: UserProfile) -> None:
        self._session.user = replace_if_changed(self._session.user, user)

    async def _sign_out(self, event: SessionEvent) -> None:
        self._location_debouncer.cancel()
        await self._api.logout()
        self._session.sign_out()
        logger.info("Signed out")
        self._events.publish(event)
