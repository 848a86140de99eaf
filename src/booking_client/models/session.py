from enum import Enum

from pydantic import BaseModel

from booking_client.models.user import UserProfile


class SessionState(str, Enum):
    UNKNOWN = "UNKNOWN"
    AUTHENTICATED = "AUTHENTICATED"
    UNAUTHENTICATED = "UNAUTHENTICATED"


class SessionEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    SESSION_EXPIRED = "SESSION_EXPIRED"
    LOGIN_REQUIRED = "LOGIN_REQUIRED"


class Session(BaseModel):
    state: SessionState = SessionState.UNKNOWN
    user: UserProfile | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.state == SessionState.AUTHENTICATED

    def sign_in(self, user: UserProfile) -> None:
        self.state = SessionState.AUTHENTICATED
        self.user = user

    def sign_out(self) -> None:
        self.state = SessionState.UNAUTHENTICATED
        self.user = None
