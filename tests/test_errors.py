"""Tests for error mapping to user-facing messages."""

from booking_client.errors import (
    DecodeError,
    HttpError,
    NetworkError,
    SubmissionInProgressError,
    ValidationError,
    describe_error,
)


class TestHttpError:
    def test_plain_detail(self) -> None:
        err = HttpError(400, {"detail": "Room already booked"})
        assert err.detail == "Room already booked"
        assert "400" in str(err)

    def test_list_detail_joins_messages(self) -> None:
        err = HttpError(422, {"detail": [{"msg": "field required"}, {"msg": "value is not a valid email"}]})
        assert err.detail == "field required; value is not a valid email"

    def test_text_body(self) -> None:
        assert HttpError(502, "Bad Gateway").detail == "Bad Gateway"

    def test_unauthorized(self) -> None:
        assert HttpError(401).is_unauthorized
        assert not HttpError(403).is_unauthorized


class TestDescribeError:
    def test_unauthorized_asks_for_login(self) -> None:
        assert "log in" in describe_error(HttpError(401))

    def test_not_found(self) -> None:
        assert describe_error(HttpError(404, {"detail": "Not Found"})) == (
            "We couldn't find what you were looking for."
        )

    def test_client_error_uses_server_detail(self) -> None:
        assert describe_error(HttpError(400, {"detail": "Room not available"})) == "Room not available"

    def test_client_error_without_detail(self) -> None:
        assert "rejected" in describe_error(HttpError(409))

    def test_server_error(self) -> None:
        assert "trouble" in describe_error(HttpError(503))

    def test_network(self) -> None:
        assert "connection" in describe_error(NetworkError("timeout"))

    def test_validation_message_passes_through(self) -> None:
        assert describe_error(ValidationError("email", "Please enter your email address")) == (
            "Please enter your email address"
        )

    def test_decode_and_in_progress(self) -> None:
        assert "unexpected response" in describe_error(DecodeError("bad"))
        assert "previous request" in describe_error(SubmissionInProgressError("busy"))

    def test_unknown_error(self) -> None:
        assert describe_error(RuntimeError("x")) == "Something went wrong. Please try again."
