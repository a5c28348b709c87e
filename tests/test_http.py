"""Tests for ApiClient: request shaping, error decoding and token refresh."""

from unittest.mock import MagicMock, call

import pytest
import requests

from library_client.exceptions import ApiError, AuthenticationError, NetworkError, SessionExpiredError
from library_client.http import REFRESH_PATH, ApiClient
from library_client.models import ErrorCode, SessionState
from library_client.session import Session


def _sent(http: MagicMock, index: int = 0) -> tuple[tuple, dict]:
    args, kwargs = http.request.call_args_list[index]
    return args, kwargs


class TestRequestShaping:
    """Tests for how requests are sent."""

    def test_bearer_token_attached(self, api: ApiClient, logged_in: Session, http, make_response) -> None:
        http.request.return_value = make_response(200, {"ok": True})

        assert api.get("/loans/my-loans") == {"ok": True}

        args, kwargs = _sent(http)
        assert args == ("GET", api.config.url("/loans/my-loans"))
        assert kwargs["headers"]["Authorization"] == "Bearer access-1"
        assert kwargs["timeout"] == api.config.timeout

    def test_no_token_when_auth_disabled(self, api: ApiClient, logged_in: Session, http, make_response) -> None:
        http.request.return_value = make_response(200, {})

        api.post("/contact", json={"a": 1}, auth=False)

        _, kwargs = _sent(http)
        assert "Authorization" not in kwargs["headers"]
        assert kwargs["json"] == {"a": 1}

    def test_empty_params_dropped(self, api: ApiClient, http, make_response) -> None:
        http.request.return_value = make_response(200, [])

        api.get("/books", params={"category": None, "search": "", "order": "asc"})

        _, kwargs = _sent(http)
        assert kwargs["params"] == {"order": "asc"}

    def test_multipart_when_files_given(self, api: ApiClient, http, make_response) -> None:
        http.request.return_value = make_response(201, {})
        files = {"image": ("cover.png", b"png")}

        api.post("/books", json={"ignored": True}, data={"title": "Dune"}, files=files)

        _, kwargs = _sent(http)
        assert kwargs["json"] is None
        assert kwargs["data"] == {"title": "Dune"}
        assert kwargs["files"] == files

    def test_no_content(self, api: ApiClient, http, make_response) -> None:
        http.request.return_value = make_response(204)

        assert api.delete("/books/1") is None


class TestErrorDecoding:
    """Tests for turning responses into exceptions."""

    def test_api_error_with_code(self, api: ApiClient, http, make_response) -> None:
        http.request.return_value = make_response(400, {"message": "Banned", "code": "banned"})

        with pytest.raises(ApiError) as exc_info:
            api.post("/loans/borrow", json={})

        assert exc_info.value.status == 400
        assert exc_info.value.code == ErrorCode.BANNED
        assert exc_info.value.message == "Banned"

    def test_unknown_code(self, api: ApiClient, http, make_response) -> None:
        http.request.return_value = make_response(500, {"errorCode": "SOMETHING_NEW"})

        with pytest.raises(ApiError) as exc_info:
            api.get("/books")

        assert exc_info.value.code == ErrorCode.UNKNOWN
        assert exc_info.value.message == "HTTP error! status: 500"

    def test_forbidden_is_authentication_error(self, api: ApiClient, http, make_response) -> None:
        http.request.return_value = make_response(403, {"message": "Forbidden"})

        with pytest.raises(AuthenticationError):
            api.get("/users")

    def test_invalid_json_body(self, api: ApiClient, http, make_response) -> None:
        response = make_response(200)
        response._content = b"<html>"
        http.request.return_value = response

        with pytest.raises(ApiError, match="Invalid JSON"):
            api.get("/books")

    def test_transport_error_is_network_error(self, api: ApiClient, http) -> None:
        http.request.side_effect = requests.ConnectionError("refused")

        with pytest.raises(NetworkError) as exc_info:
            api.get("/books")

        assert isinstance(exc_info.value.original, requests.ConnectionError)


class TestTokenRefresh:
    """Tests for the single refresh-and-retry on 401."""

    def test_refresh_then_retry(self, api: ApiClient, logged_in: Session, http, make_response) -> None:
        http.request.side_effect = [
            make_response(401, {"message": "expired"}),
            make_response(200, {"accessToken": "access-2", "refreshToken": "refresh-2"}),
            make_response(200, {"loans": []}),
        ]

        assert api.get("/loans/my-loans") == {"loans": []}

        assert http.request.call_count == 3
        _, refresh_kwargs = _sent(http, 1)
        assert refresh_kwargs["json"] == {"refreshToken": "refresh-1"}
        _, retry_kwargs = _sent(http, 2)
        assert retry_kwargs["headers"]["Authorization"] == "Bearer access-2"
        assert logged_in.state == SessionState.AUTHENTICATED
        assert logged_in.refresh_token == "refresh-2"

    def test_retried_only_once(self, api: ApiClient, logged_in: Session, http, make_response) -> None:
        http.request.side_effect = [
            make_response(401, {}),
            make_response(200, {"accessToken": "access-2", "refreshToken": "refresh-2"}),
            make_response(401, {"message": "still no"}),
        ]

        with pytest.raises(AuthenticationError):
            api.get("/loans/my-loans")

        assert http.request.call_count == 3

    def test_no_refresh_without_refresh_token(self, api: ApiClient, http, make_response) -> None:
        http.request.return_value = make_response(401, {})

        with pytest.raises(AuthenticationError):
            api.get("/loans/my-loans")

        assert http.request.call_count == 1

    def test_no_refresh_for_login(self, api: ApiClient, logged_in: Session, http, make_response) -> None:
        http.request.return_value = make_response(401, {"code": "INVALID_CREDENTIALS"})

        with pytest.raises(AuthenticationError):
            api.post("/auth/login", json={}, auth=False)

        assert http.request.call_count == 1

    @pytest.mark.parametrize("status", [401, 403])
    def test_rejected_refresh_expires_session(
        self, api: ApiClient, logged_in: Session, http, make_response, status: int
    ) -> None:
        http.request.side_effect = [make_response(401, {}), make_response(status, {})]

        with pytest.raises(SessionExpiredError) as exc_info:
            api.get("/loans/my-loans")

        assert exc_info.value.code == ErrorCode.SESSION_EXPIRED
        assert logged_in.state == SessionState.ANONYMOUS
        assert logged_in.refresh_token is None

    def test_rejected_refresh_can_keep_session(self, api: ApiClient, logged_in: Session, http, make_response) -> None:
        http.request.side_effect = [make_response(401, {}), make_response(401, {})]

        with pytest.raises(SessionExpiredError):
            api.post("/payments/confirm-late-fee-payment", json={}, expire_session=False)

        assert logged_in.state == SessionState.AUTHENTICATED
        assert logged_in.refresh_token == "refresh-1"

    def test_network_failure_during_refresh_keeps_session(
        self, api: ApiClient, logged_in: Session, http, make_response
    ) -> None:
        http.request.side_effect = [make_response(401, {}), requests.Timeout("slow")]

        with pytest.raises(NetworkError):
            api.get("/loans/my-loans")

        assert logged_in.state == SessionState.AUTHENTICATED
        assert logged_in.access_token == "access-1"
        assert logged_in.refresh_token == "refresh-1"

    def test_server_error_during_refresh_keeps_session(
        self, api: ApiClient, logged_in: Session, http, make_response
    ) -> None:
        http.request.side_effect = [make_response(401, {}), make_response(502, {})]

        with pytest.raises(ApiError) as exc_info:
            api.get("/loans/my-loans")

        assert not isinstance(exc_info.value, SessionExpiredError)
        assert logged_in.state == SessionState.AUTHENTICATED
        assert logged_in.refresh_token == "refresh-1"

    def test_malformed_refresh_body_keeps_session(
        self, api: ApiClient, logged_in: Session, http, make_response
    ) -> None:
        http.request.side_effect = [make_response(401, {}), make_response(200, {"token": "x"})]

        with pytest.raises(ApiError, match="Malformed"):
            api.get("/loans/my-loans")

        assert logged_in.state == SessionState.AUTHENTICATED

    def test_refresh_request_is_unauthenticated(self, api: ApiClient, logged_in: Session, http, make_response) -> None:
        http.request.return_value = make_response(200, {"accessToken": "a2", "refreshToken": "r2"})

        assert api.refresh() == "a2"

        args, kwargs = _sent(http)
        assert args == ("POST", api.config.url(REFRESH_PATH))
        assert "Authorization" not in kwargs["headers"]
        assert http.request.call_args_list == [call(*args, **kwargs)]
