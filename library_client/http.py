"""HTTP client for the library REST API.

All requests and responses use JSON, except book create/update with an
image which is sent as multipart form data. Authenticated calls carry
``Authorization: Bearer <access token>``. A 401 on a non-auth endpoint
triggers one token refresh and one retry; nothing else is retried.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

import requests

from library_client.config import ApiConfig
from library_client.exceptions import (
    ApiError,
    AuthenticationError,
    NetworkError,
    SessionExpiredError,
)
from library_client.models import ErrorCode
from library_client.serialization import parse_tokens
from library_client.session import Session

logger = logging.getLogger(__name__)

REFRESH_PATH = "/auth/refresh-token"
LOGIN_PATH = "/auth/login"
_NO_REFRESH_PATHS = (REFRESH_PATH, LOGIN_PATH)


class ApiClient:
    """Thin request layer shared by every service."""

    def __init__(
        self,
        config: ApiConfig,
        session: Session,
        http: requests.Session | None = None,
    ) -> None:
        self.config = config
        self.session = session
        self.http = http or requests.Session()

    def get(self, path: str, **kwargs: Any) -> Any:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> Any:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> Any:
        return self.request("PUT", path, **kwargs)

    def patch(self, path: str, **kwargs: Any) -> Any:
        return self.request("PATCH", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Any:
        return self.request("DELETE", path, **kwargs)

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Mapping[str, Any] | None = None,
        data: Mapping[str, Any] | None = None,
        files: Mapping[str, Any] | None = None,
        auth: bool = True,
        expire_session: bool = True,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Parameters
        ----------
        method : str
            HTTP method.
        path : str
            Endpoint path below the API base URL (e.g. ``/loans/my-loans``).
        json : Any
            JSON body.
        params : Mapping[str, Any] | None
            Query parameters; ``None`` and empty values are dropped.
        data, files : Mapping[str, Any] | None
            Multipart form fields and files.
        auth : bool
            Attach the bearer token.
        expire_session : bool
            Whether a rejected refresh token may clear stored credentials.

        Raises
        ------
        ApiError
            Non-success status (``AuthenticationError`` for 401/403).
        SessionExpiredError
            The refresh endpoint rejected the refresh token.
        NetworkError
            The API could not be reached.
        """
        token = self.session.access_token if auth else None
        response = self._send(method, path, token, json=json, params=params, data=data, files=files)

        if response.status_code == 401 and auth and path not in _NO_REFRESH_PATHS and self.session.refresh_token:
            new_token = self.refresh(expire_session=expire_session)
            response = self._send(method, path, new_token, json=json, params=params, data=data, files=files)

        return self._decode(response, path)

    def refresh(self, expire_session: bool = True) -> str:
        """Exchange the refresh token for a new token pair.

        Only an explicit 401/403 from the refresh endpoint ends the session;
        transport errors and other statuses keep the stored credentials.
        """
        refresh_token = self.session.begin_refresh()
        try:
            response = self._send("POST", REFRESH_PATH, None, json={"refreshToken": refresh_token})
        except NetworkError:
            self.session.abort_refresh()
            raise

        if response.status_code in (401, 403):
            if expire_session:
                self.session.expire()
            else:
                self.session.abort_refresh()
            raise SessionExpiredError(
                "Session expired. Please login again.",
                status=response.status_code,
                code=ErrorCode.SESSION_EXPIRED,
            )

        try:
            body = self._decode(response, REFRESH_PATH)
            tokens = parse_tokens(body)
        except (ApiError, KeyError, TypeError) as exc:
            self.session.abort_refresh()
            if isinstance(exc, ApiError):
                raise
            raise ApiError("Malformed refresh response", status=response.status_code) from exc

        self.session.complete_refresh(tokens)
        return tokens.access_token

    def _send(
        self,
        method: str,
        path: str,
        token: str | None,
        *,
        json: Any = None,
        params: Mapping[str, Any] | None = None,
        data: Mapping[str, Any] | None = None,
        files: Mapping[str, Any] | None = None,
    ) -> requests.Response:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        query = {k: v for k, v in (params or {}).items() if v not in (None, "")}

        logger.debug("%s %s", method, path)
        try:
            return self.http.request(
                method,
                self.config.url(path),
                headers=headers,
                params=query or None,
                json=json if files is None else None,
                data=data if files is not None else None,
                files=files,
                timeout=self.config.timeout,
            )
        except requests.RequestException as exc:
            logger.error("Request %s %s failed: %s", method, path, exc)
            raise NetworkError("Network error occurred", original=exc) from exc

    def _decode(self, response: requests.Response, path: str) -> Any:
        if not response.ok:
            try:
                body = response.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            message = body.get("message") or f"HTTP error! status: {response.status_code}"
            code = ErrorCode.parse(body.get("code") or body.get("errorCode"))
            error_cls = AuthenticationError if response.status_code in (401, 403) else ApiError
            logger.warning("API error on %s: %s %s (%s)", path, response.status_code, message, code.value)
            raise error_cls(message, status=response.status_code, code=code, details=body)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(f"Invalid JSON from {path}", status=response.status_code) from exc
