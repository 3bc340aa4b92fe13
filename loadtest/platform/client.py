"""Async HTTP client for the platform API."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel

from common.exceptions import PlatformError

logger = logging.getLogger(__name__)

SESSION_TOKEN_HEADER = "x-tidepool-session-token"


class SignupResult(BaseModel):
    """Identity returned by a successful signup."""
    userid: str
    token: Optional[str] = None


class PlatformClient:
    """Thin async wrapper over the platform's auth, metadata and data APIs.

    One instance is shared by every concurrent workflow. The operator session
    obtained by ``initialize`` is the fallback token; calls made on behalf of a
    generated account pass that account's own token explicitly.
    """

    def __init__(
        self,
        host: str,
        username: str,
        password: str,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.host = host.rstrip("/")
        self.username = username
        self._password = password
        self._client = httpx.AsyncClient(base_url=self.host, timeout=timeout, transport=transport)
        self._token: Optional[str] = None
        self.userid: Optional[str] = None

    @property
    def is_initialized(self) -> bool:
        return self._token is not None

    async def __aenter__(self) -> "PlatformClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def initialize(self) -> None:
        """Log in with the operator credentials."""
        logger.info(f"Logging in to {self.host} as {self.username}")
        response = await self._request(
            "POST", "/auth/login", auth=(self.username, self._password), use_session=False
        )
        token = response.headers.get(SESSION_TOKEN_HEADER)
        if not token:
            raise PlatformError("Login response carried no session token", response.status_code)
        self._token = token
        self.userid = _json(response).get("userid")
        logger.info(f"Platform client initialized for user {self.userid}")

    async def signup(self, username: str, password: str, emails: list[str]) -> SignupResult:
        """Create a new platform user."""
        response = await self._request(
            "POST",
            "/auth/user",
            json={"username": username, "emails": emails, "password": password},
            use_session=False,
        )
        body = _json(response)
        userid = body.get("userid")
        if not userid:
            raise PlatformError(f"Signup for {username} returned no userid", response.status_code)
        return SignupResult(userid=userid, token=response.headers.get(SESSION_TOKEN_HEADER))

    async def add_or_update_profile(
        self,
        userid: str,
        profile: dict,
        token: Optional[str] = None,
    ) -> dict:
        """Create or replace the user's profile."""
        response = await self._request(
            "PUT", f"/metadata/{userid}/profile", json=profile, token=token
        )
        return _json(response)

    async def get_device_data_for_user(self, userid: str, token: Optional[str] = None) -> Any:
        """Fetch all device data stored for the user.

        The body is not validated; a non-JSON 2xx body is returned as text.
        """
        response = await self._request("GET", f"/data/{userid}", token=token)
        if not response.content:
            return []
        try:
            return response.json()
        except ValueError:
            return response.text

    async def _request(
        self,
        method: str,
        path: str,
        token: Optional[str] = None,
        use_session: bool = True,
        **kwargs,
    ) -> httpx.Response:
        headers = {}
        session = token or (self._token if use_session else None)
        if session:
            headers[SESSION_TOKEN_HEADER] = session

        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise PlatformError(f"{method} {path} request failed: {e}") from e

        if response.is_error:
            raise PlatformError(f"{method} {path} failed: {response.text[:200]}", response.status_code)
        return response


def _json(response: httpx.Response) -> dict:
    if not response.content:
        return {}
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}
