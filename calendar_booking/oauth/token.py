"""Exchange a signed assertion for a short-lived Google access token."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import httpx

from calendar_booking.errors import AuthenticationError
from calendar_booking.http_utils import failure_message, is_success, read_json

logger = logging.getLogger(__name__)

JWT_BEARER_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"


class TokenExchanger(ABC):
    """Turns a JWT client assertion into a bearer access token."""

    @abstractmethod
    async def exchange(self, assertion: str) -> str:
        """Return the access token, or raise AuthenticationError."""


class GoogleTokenExchanger(TokenExchanger):
    """TokenExchanger backed by Google's OAuth2 token endpoint."""

    def __init__(
        self, http_client: httpx.AsyncClient, token_url: str = GOOGLE_TOKEN_URL
    ) -> None:
        self._http_client = http_client
        self._token_url = token_url

    async def exchange(self, assertion: str) -> str:
        try:
            response = await self._http_client.post(
                self._token_url,
                data={
                    "grant_type": JWT_BEARER_GRANT_TYPE,
                    "assertion": assertion,
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.HTTPError as exc:
            raise AuthenticationError(f"Token request failed: {exc}") from exc

        data = read_json(response)
        if not is_success(response):
            raise AuthenticationError(failure_message("Token error", response, data))

        access_token = data.get("access_token") if isinstance(data, dict) else None
        if not isinstance(access_token, str) or not access_token:
            raise AuthenticationError("No access_token in token response")

        logger.info("Obtained access token (expires_in=%s)", data.get("expires_in"))
        return access_token
