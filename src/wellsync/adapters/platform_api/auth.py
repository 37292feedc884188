"""Bearer-token lifecycle for the platform/well API."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from logging import getLogger
from typing import TYPE_CHECKING, cast

import httpx
from pydantic import ValidationError

from wellsync.config.platform_api import LOGIN_PATH

from .schema import LoginRequest, LoginResponse

if TYPE_CHECKING:
    from collections.abc import Callable

    from wellsync.adapters.http_resilience import ResilientClient
    from wellsync.config.platform_api import ApiCredentials

log = getLogger(__name__)

DEFAULT_TOKEN_VALIDITY = timedelta(hours=1)
DEFAULT_SAFETY_MARGIN = timedelta(minutes=5)


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class BearerToken:
    value: str
    expires_at: datetime


@dataclass(slots=True)
class TokenManager:
    """Acquire, cache and refresh the bearer token.

    A token counts as valid until ``safety_margin`` before its expiry so that a
    request started just before expiry does not race the server clock. Login
    failures are logged and reported as ``False``/``None``, never raised.
    """

    credentials: ApiCredentials
    clock: Callable[[], datetime] = utcnow
    validity: timedelta = DEFAULT_TOKEN_VALIDITY
    safety_margin: timedelta = DEFAULT_SAFETY_MARGIN
    login_path: str = LOGIN_PATH
    _token: BearerToken | None = field(default=None, init=False, repr=False)

    @property
    def expires_at(self) -> datetime | None:
        return self._token.expires_at if self._token else None

    def is_valid(self) -> bool:
        if self._token is None:
            return False
        return self.clock() < self._token.expires_at - self.safety_margin

    def invalidate(self) -> None:
        self._token = None

    def auth_headers(self) -> dict[str, str]:
        if self._token is None:
            return {}
        return {"Authorization": f"Bearer {self._token.value}"}

    async def acquire(self, client: ResilientClient) -> str | None:
        if self.is_valid() and self._token is not None:
            return self._token.value
        if self._token is not None:
            log.info("Token expired or invalid, attempting to re-authenticate...")
        if not await self.login(client):
            return None
        return self._token.value if self._token else None

    async def login(self, client: ResilientClient) -> bool:
        log.info("Attempting to login to API...")
        request = LoginRequest(
            username=self.credentials.username,
            password=self.credentials.password,
        )
        try:
            response = await client.post(self.login_path, json=request.model_dump())
        except httpx.HTTPError as exc:
            log.error("Login request failed: %s", exc)  # noqa: TRY400
            self.invalidate()
            return False

        if not response.is_success:
            log.error("Login failed. Status: %s, Response: %s", response.status_code, response.text)
            self.invalidate()
            return False

        token = self._parse_token(response.text)
        if token is None:
            log.error("Failed to parse login response: %s", response.text)
            self.invalidate()
            return False

        self._token = token
        if not self.is_valid():
            log.warning(
                "Login returned a token already expired or inside the safety margin: %s",
                token.expires_at.isoformat(),
            )
            self.invalidate()
            return False
        log.info("Login successful. Token valid until %s", token.expires_at.isoformat())
        return True

    def _parse_token(self, body: str) -> BearerToken | None:
        try:
            payload = json.loads(body)
        except ValueError:
            return None

        now = self.clock()
        if isinstance(payload, str):
            if not payload.strip():
                return None
            return BearerToken(value=payload, expires_at=now + self.validity)

        if isinstance(payload, dict):
            try:
                response = LoginResponse.model_validate(cast(dict[str, object], payload))
            except ValidationError:
                return None
            expires_at = response.expires or now + self.validity
            if expires_at.tzinfo is None:
                expires_at = expires_at.replace(tzinfo=UTC)
            return BearerToken(value=response.token, expires_at=expires_at)

        return None
