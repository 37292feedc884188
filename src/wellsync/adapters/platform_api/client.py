"""HTTP client for the platform/well API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from wellsync.adapters.http_resilience import ResilientClient
from wellsync.config.platform_api import PlatformApiConfig, get_platform_api_config
from wellsync.domain.errors import AuthFailure, HttpFailure, TransportFailure, UnparseableResponse
from wellsync.domain.ports.fetching import FetchedBatch, flatten_wells

from .auth import TokenManager
from .decoder import NotRecognized, decode

if TYPE_CHECKING:
    from collections.abc import Callable

    from wellsync.config.http_resilience import ResilienceConfig

log = getLogger(__name__)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class PlatformWellClient:
    """Authenticated access to the platform/well endpoints.

    Every public method is synchronous and runs its own event loop; the token
    manager outlives the loops so a token acquired by ``authenticate`` is reused
    by later ``fetch`` calls until it expires.
    """

    config: PlatformApiConfig = field(default_factory=get_platform_api_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    tokens: TokenManager = field(init=False)

    def __post_init__(self) -> None:
        self.tokens = TokenManager(
            credentials=self.config.credentials,
            login_path=self.config.endpoints.login,
        )

    def authenticate(self) -> bool:
        return asyncio.run(self._authenticate_async())

    def fetch(self, endpoint: str) -> FetchedBatch:
        return asyncio.run(self._fetch_async(endpoint))

    def check_connectivity(self) -> bool:
        return asyncio.run(self._check_connectivity_async())

    async def _authenticate_async(self) -> bool:
        async with self.client_factory(self.config.resilience) as client:
            return await self.tokens.login(client)

    async def _fetch_async(self, endpoint: str) -> FetchedBatch:
        async with self.client_factory(self.config.resilience) as client:
            if await self.tokens.acquire(client) is None:
                log.error("Cannot fetch data from %s: authentication failed", endpoint)
                raise AuthFailure(f"no bearer token available for {endpoint}")

            log.info("Fetching platform and well data from %s...", endpoint)
            try:
                response = await client.get(endpoint, headers=self.tokens.auth_headers())
            except httpx.TimeoutException as exc:
                log.error("Request to %s timed out: %s", endpoint, exc)  # noqa: TRY400
                raise TransportFailure(f"request to {endpoint} timed out") from exc
            except httpx.TransportError as exc:
                log.error("Request to %s failed: %s", endpoint, exc)  # noqa: TRY400
                raise TransportFailure(f"request to {endpoint} failed: {exc}") from exc

        return self._handle_response(endpoint, response)

    def _handle_response(self, endpoint: str, response: httpx.Response) -> FetchedBatch:
        if response.status_code == httpx.codes.UNAUTHORIZED:
            # the server no longer accepts the token; force a fresh login next time
            self.tokens.invalidate()
        if not response.is_success:
            log.error(
                "Failed to fetch data from %s. Status: %s, Response: %s",
                endpoint,
                response.status_code,
                response.text,
            )
            raise HttpFailure(response.status_code)

        log.debug("Response from %s: %s bytes", endpoint, len(response.content))
        result = decode(response.content)
        if isinstance(result, NotRecognized):
            raise UnparseableResponse(result.reason, empty=result.empty)

        log.info(
            "Fetched %s platforms with %s wells from %s (%s)",
            len(result.records),
            len(flatten_wells(result.records)),
            endpoint,
            result.shape,
        )
        if result.skipped:
            log.warning("Rejected %s malformed items from %s", result.skipped, endpoint)
        return FetchedBatch(records=result.records, rejected=result.rejected)

    async def _check_connectivity_async(self) -> bool:
        log.info("Testing API connectivity...")
        async with self.client_factory(self.config.resilience) as client:
            try:
                response = await client.get(self.config.endpoints.health)
            except httpx.HTTPError as exc:
                log.warning("API connectivity test failed: %s", exc)
                return False
        if response.is_success:
            log.info("API connectivity test successful")
            return True
        log.warning("API connectivity test returned status: %s", response.status_code)
        return False


if TYPE_CHECKING:
    from wellsync.domain.ports.fetching import PlatformWellFetcher

    _fetcher_check: PlatformWellFetcher = PlatformWellClient()
