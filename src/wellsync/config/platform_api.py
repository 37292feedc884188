"""Platform/well API configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

from .env import optional_env_var, optional_float_env_var, require_env_vars
from .http_resilience import NO_RETRY, RateLimit, ResilienceConfig

LOGIN_PATH: Final[str] = "/api/Account/Login"
HEALTH_PATH: Final[str] = "/api/health"
DEFAULT_ACTUAL_ENDPOINT: Final[str] = "/api/PlatformWell/GetPlatformWellActual"
DEFAULT_DUMMY_ENDPOINT: Final[str] = "/api/PlatformWell/GetPlatformWellDummy"
DEFAULT_TIMEOUT_SECONDS: Final[float] = 30.0


@dataclass(frozen=True, slots=True)
class ApiCredentials:
    username: str
    password: str

    def __repr__(self) -> str:
        return f"ApiCredentials(username={self.username!r}, password='***')"


@dataclass(frozen=True, slots=True)
class PlatformApiEndpoints:
    actual: str = DEFAULT_ACTUAL_ENDPOINT
    dummy: str = DEFAULT_DUMMY_ENDPOINT
    login: str = LOGIN_PATH
    health: str = HEALTH_PATH


@dataclass(frozen=True, slots=True)
class PlatformApiConfig:
    """Holds the platform/well API connection values."""

    credentials: ApiCredentials
    resilience: ResilienceConfig
    endpoints: PlatformApiEndpoints = field(default_factory=PlatformApiEndpoints)

    @property
    def base_url(self) -> str | None:
        return self.resilience.base_url


def build_platform_api_resilience(
    base_url: str,
    *,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> ResilienceConfig:
    # retries are the orchestrator's business, not the transport's
    return ResilienceConfig(
        name="platform-api",
        base_url=base_url,
        timeout_seconds=timeout_seconds,
        retry=NO_RETRY,
        ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
        default_headers={"Accept": "application/json"},
    )


def get_platform_api_config(*, resilience: ResilienceConfig | None = None) -> PlatformApiConfig:
    values = require_env_vars(
        ("WELLSYNC_API_BASE_URL", "WELLSYNC_API_USERNAME", "WELLSYNC_API_PASSWORD")
    )
    endpoints = PlatformApiEndpoints(
        actual=optional_env_var("WELLSYNC_ENDPOINT_ACTUAL", DEFAULT_ACTUAL_ENDPOINT),
        dummy=optional_env_var("WELLSYNC_ENDPOINT_DUMMY", DEFAULT_DUMMY_ENDPOINT),
    )
    timeout = optional_float_env_var("WELLSYNC_HTTP_TIMEOUT", DEFAULT_TIMEOUT_SECONDS)
    return PlatformApiConfig(
        credentials=ApiCredentials(
            username=values["WELLSYNC_API_USERNAME"],
            password=values["WELLSYNC_API_PASSWORD"],
        ),
        resilience=resilience
        or build_platform_api_resilience(
            values["WELLSYNC_API_BASE_URL"].strip(),
            timeout_seconds=timeout,
        ),
        endpoints=endpoints,
    )
