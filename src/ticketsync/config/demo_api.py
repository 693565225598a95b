"""Remote demo API configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from ticketsync.domain.model import RecordKind

from .env import optional_float_env, require_env_vars
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .storage import data_dir

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_DEMO_API_TIMEOUT_SECONDS: Final[float] = 10.0
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"

DEFAULT_ENDPOINTS: Final[dict[RecordKind, str]] = {
    RecordKind.LISTINGS: "tickets",
    RecordKind.VENDORS: "vendors",
    RecordKind.TOURS: "tours",
    RecordKind.CONTACT: "contacts",
    RecordKind.POLICY: "cancellation-policies",
}


@dataclass(frozen=True, slots=True)
class DemoApiConfig:
    """Holds remote demo API configuration values."""

    resilience: ResilienceConfig
    endpoints: Mapping[RecordKind, str] = field(default_factory=lambda: dict(DEFAULT_ENDPOINTS))

    def endpoint_for(self, kind: RecordKind) -> str:
        return self.endpoints.get(kind, DEFAULT_ENDPOINTS[kind])


def _cache_config() -> CacheConfig | None:
    ttl_seconds = optional_float_env("TICKETSYNC_HTTP_CACHE_TTL", 0.0)
    if ttl_seconds <= 0:
        return None
    return CacheConfig(
        backend="sqlite",
        sqlite_path=str(data_dir() / HTTP_CACHE_FILENAME),
        ttl_seconds=ttl_seconds,
    )


def get_demo_api_config(*, resilience: ResilienceConfig | None = None) -> DemoApiConfig:
    values = require_env_vars(("TICKETSYNC_API_BASE_URL",))
    headers: dict[str, str] = {"Accept": "application/json"}
    api_key = os.getenv("TICKETSYNC_API_KEY")
    if api_key:
        headers["apikey"] = api_key
    return DemoApiConfig(
        resilience=resilience
        or ResilienceConfig(
            name="demo-api",
            base_url=values["TICKETSYNC_API_BASE_URL"],
            timeout_seconds=optional_float_env(
                "TICKETSYNC_API_TIMEOUT", DEFAULT_DEMO_API_TIMEOUT_SECONDS
            ),
            retry=RetryPolicy(total=3),
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            cache=_cache_config(),
            default_headers=headers,
        ),
    )
