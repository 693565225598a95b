"""Async HTTP client for remote adapters: retries, rate limiting and a response cache."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

    from ticketsync.config.http_resilience import CacheConfig, ResilienceConfig, RetryPolicy

log = getLogger(__name__)


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        allowed_methods=("GET", "HEAD"),
        status_forcelist=tuple(sorted(policy.retry_on_status)),
        retry_on_exceptions=policy.retry_on_exceptions,
    )


def build_limiter(config: ResilienceConfig) -> AsyncLimiter | None:
    """Limiter for ``config.ratelimit``; share one across clients to cap their combined rate."""

    if config.ratelimit is None:
        return None
    return AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)


def _cache_storage(config: CacheConfig | None) -> AsyncSqliteStorage | None:
    if config is None:
        return None
    if config.backend == "sqlite":
        if not config.sqlite_path:
            raise ValueError("A sqlite cache needs sqlite_path")
        database_path = config.sqlite_path
    elif config.backend == "memory":
        database_path = ":memory:"
    else:
        raise ValueError(f"Unsupported cache backend: {config.backend}")
    return AsyncSqliteStorage(database_path=database_path, default_ttl=config.ttl_seconds)


def _build_http_client(config: ResilienceConfig) -> httpx.AsyncClient:
    options: dict[str, Any] = {
        "timeout": config.timeout_seconds,
        "transport": RetryTransport(retry=build_retry(config.retry)),
        "headers": dict(config.default_headers or {}),
    }
    if config.base_url is not None:
        options["base_url"] = config.base_url

    storage = _cache_storage(config.cache)
    if storage is None:
        return httpx.AsyncClient(**options)
    return AsyncCacheClient(storage=storage, **options)


class ResilientClient:
    """Rate-limited GET client; use it as an async context manager."""

    def __init__(self, config: ResilienceConfig, *, limiter: AsyncLimiter | None = None) -> None:
        self.config = config
        self._limiter = limiter if limiter is not None else build_limiter(config)
        self._client = _build_http_client(config)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, url: str, *, params: Mapping[str, str] | None = None) -> httpx.Response:
        if self._limiter is None:
            response = await self._client.get(url, params=params)
        else:
            async with self._limiter:
                response = await self._client.get(url, params=params)
        log.debug("%s GET %s -> %s", self.config.name, url, response.status_code)
        return response
