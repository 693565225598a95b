from __future__ import annotations

import asyncio

import httpx
import pytest
from hishel.httpx import AsyncCacheClient

from ticketsync.adapters.http_resilience import ResilientClient, build_retry
from ticketsync.config import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy


def test_build_retry_only_retries_idempotent_reads() -> None:
    retry = build_retry(RetryPolicy(total=5, retry_on_status=frozenset({503})))

    assert retry.total == 5
    assert retry.is_retryable_method("GET")
    assert not retry.is_retryable_method("POST")


def test_memory_cache_uses_caching_client() -> None:
    client = ResilientClient(ResilienceConfig(name="cached", cache=CacheConfig()))

    assert isinstance(client._client, AsyncCacheClient)  # noqa: SLF001  # type: ignore[reportPrivateUsage]
    asyncio.run(client.aclose())


def test_sqlite_cache_requires_a_path() -> None:
    with pytest.raises(ValueError, match="sqlite_path"):
        ResilientClient(ResilienceConfig(name="file", cache=CacheConfig(backend="sqlite")))


def test_unknown_cache_backend_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unsupported cache backend"):
        config = ResilienceConfig(name="bad", cache=CacheConfig(backend="redis"))  # type: ignore[arg-type]
        ResilientClient(config)


def test_rate_limited_get_returns_response() -> None:
    calls: list[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        return httpx.Response(200, json=[])

    async def run() -> list[int]:
        client = ResilientClient(
            ResilienceConfig(name="limited", ratelimit=RateLimit(max_calls=5, per_seconds=1.0))
        )
        client._client = httpx.AsyncClient(  # noqa: SLF001  # type: ignore[reportPrivateUsage]
            base_url="https://demo.test/api",
            transport=httpx.MockTransport(handler),
        )
        async with client:
            responses = [await client.get("tours"), await client.get("vendors")]
        return [response.status_code for response in responses]

    assert asyncio.run(run()) == [200, 200]
    assert calls == ["https://demo.test/api/tours", "https://demo.test/api/vendors"]
