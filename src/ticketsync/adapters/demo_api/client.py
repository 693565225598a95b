"""HTTP client for the remote demo API."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from ticketsync.adapters.http_resilience import ResilientClient, build_limiter
from ticketsync.domain.ports.fetching import TransportError

from .schema import parse_collection

if TYPE_CHECKING:
    from collections.abc import Callable

    from ticketsync.config.demo_api import DemoApiConfig
    from ticketsync.domain.model import RecordKind
    from ticketsync.domain.ports.fetching import RawRecord, RemoteSource

log = getLogger(__name__)


class RemoteCatalogClient:
    """Fetches whole collections from the demo API; no matching, no persistence."""

    def __init__(
        self,
        *,
        config: DemoApiConfig,
        client_factory: Callable[..., ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._limiter = build_limiter(self._resilience)

    async def fetch_all(self, kind: RecordKind) -> list[RawRecord]:
        path = self._config.endpoint_for(kind)
        try:
            async with self._client_factory(self._resilience, limiter=self._limiter) as client:
                response = await client.get(path)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise TransportError(kind, f"HTTP {status} from {path}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(kind, f"Request to {path} failed: {exc}") from exc
        except ValueError as exc:
            raise TransportError(kind, f"Invalid JSON from {path}") from exc

        try:
            records = parse_collection(payload)
        except (ValidationError, ValueError) as exc:
            log.error("Unexpected %s payload from %s: %s", kind, path, exc)
            raise TransportError(kind, f"Unexpected payload shape from {path}") from exc

        log.debug("Fetched %s %s records from %s", len(records), kind, path)
        return list(records)


if TYPE_CHECKING:

    def _source_check(config: DemoApiConfig) -> RemoteSource:
        return RemoteCatalogClient(config=config)
