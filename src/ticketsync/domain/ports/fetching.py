"""Ports for fetching records from the remote source."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ticketsync.domain.model import RecordKind

type RawRecord = Mapping[str, object]


class TransportError(RuntimeError):
    """Raised when the remote source is unreachable or answers with a failure."""

    def __init__(self, kind: RecordKind, message: str) -> None:
        super().__init__(f"{kind}: {message}")
        self.kind = kind
        self.message = message


@runtime_checkable
class RemoteSource(Protocol):
    """Read-only access to the remote collections, one full collection per call."""

    async def fetch_all(self, kind: RecordKind) -> list[RawRecord]: ...


__all__ = ["RawRecord", "RemoteSource", "TransportError"]
