"""Ports for persisting catalog and associated records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ticketsync.domain.model import (
        AssociatedRecord,
        LinkOutcome,
        Record,
        RecordKind,
        VendorTourLink,
    )


class StoreError(RuntimeError):
    """Raised when the persistent store fails to read or write."""

    def __init__(self, kind: RecordKind | None, message: str) -> None:
        prefix = f"{kind}: " if kind is not None else ""
        super().__init__(f"{prefix}{message}")
        self.kind = kind
        self.message = message


@runtime_checkable
class Repository[TRecord](Protocol):
    """Minimal repository contract for a table of records."""

    def add(self, entity: TRecord) -> None: ...

    def get(self, record_id: str) -> TRecord | None: ...

    def list_all(self) -> list[TRecord]: ...


@runtime_checkable
class PairKeyedRepository[TRecord](Repository[TRecord], Protocol):
    """Repository for records addressed by a ``(vendor_id, tour_id)`` pair."""

    def find_by_pair(self, vendor_id: str, tour_id: str) -> TRecord | None: ...


@runtime_checkable
class RecordStore(Protocol):
    """Point operations against the local durable store."""

    def find_one(
        self, kind: RecordKind, vendor_id: str, tour_id: str
    ) -> AssociatedRecord | None: ...

    def list_all(self, kind: RecordKind) -> list[Record]: ...

    def upsert[TRecord: Record](self, kind: RecordKind, record: TRecord) -> TRecord: ...

    def find_link(self, vendor_id: str, tour_id: str) -> VendorTourLink | None: ...

    def insert_link(self, vendor_id: str, tour_id: str) -> LinkOutcome: ...


__all__ = ["PairKeyedRepository", "RecordStore", "Repository", "StoreError"]
