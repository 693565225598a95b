"""Result shapes returned by the reconciler."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ticketsync.domain.model import DataSource, RecordKind

from .matching import ids_match

if TYPE_CHECKING:
    from datetime import datetime

    from ticketsync.domain.model import (
        AssociatedRecord,
        CatalogRecord,
        LinkOutcome,
        Listing,
        Record,
        Tour,
        Vendor,
    )


@dataclass(frozen=True, slots=True)
class RetryToken:
    """Identifies a failed load so the caller can retry that collection alone."""

    kind: RecordKind
    timestamp_ms: int


@dataclass(frozen=True, slots=True)
class RecoverableError:
    """A soft failure reported alongside the best available data."""

    kind: RecordKind
    message: str
    occurred_at: datetime

    @property
    def retry_token(self) -> RetryToken:
        return RetryToken(kind=self.kind, timestamp_ms=int(self.occurred_at.timestamp() * 1000))


@dataclass(slots=True)
class CollectionLoad:
    """Outcome of loading one catalog collection."""

    kind: RecordKind
    records: list[CatalogRecord]
    source: DataSource
    error: RecoverableError | None = None


@dataclass(slots=True)
class CatalogSnapshot:
    """Listings, vendors and tours, each remote- or store-sourced."""

    listings: list[Listing] = field(default_factory=list["Listing"])
    vendors: list[Vendor] = field(default_factory=list["Vendor"])
    tours: list[Tour] = field(default_factory=list["Tour"])
    sources: dict[RecordKind, DataSource] = field(default_factory=dict[RecordKind, DataSource])
    errors: list[RecoverableError] = field(default_factory=list["RecoverableError"])

    def listing_by_id(self, listing_id: object) -> Listing | None:
        return _first_by_id(self.listings, listing_id)

    def vendor_for(self, listing: Listing) -> Vendor | None:
        return _first_by_id(self.vendors, listing.vendor_id)

    def tour_for(self, listing: Listing) -> Tour | None:
        return _first_by_id(self.tours, listing.tour_id)

    def error_for(self, kind: RecordKind) -> RecoverableError | None:
        return next((error for error in self.errors if error.kind is kind), None)


def _first_by_id[TRecord: Record](records: list[TRecord], record_id: object) -> TRecord | None:
    return next((record for record in records if ids_match(record.id, record_id)), None)


@dataclass
class ResolveResult[TRecord: AssociatedRecord]:
    """Outcome of resolving the contact or policy record for a pair."""

    record: TRecord
    source: DataSource
    errors: list[RecoverableError] = field(default_factory=list["RecoverableError"])


@dataclass
class ListingRecordResult:
    """A listing's contact or policy record, plus the link made for it when one was needed."""

    listing: Listing
    resolved: ResolveResult[AssociatedRecord]
    link: LinkOutcome | None = None
