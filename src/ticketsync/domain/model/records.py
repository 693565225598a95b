"""Catalog and associated record entities.

Listings, vendors and tours are ingested from the remote source and written
through to the store unchanged. Contact and cancellation-policy records are
keyed by their ``(vendor_id, tour_id)`` pair; the store holds at most one of
each per pair. Vendor-tour links are append-only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from .enums import ListingKind, RecordKind, RecordOrigin

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(eq=False, kw_only=True)
class Record:
    """Base for every stored record; ``id`` is the primary identifier."""

    id: str
    updated_at: datetime | None = None

    KIND: ClassVar[RecordKind]
    MUTABLE_FIELDS: ClassVar[tuple[str, ...]] = ()


@dataclass(eq=False, kw_only=True)
class Listing(Record):
    product_name: str
    vendor_id: str
    tour_id: str
    listing_kind: ListingKind
    status: str | None = None

    KIND: ClassVar[RecordKind] = RecordKind.LISTINGS
    MUTABLE_FIELDS: ClassVar[tuple[str, ...]] = (
        "product_name",
        "vendor_id",
        "tour_id",
        "listing_kind",
        "status",
    )

    @property
    def requires_vendor_tour_link(self) -> bool:
        """Multi-variant listings are linked to their vendor tour before editing."""
        return self.listing_kind is ListingKind.MULTI_VARIANT


@dataclass(eq=False, kw_only=True)
class Vendor(Record):
    name: str

    KIND: ClassVar[RecordKind] = RecordKind.VENDORS
    MUTABLE_FIELDS: ClassVar[tuple[str, ...]] = ("name",)


@dataclass(eq=False, kw_only=True)
class Tour(Record):
    name: str
    location: str | None = None
    vendor_id: str | None = None

    KIND: ClassVar[RecordKind] = RecordKind.TOURS
    MUTABLE_FIELDS: ClassVar[tuple[str, ...]] = ("name", "location", "vendor_id")


@dataclass(eq=False, kw_only=True)
class AssociatedRecord(Record):
    """A record owned by a ``(vendor_id, tour_id)`` pair."""

    vendor_id: str
    tour_id: str
    origin: RecordOrigin = RecordOrigin.REMOTE

    ID_PREFIX: ClassVar[str]

    @property
    def pair(self) -> tuple[str, str]:
        return (self.vendor_id, self.tour_id)

    @property
    def is_persisted(self) -> bool:
        return bool(self.id)


@dataclass(eq=False, kw_only=True)
class ContactRecord(AssociatedRecord):
    email: str = ""
    phone: str = ""

    KIND: ClassVar[RecordKind] = RecordKind.CONTACT
    ID_PREFIX: ClassVar[str] = "contact"
    MUTABLE_FIELDS: ClassVar[tuple[str, ...]] = ("email", "phone", "origin")

    @classmethod
    def empty(cls, vendor_id: str, tour_id: str) -> ContactRecord:
        return cls(id="", vendor_id=vendor_id, tour_id=tour_id)


@dataclass(eq=False, kw_only=True)
class CancellationPolicyRecord(AssociatedRecord):
    cancellation_before_minutes: int = 0

    KIND: ClassVar[RecordKind] = RecordKind.POLICY
    ID_PREFIX: ClassVar[str] = "policy"
    MUTABLE_FIELDS: ClassVar[tuple[str, ...]] = ("cancellation_before_minutes", "origin")

    @classmethod
    def empty(cls, vendor_id: str, tour_id: str) -> CancellationPolicyRecord:
        return cls(id="", vendor_id=vendor_id, tour_id=tour_id)


@dataclass(eq=False, kw_only=True)
class VendorTourLink:
    """Unordered association between a vendor and a tour."""

    id: str
    vendor_id: str
    tour_id: str
    created_at: datetime | None = field(default=None)


type CatalogRecord = Listing | Vendor | Tour

RECORD_CLASS_BY_KIND: dict[RecordKind, type[Record]] = {
    RecordKind.LISTINGS: Listing,
    RecordKind.VENDORS: Vendor,
    RecordKind.TOURS: Tour,
    RecordKind.CONTACT: ContactRecord,
    RecordKind.POLICY: CancellationPolicyRecord,
}

ASSOCIATED_CLASS_BY_KIND: dict[RecordKind, type[ContactRecord | CancellationPolicyRecord]] = {
    RecordKind.CONTACT: ContactRecord,
    RecordKind.POLICY: CancellationPolicyRecord,
}
