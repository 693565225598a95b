"""Domain model for ticket catalog reconciliation."""

from __future__ import annotations

from .enums import (
    ASSOCIATED_KINDS,
    CATALOG_KINDS,
    DataSource,
    LinkOutcome,
    ListingKind,
    RecordKind,
    RecordOrigin,
)
from .records import (
    ASSOCIATED_CLASS_BY_KIND,
    RECORD_CLASS_BY_KIND,
    AssociatedRecord,
    CancellationPolicyRecord,
    CatalogRecord,
    ContactRecord,
    Listing,
    Record,
    Tour,
    Vendor,
    VendorTourLink,
)

__all__ = [
    "ASSOCIATED_CLASS_BY_KIND",
    "ASSOCIATED_KINDS",
    "CATALOG_KINDS",
    "RECORD_CLASS_BY_KIND",
    "AssociatedRecord",
    "CancellationPolicyRecord",
    "CatalogRecord",
    "ContactRecord",
    "DataSource",
    "LinkOutcome",
    "Listing",
    "ListingKind",
    "Record",
    "RecordKind",
    "RecordOrigin",
    "Tour",
    "Vendor",
    "VendorTourLink",
]
