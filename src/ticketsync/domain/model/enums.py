"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class RecordKind(StrEnum):
    """Record collections the reconciler moves between sources."""

    LISTINGS = "listings"
    VENDORS = "vendors"
    TOURS = "tours"
    CONTACT = "contact"
    POLICY = "policy"

    @property
    def is_catalog(self) -> bool:
        return self in CATALOG_KINDS

    @property
    def is_associated(self) -> bool:
        return self in ASSOCIATED_KINDS


CATALOG_KINDS = frozenset({RecordKind.LISTINGS, RecordKind.VENDORS, RecordKind.TOURS})
ASSOCIATED_KINDS = frozenset({RecordKind.CONTACT, RecordKind.POLICY})


class ListingKind(StrEnum):
    NEW_LISTING = "new_listing"
    MULTI_VARIANT = "multi_variant"


class RecordOrigin(StrEnum):
    """Where the stored copy of an associated record came from."""

    REMOTE = "remote"
    LOCAL = "local"


class LinkOutcome(StrEnum):
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"


class DataSource(StrEnum):
    """Which source produced a returned record or collection."""

    REMOTE = "remote"
    STORE = "store"
    DEFAULT = "default"
