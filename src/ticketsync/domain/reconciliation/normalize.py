"""Build domain records from raw remote payloads."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Final

from ticketsync.domain.model import (
    CancellationPolicyRecord,
    ContactRecord,
    Listing,
    ListingKind,
    RecordKind,
    RecordOrigin,
    Tour,
    Vendor,
)

from .matching import TOUR_ID_KEYS, VENDOR_ID_KEYS, normalize_id, raw_field

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from ticketsync.domain.model import CatalogRecord
    from ticketsync.domain.ports.fetching import RawRecord

_LISTING_KIND_ALIASES: Final[dict[str, ListingKind]] = {
    "newlisting": ListingKind.NEW_LISTING,
    "multivariant": ListingKind.MULTI_VARIANT,
}
_NON_ALNUM = re.compile(r"[^a-z0-9]")


class RecordNormalizationError(ValueError):
    """Raised when a raw payload cannot be turned into a domain record."""


def _required_id(payload: RawRecord, keys: tuple[str, ...]) -> str:
    value = normalize_id(raw_field(payload, keys))
    if not value:
        raise RecordNormalizationError(f"Missing identifier ({keys[0]}) in payload")
    return value


def _optional_id(payload: RawRecord, keys: tuple[str, ...]) -> str | None:
    return normalize_id(raw_field(payload, keys)) or None


def _text(payload: RawRecord, keys: tuple[str, ...], *, default: str = "") -> str:
    value = raw_field(payload, keys)
    if value is None:
        return default
    return str(value).strip()


def parse_listing_kind(value: object) -> ListingKind:
    """Accept ``new_listing``, ``NewListing``, ``new-listing`` and friends."""

    key = _NON_ALNUM.sub("", str(value).lower()) if value is not None else ""
    try:
        return _LISTING_KIND_ALIASES[key]
    except KeyError:
        raise RecordNormalizationError(f"Unknown listing type: {value!r}") from None


def parse_minutes(value: object) -> int:
    """Coerce a cancellation window to a non-negative whole number of minutes."""

    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise RecordNormalizationError(f"Invalid cancellation minutes: {value!r}")
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        raise RecordNormalizationError(f"Invalid cancellation minutes: {value!r}") from None
    if not number.is_finite() or number < 0 or number != number.to_integral_value():
        raise RecordNormalizationError(f"Invalid cancellation minutes: {value!r}")
    return int(number)


def listing_from_payload(payload: RawRecord) -> Listing:
    return Listing(
        id=_required_id(payload, ("id",)),
        product_name=_text(payload, ("productName", "product_name")),
        vendor_id=_required_id(payload, VENDOR_ID_KEYS),
        tour_id=_required_id(payload, TOUR_ID_KEYS),
        listing_kind=parse_listing_kind(raw_field(payload, ("listingType", "listing_type"))),
        status=_text(payload, ("status",)) or None,
    )


def vendor_from_payload(payload: RawRecord) -> Vendor:
    return Vendor(id=_required_id(payload, ("id",)), name=_text(payload, ("name",)))


def tour_from_payload(payload: RawRecord) -> Tour:
    return Tour(
        id=_required_id(payload, ("id",)),
        name=_text(payload, ("name",)),
        location=_text(payload, ("location",)) or None,
        vendor_id=_optional_id(payload, VENDOR_ID_KEYS),
    )


CATALOG_BUILDERS: Final[dict[RecordKind, Callable[[RawRecord], CatalogRecord]]] = {
    RecordKind.LISTINGS: listing_from_payload,
    RecordKind.VENDORS: vendor_from_payload,
    RecordKind.TOURS: tour_from_payload,
}


def contact_from_payload(payload: RawRecord, *, vendor_id: str, tour_id: str) -> ContactRecord:
    return ContactRecord(
        id=normalize_id(raw_field(payload, ("id",))),
        vendor_id=vendor_id,
        tour_id=tour_id,
        email=_text(payload, ("email",)),
        phone=_text(payload, ("phone",)),
        origin=RecordOrigin.REMOTE,
    )


def policy_from_payload(
    payload: RawRecord, *, vendor_id: str, tour_id: str
) -> CancellationPolicyRecord:
    return CancellationPolicyRecord(
        id=normalize_id(raw_field(payload, ("id",))),
        vendor_id=vendor_id,
        tour_id=tour_id,
        cancellation_before_minutes=parse_minutes(
            raw_field(payload, ("cancellationBeforeMinutes", "cancellation_before_minutes"))
        ),
        origin=RecordOrigin.REMOTE,
    )


ASSOCIATED_BUILDERS: Final[
    dict[RecordKind, Callable[..., ContactRecord | CancellationPolicyRecord]]
] = {
    RecordKind.CONTACT: contact_from_payload,
    RecordKind.POLICY: policy_from_payload,
}


# Storage identifiers -----------------------------------------------------------


def looks_internal(record_id: str, prefix: str, vendor_id: str, tour_id: str) -> bool:
    """Return whether ``record_id`` was generated by :func:`synthesize_storage_id` for this pair.

    An id minted for another pair is not reused, or the upsert would land on that pair's row.
    """

    return record_id.startswith(f"{prefix}_{vendor_id}_{tour_id}_")


def synthesize_storage_id(prefix: str, vendor_id: str, tour_id: str, now: datetime) -> str:
    millis = int(now.timestamp() * 1000)
    return f"{prefix}_{vendor_id}_{tour_id}_{millis}"
