"""Fetch-merge-fallback orchestration between the remote source and the store."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Final

from ticketsync.domain.model import (
    ASSOCIATED_CLASS_BY_KIND,
    CancellationPolicyRecord,
    DataSource,
    LinkOutcome,
    Listing,
    RecordKind,
    RecordOrigin,
    Tour,
    Vendor,
)
from ticketsync.domain.ports.fetching import TransportError
from ticketsync.domain.ports.persistence import StoreError

from .matching import find_matching_record, normalize_id
from .normalize import (
    ASSOCIATED_BUILDERS,
    CATALOG_BUILDERS,
    RecordNormalizationError,
    looks_internal,
    synthesize_storage_id,
)
from .results import (
    CatalogSnapshot,
    CollectionLoad,
    ListingRecordResult,
    RecoverableError,
    ResolveResult,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from ticketsync.domain.model import AssociatedRecord, CatalogRecord
    from ticketsync.domain.ports.fetching import RawRecord, RemoteSource
    from ticketsync.domain.ports.persistence import RecordStore

    from .results import RetryToken

log = getLogger(__name__)

type Clock = Callable[[], datetime]

CATALOG_LOAD_ORDER: Final[tuple[RecordKind, ...]] = (
    RecordKind.LISTINGS,
    RecordKind.VENDORS,
    RecordKind.TOURS,
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Reconciler:
    """Serve catalog and associated records from the remote source, backed by the store.

    Remote data is written through to the store; when the remote source fails the
    store answers instead and a :class:`RecoverableError` tells the caller so. The
    reconciler keeps no state between calls apart from what the store persists.
    """

    def __init__(
        self,
        *,
        remote: RemoteSource,
        store: RecordStore,
        clock: Clock | None = None,
    ) -> None:
        self._remote = remote
        self._store = store
        self._clock = clock or _utcnow

    # Catalog -------------------------------------------------------------------

    async def load_catalog(self) -> CatalogSnapshot:
        """Load listings, vendors and tours concurrently, each with its own fallback."""

        loads = await asyncio.gather(*(self.reload_collection(kind) for kind in CATALOG_LOAD_ORDER))
        snapshot = CatalogSnapshot()
        for load in loads:
            snapshot.sources[load.kind] = load.source
            if load.error is not None:
                snapshot.errors.append(load.error)
            if load.kind is RecordKind.LISTINGS:
                snapshot.listings = [r for r in load.records if isinstance(r, Listing)]
            elif load.kind is RecordKind.VENDORS:
                snapshot.vendors = [r for r in load.records if isinstance(r, Vendor)]
            else:
                snapshot.tours = [r for r in load.records if isinstance(r, Tour)]

        log.info(
            "Loaded catalog: listings=%s, vendors=%s, tours=%s, errors=%s",
            len(snapshot.listings),
            len(snapshot.vendors),
            len(snapshot.tours),
            len(snapshot.errors),
        )
        return snapshot

    async def reload_collection(self, kind: RecordKind) -> CollectionLoad:
        """Load a single catalog collection (also the retry path for a failed load)."""

        if not kind.is_catalog:
            raise ValueError(f"{kind} is not a catalog collection")

        try:
            payloads = await self._remote.fetch_all(kind)
        except TransportError as exc:
            log.warning("Remote fetch for %s failed, falling back to store: %s", kind, exc)
            return self._load_from_store(kind, exc)

        records = self._normalize_collection(kind, payloads)
        self._write_through(kind, records)
        return CollectionLoad(kind=kind, records=records, source=DataSource.REMOTE)

    async def retry(self, token: RetryToken) -> CollectionLoad:
        """Re-run the load a :class:`RetryToken` was issued for."""

        if not token.kind.is_catalog:
            raise ValueError(
                f"{token.kind} records are retried by resolving their vendor/tour pair again"
            )
        log.info("Retrying %s load issued at %s", token.kind, token.timestamp_ms)
        return await self.reload_collection(token.kind)

    def _normalize_collection(
        self,
        kind: RecordKind,
        payloads: Sequence[RawRecord],
    ) -> list[CatalogRecord]:
        build = CATALOG_BUILDERS[kind]
        records: list[CatalogRecord] = []
        for payload in payloads:
            try:
                records.append(build(payload))
            except RecordNormalizationError as exc:
                log.warning("Skipping malformed %s record: %s", kind, exc)
        return records

    def _write_through(self, kind: RecordKind, records: Sequence[CatalogRecord]) -> None:
        failures = 0
        for record in records:
            try:
                self._store.upsert(kind, record)
            except StoreError as exc:
                failures += 1
                log.warning("Could not persist %s record %s: %s", kind, record.id, exc)
        if failures:
            log.warning(
                "Write-through for %s left %s of %s records unsaved", kind, failures, len(records)
            )

    def _load_from_store(self, kind: RecordKind, cause: TransportError) -> CollectionLoad:
        occurred_at = self._clock()
        try:
            stored = self._store.list_all(kind)
        except StoreError as exc:
            log.warning("Store fallback for %s failed: %s", kind, exc)
            error = RecoverableError(
                kind=kind,
                message=(
                    f"Failed to load {kind} from the remote source ({cause.message}) "
                    f"and from the store ({exc.message})"
                ),
                occurred_at=occurred_at,
            )
            return CollectionLoad(kind=kind, records=[], source=DataSource.DEFAULT, error=error)

        error = RecoverableError(
            kind=kind,
            message=f"Failed to load {kind} from the remote source: {cause.message}",
            occurred_at=occurred_at,
        )
        records: list[CatalogRecord] = [
            r for r in stored if isinstance(r, (Listing, Vendor, Tour))
        ]
        return CollectionLoad(kind=kind, records=records, source=DataSource.STORE, error=error)

    # Associated records --------------------------------------------------------

    async def resolve_associated_record(
        self,
        kind: RecordKind,
        vendor_id: object,
        tour_id: object,
    ) -> ResolveResult[AssociatedRecord]:
        """Return the contact or policy record for a pair, from the best available source."""

        record_cls = _associated_class(kind)
        vendor_key, tour_key = _require_pair(vendor_id, tour_id)
        errors: list[RecoverableError] = []

        try:
            payloads = await self._remote.fetch_all(kind)
        except TransportError as exc:
            log.warning("Remote fetch for %s failed, falling back to store: %s", kind, exc)
            errors.append(
                RecoverableError(
                    kind=kind,
                    message=f"Failed to fetch {kind} records: {exc.message}",
                    occurred_at=self._clock(),
                )
            )
        else:
            match = find_matching_record(payloads, vendor_key, tour_key)
            if match is None:
                log.info("No remote %s record for vendor=%s tour=%s", kind, vendor_key, tour_key)
            else:
                adopted = self._adopt_remote_match(kind, match, vendor_key, tour_key)
                if adopted is not None:
                    return adopted

        stored = self._find_stored(kind, vendor_key, tour_key)
        if stored is not None:
            return ResolveResult(record=stored, source=DataSource.STORE, errors=errors)

        log.info("Returning empty %s record for vendor=%s tour=%s", kind, vendor_key, tour_key)
        return ResolveResult(
            record=record_cls.empty(vendor_key, tour_key),
            source=DataSource.DEFAULT,
            errors=errors,
        )

    def _adopt_remote_match(
        self,
        kind: RecordKind,
        payload: RawRecord,
        vendor_id: str,
        tour_id: str,
    ) -> ResolveResult[AssociatedRecord] | None:
        try:
            record = ASSOCIATED_BUILDERS[kind](payload, vendor_id=vendor_id, tour_id=tour_id)
        except RecordNormalizationError as exc:
            log.warning("Ignoring malformed remote %s record: %s", kind, exc)
            return None

        stored = self._find_stored(kind, vendor_id, tour_id)
        if stored is not None and stored.origin is RecordOrigin.LOCAL:
            log.info("Keeping locally edited %s record %s over remote data", kind, stored.id)
            return ResolveResult(record=stored, source=DataSource.STORE)

        if stored is not None:
            record.id = stored.id
        elif not looks_internal(record.id, record.ID_PREFIX, vendor_id, tour_id):
            record.id = synthesize_storage_id(record.ID_PREFIX, vendor_id, tour_id, self._clock())

        try:
            record = self._store.upsert(kind, record)
        except StoreError as exc:
            log.warning("Could not persist remote %s record %s: %s", kind, record.id, exc)
        return ResolveResult(record=record, source=DataSource.REMOTE)

    def _find_stored(
        self, kind: RecordKind, vendor_id: str, tour_id: str
    ) -> AssociatedRecord | None:
        try:
            return self._store.find_one(kind, vendor_id, tour_id)
        except StoreError as exc:
            log.warning("Store lookup for %s (%s, %s) failed: %s", kind, vendor_id, tour_id, exc)
            return None

    async def save_associated_record[TRecord: AssociatedRecord](
        self,
        kind: RecordKind,
        record: TRecord,
    ) -> TRecord:
        """Insert or update the record for its pair; store failures propagate."""

        record_cls = _associated_class(kind)
        if not isinstance(record, record_cls):
            raise TypeError(
                f"Expected {record_cls.__name__} for {kind}, got {type(record).__name__}"
            )
        vendor_key, tour_key = _require_pair(record.vendor_id, record.tour_id)
        if isinstance(record, CancellationPolicyRecord):
            _validate_minutes(record.cancellation_before_minutes)

        existing = self._store.find_one(kind, vendor_key, tour_key)
        storage_id = (
            existing.id
            if existing is not None
            else synthesize_storage_id(record.ID_PREFIX, vendor_key, tour_key, self._clock())
        )
        candidate = replace(
            record,
            id=storage_id,
            vendor_id=vendor_key,
            tour_id=tour_key,
            origin=RecordOrigin.LOCAL,
        )
        saved = self._store.upsert(kind, candidate)
        log.info(
            "%s %s record %s for vendor=%s tour=%s",
            "Updated" if existing is not None else "Inserted",
            kind,
            saved.id,
            vendor_key,
            tour_key,
        )
        return saved

    async def resolve_for_listing(
        self, listing: Listing, kind: RecordKind
    ) -> ListingRecordResult:
        """Resolve a listing's contact or policy, linking multi-variant listings first."""

        link: LinkOutcome | None = None
        if listing.requires_vendor_tour_link:
            link = await self.link_vendor_tour(listing.vendor_id, listing.tour_id)
        resolved = await self.resolve_associated_record(kind, listing.vendor_id, listing.tour_id)
        return ListingRecordResult(listing=listing, resolved=resolved, link=link)

    # Vendor-tour links ---------------------------------------------------------

    async def link_vendor_tour(self, vendor_id: object, tour_id: object) -> LinkOutcome:
        """Associate a vendor with a tour; linking an existing pair is a no-op success."""

        vendor_key, tour_key = _require_pair(vendor_id, tour_id)
        if self._store.find_link(vendor_key, tour_key) is not None:
            log.info("Vendor %s already linked to tour %s", vendor_key, tour_key)
            return LinkOutcome.ALREADY_EXISTS

        outcome = self._store.insert_link(vendor_key, tour_key)
        log.info("Linked vendor %s to tour %s: %s", vendor_key, tour_key, outcome)
        return outcome


def _associated_class(kind: RecordKind) -> type[AssociatedRecord]:
    try:
        return ASSOCIATED_CLASS_BY_KIND[kind]
    except KeyError:
        raise ValueError(f"{kind} is not a contact or policy record kind") from None


def _require_pair(vendor_id: object, tour_id: object) -> tuple[str, str]:
    vendor_key = normalize_id(vendor_id)
    tour_key = normalize_id(tour_id)
    if not vendor_key or not tour_key:
        raise ValueError("Both vendor_id and tour_id are required")
    return vendor_key, tour_key


def _validate_minutes(value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(
            f"cancellation_before_minutes must be a non-negative integer, got {value!r}"
        )
