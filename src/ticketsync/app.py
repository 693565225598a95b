"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from ticketsync.adapters.demo_api import RemoteCatalogClient
from ticketsync.adapters.sqlalchemy import SqlAlchemyRecordStore, is_started, startup
from ticketsync.config import get_demo_api_config
from ticketsync.domain.model import (
    CancellationPolicyRecord,
    ContactRecord,
    LinkOutcome,
    RecordKind,
)
from ticketsync.domain.reconciliation import Reconciler

if TYPE_CHECKING:
    from ticketsync.domain.model import AssociatedRecord
    from ticketsync.domain.ports.fetching import RemoteSource
    from ticketsync.domain.ports.persistence import RecordStore
    from ticketsync.domain.reconciliation import (
        CatalogSnapshot,
        CollectionLoad,
        ListingRecordResult,
        ResolveResult,
    )


log = getLogger(__name__)


def build_reconciler(
    *,
    remote: RemoteSource | None = None,
    store: RecordStore | None = None,
) -> Reconciler:
    """Wire the reconciler to the configured demo API and SQL store."""

    if store is None:
        if not is_started():
            startup()
        store = SqlAlchemyRecordStore()
    if remote is None:
        remote = RemoteCatalogClient(config=get_demo_api_config())
    return Reconciler(remote=remote, store=store)


def load_catalog(*, reconciler: Reconciler | None = None) -> CatalogSnapshot:
    active = reconciler or build_reconciler()
    snapshot = asyncio.run(active.load_catalog())
    for error in snapshot.errors:
        log.warning("Catalog %s served with recoverable error: %s", error.kind, error.message)
    return snapshot


def reload_collection(kind: RecordKind, *, reconciler: Reconciler | None = None) -> CollectionLoad:
    active = reconciler or build_reconciler()
    return asyncio.run(active.reload_collection(kind))


def resolve_record(
    kind: RecordKind,
    vendor_id: str,
    tour_id: str,
    *,
    reconciler: Reconciler | None = None,
) -> ResolveResult[AssociatedRecord]:
    active = reconciler or build_reconciler()
    return asyncio.run(active.resolve_associated_record(kind, vendor_id, tour_id))


def resolve_listing_record(
    listing_id: str,
    kind: RecordKind,
    *,
    reconciler: Reconciler | None = None,
) -> ListingRecordResult:
    """Open a listing's contact or policy record, linking multi-variant listings first."""

    active = reconciler or build_reconciler()

    async def _resolve() -> ListingRecordResult:
        snapshot = await active.load_catalog()
        listing = snapshot.listing_by_id(listing_id)
        if listing is None:
            raise ValueError(f"Unknown listing: {listing_id}")
        return await active.resolve_for_listing(listing, kind)

    return asyncio.run(_resolve())


def save_contact(
    vendor_id: str,
    tour_id: str,
    *,
    email: str,
    phone: str,
    reconciler: Reconciler | None = None,
) -> ContactRecord:
    """Submit a contact edit for a vendor/tour pair."""

    active = reconciler or build_reconciler()
    draft = ContactRecord(id="", vendor_id=vendor_id, tour_id=tour_id, email=email, phone=phone)
    return asyncio.run(active.save_associated_record(RecordKind.CONTACT, draft))


def save_policy(
    vendor_id: str,
    tour_id: str,
    *,
    cancellation_before_minutes: int,
    reconciler: Reconciler | None = None,
) -> CancellationPolicyRecord:
    """Submit a cancellation-policy edit for a vendor/tour pair."""

    active = reconciler or build_reconciler()
    draft = CancellationPolicyRecord(
        id="",
        vendor_id=vendor_id,
        tour_id=tour_id,
        cancellation_before_minutes=cancellation_before_minutes,
    )
    return asyncio.run(active.save_associated_record(RecordKind.POLICY, draft))


def link_vendor_tour(
    vendor_id: str,
    tour_id: str,
    *,
    reconciler: Reconciler | None = None,
) -> LinkOutcome:
    active = reconciler or build_reconciler()
    outcome = asyncio.run(active.link_vendor_tour(vendor_id, tour_id))
    if outcome is LinkOutcome.ALREADY_EXISTS:
        log.info("Vendor %s and tour %s were already linked", vendor_id, tour_id)
    return outcome
