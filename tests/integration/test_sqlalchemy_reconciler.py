from __future__ import annotations

import asyncio

from ticketsync.adapters.sqlalchemy.store import SqlAlchemyRecordStore  # noqa: TC001
from ticketsync.domain.model import (
    CancellationPolicyRecord,
    ContactRecord,
    DataSource,
    LinkOutcome,
    RecordKind,
    RecordOrigin,
)
from ticketsync.domain.reconciliation import Reconciler
from tests.helpers.records import (
    FakeRemoteSource,
    contact_payload,
    default_catalog,
    fixed_clock,
    policy_payload,
)


def test_catalog_falls_back_to_previously_written_rows(
    sqlite_store: SqlAlchemyRecordStore,
) -> None:
    remote = FakeRemoteSource(default_catalog())
    reconciler = Reconciler(remote=remote, store=sqlite_store, clock=fixed_clock)
    asyncio.run(reconciler.load_catalog())

    remote.failing.update({RecordKind.LISTINGS, RecordKind.TOURS})
    snapshot = asyncio.run(reconciler.load_catalog())

    assert snapshot.sources[RecordKind.LISTINGS] is DataSource.STORE
    assert snapshot.sources[RecordKind.TOURS] is DataSource.STORE
    assert snapshot.sources[RecordKind.VENDORS] is DataSource.REMOTE
    assert [listing.id for listing in snapshot.listings] == ["1", "2"]
    assert [tour.name for tour in snapshot.tours] == ["Harbour Loop", "Sunset Sail"]
    assert {error.kind for error in snapshot.errors} == {RecordKind.LISTINGS, RecordKind.TOURS}


def test_resolve_save_and_resolve_again(sqlite_store: SqlAlchemyRecordStore) -> None:
    remote = FakeRemoteSource({RecordKind.CONTACT: [contact_payload(vendor_id=10, tour_id="20")]})
    reconciler = Reconciler(remote=remote, store=sqlite_store, clock=fixed_clock)

    remote_result = asyncio.run(
        reconciler.resolve_associated_record(RecordKind.CONTACT, "10", 20)
    )
    saved = asyncio.run(
        reconciler.save_associated_record(
            RecordKind.CONTACT,
            ContactRecord(id="", vendor_id="10", tour_id="20", email="desk@example.com"),
        )
    )
    local_result = asyncio.run(
        reconciler.resolve_associated_record(RecordKind.CONTACT, 10, "20")
    )

    assert remote_result.source is DataSource.REMOTE
    assert saved.id == remote_result.record.id
    assert local_result.source is DataSource.STORE
    assert isinstance(local_result.record, ContactRecord)
    assert local_result.record.email == "desk@example.com"
    assert local_result.record.origin is RecordOrigin.LOCAL


def test_policy_fallback_reports_one_error(sqlite_store: SqlAlchemyRecordStore) -> None:
    remote = FakeRemoteSource({RecordKind.POLICY: [policy_payload(minutes=45)]})
    reconciler = Reconciler(remote=remote, store=sqlite_store, clock=fixed_clock)
    asyncio.run(reconciler.resolve_associated_record(RecordKind.POLICY, "10", "20"))

    remote.failing.add(RecordKind.POLICY)
    result = asyncio.run(reconciler.resolve_associated_record(RecordKind.POLICY, "10", "20"))

    assert result.source is DataSource.STORE
    assert isinstance(result.record, CancellationPolicyRecord)
    assert result.record.cancellation_before_minutes == 45
    assert [error.kind for error in result.errors] == [RecordKind.POLICY]


def test_linking_twice_keeps_one_row(sqlite_store: SqlAlchemyRecordStore) -> None:
    reconciler = Reconciler(remote=FakeRemoteSource(), store=sqlite_store, clock=fixed_clock)

    outcomes = [
        asyncio.run(reconciler.link_vendor_tour("10", "20")),
        asyncio.run(reconciler.link_vendor_tour(10, 20)),
    ]

    assert outcomes == [LinkOutcome.CREATED, LinkOutcome.ALREADY_EXISTS]
    link = sqlite_store.find_link("10", "20")
    assert link is not None


def test_remote_id_of_another_pair_leaves_that_row_alone(
    sqlite_store: SqlAlchemyRecordStore,
) -> None:
    sqlite_store.upsert(
        RecordKind.CONTACT,
        ContactRecord(id="contact_1_1_0", vendor_id="1", tour_id="1", email="owner@one.example"),
    )
    remote = FakeRemoteSource(
        {
            RecordKind.CONTACT: [
                contact_payload("contact_1_1_0", vendor_id=2, tour_id=2, email="two@example.com")
            ]
        }
    )
    reconciler = Reconciler(remote=remote, store=sqlite_store, clock=fixed_clock)

    result = asyncio.run(reconciler.resolve_associated_record(RecordKind.CONTACT, "2", "2"))

    assert result.source is DataSource.REMOTE
    assert result.record.id != "contact_1_1_0"
    assert result.record.updated_at is not None
    owner = sqlite_store.find_one(RecordKind.CONTACT, "1", "1")
    assert isinstance(owner, ContactRecord)
    assert owner.email == "owner@one.example"
    queried = sqlite_store.find_one(RecordKind.CONTACT, "2", "2")
    assert isinstance(queried, ContactRecord)
    assert queried.email == "two@example.com"
