from __future__ import annotations

import pytest

from ticketsync import app
from ticketsync.adapters.sqlalchemy import SqlAlchemyRecordStore, is_started, shutdown
from ticketsync.domain.model import DataSource, LinkOutcome, RecordKind, RecordOrigin
from ticketsync.domain.reconciliation import Reconciler
from tests.helpers.records import FakeRecordStore, FakeRemoteSource, default_catalog


def test_build_reconciler_wires_default_store(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite+pysqlite:///:memory:")
    shutdown()
    try:
        reconciler = app.build_reconciler(remote=FakeRemoteSource())
        assert is_started()
        assert isinstance(reconciler._store, SqlAlchemyRecordStore)  # noqa: SLF001  # type: ignore[reportPrivateUsage]
    finally:
        shutdown()


def test_sync_wrappers_drive_the_reconciler() -> None:
    store = FakeRecordStore()
    reconciler = Reconciler(
        remote=FakeRemoteSource(default_catalog(), failing=[RecordKind.CONTACT]),
        store=store,
    )

    snapshot = app.load_catalog(reconciler=reconciler)
    saved = app.save_contact(
        "10", "20", email="desk@example.com", phone="", reconciler=reconciler
    )
    policy = app.save_policy("10", "20", cancellation_before_minutes=30, reconciler=reconciler)
    resolved = app.resolve_record(RecordKind.CONTACT, "10", "20", reconciler=reconciler)
    outcome = app.link_vendor_tour("10", "20", reconciler=reconciler)
    reloaded = app.reload_collection(RecordKind.VENDORS, reconciler=reconciler)

    assert len(snapshot.listings) == 2
    assert saved.origin is RecordOrigin.LOCAL
    assert policy.cancellation_before_minutes == 30
    assert resolved.source is DataSource.STORE
    assert resolved.record.id == saved.id
    assert len(resolved.errors) == 1
    assert outcome is LinkOutcome.CREATED
    assert reloaded.source is DataSource.REMOTE


def test_resolve_listing_record_links_multi_variant_listing() -> None:
    store = FakeRecordStore()
    reconciler = Reconciler(remote=FakeRemoteSource(default_catalog()), store=store)

    opened = app.resolve_listing_record("2", RecordKind.CONTACT, reconciler=reconciler)

    assert opened.listing.product_name == "Sunset"
    assert opened.link is LinkOutcome.CREATED
    assert [(link.vendor_id, link.tour_id) for link in store.links] == [("10", "21")]
    assert (opened.resolved.record.vendor_id, opened.resolved.record.tour_id) == ("10", "21")


def test_resolve_listing_record_rejects_unknown_listing() -> None:
    store = FakeRecordStore()
    reconciler = Reconciler(remote=FakeRemoteSource(default_catalog()), store=store)

    with pytest.raises(ValueError, match="Unknown listing: 99"):
        app.resolve_listing_record("99", RecordKind.POLICY, reconciler=reconciler)

    assert store.links == []
