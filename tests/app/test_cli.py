from __future__ import annotations

import json

import pytest

from ticketsync.domain.model import (
    CancellationPolicyRecord,
    ContactRecord,
    DataSource,
    LinkOutcome,
    Listing,
    ListingKind,
    RecordKind,
    Tour,
)
from ticketsync.domain.reconciliation import (
    CollectionLoad,
    ListingRecordResult,
    RecoverableError,
    ResolveResult,
)
from ticketsync.ui import cli
from tests.helpers.records import FIXED_NOW


def test_contact_command_prints_resolved_record(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    captured: dict[str, object] = {}

    def fake_resolve(
        kind: RecordKind, vendor_id: str, tour_id: str
    ) -> ResolveResult[ContactRecord]:
        captured.update(kind=kind, vendor_id=vendor_id, tour_id=tour_id)
        return ResolveResult(
            record=ContactRecord(
                id="contact_7_12_1", vendor_id="7", tour_id="12", email="desk@example.com"
            ),
            source=DataSource.STORE,
            errors=[
                RecoverableError(kind=kind, message="contacts unavailable", occurred_at=FIXED_NOW)
            ],
        )

    monkeypatch.setattr(cli, "resolve_record", fake_resolve)

    cli.main(["contact", "7", "12"])

    output = json.loads(capsys.readouterr().out)
    assert captured == {"kind": RecordKind.CONTACT, "vendor_id": "7", "tour_id": "12"}
    assert output["source"] == "store"
    assert output["record"]["email"] == "desk@example.com"
    assert output["errors"][0]["kind"] == "contact"
    assert output["errors"][0]["retry_token"]["timestamp_ms"] == int(FIXED_NOW.timestamp() * 1000)


def test_save_policy_command_passes_minutes(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    def fake_save(
        vendor_id: str, tour_id: str, *, cancellation_before_minutes: int
    ) -> CancellationPolicyRecord:
        return CancellationPolicyRecord(
            id="policy_7_12_1",
            vendor_id=vendor_id,
            tour_id=tour_id,
            cancellation_before_minutes=cancellation_before_minutes,
        )

    monkeypatch.setattr(cli, "save_policy", fake_save)

    cli.main(["save-policy", "7", "12", "--minutes", "90"])

    output = json.loads(capsys.readouterr().out)
    assert output["cancellation_before_minutes"] == 90
    assert output["id"] == "policy_7_12_1"


def test_save_policy_rejects_negative_minutes() -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["save-policy", "7", "12", "--minutes", "-5"])

    assert exc.value.code == 2


def test_validation_errors_exit_with_status_two(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_save(*_: object, **__: object) -> ContactRecord:
        raise ValueError("Both vendor_id and tour_id are required")

    monkeypatch.setattr(cli, "save_contact", fake_save)

    with pytest.raises(SystemExit) as exc:
        cli.main(["save-contact", " ", "12", "--email", "a@example.com"])

    assert exc.value.code == 2


def test_unexpected_failures_exit_with_status_one(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_link(*_: object, **__: object) -> LinkOutcome:
        raise RuntimeError("database locked")

    monkeypatch.setattr(cli, "link_vendor_tour", fake_link)

    with pytest.raises(SystemExit) as exc:
        cli.main(["link", "7", "12"])

    assert exc.value.code == 1


def test_link_command_prints_outcome(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setattr(cli, "link_vendor_tour", lambda *_: LinkOutcome.ALREADY_EXISTS)

    cli.main(["link", "7", "12"])

    output = json.loads(capsys.readouterr().out)
    assert output == {"vendor_id": "7", "tour_id": "12", "outcome": "already_exists"}


def test_retry_command_reloads_collection(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    kinds: list[RecordKind] = []

    def fake_reload(kind: RecordKind) -> CollectionLoad:
        kinds.append(kind)
        return CollectionLoad(
            kind=kind,
            records=[Tour(id="20", name="Harbour Loop")],
            source=DataSource.REMOTE,
        )

    monkeypatch.setattr(cli, "reload_collection", fake_reload)

    cli.main(["retry", "tours"])

    output = json.loads(capsys.readouterr().out)
    assert kinds == [RecordKind.TOURS]
    assert output["source"] == "remote"
    assert output["error"] is None
    assert output["records"][0]["name"] == "Harbour Loop"


def test_retry_rejects_associated_kinds() -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["retry", "contact"])

    assert exc.value.code == 2


def test_listing_command_prints_link_and_record(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    captured: dict[str, object] = {}

    def fake_resolve_listing(listing_id: str, kind: RecordKind) -> ListingRecordResult:
        captured.update(listing_id=listing_id, kind=kind)
        return ListingRecordResult(
            listing=Listing(
                id="2",
                product_name="Sunset",
                vendor_id="7",
                tour_id="12",
                listing_kind=ListingKind.MULTI_VARIANT,
            ),
            resolved=ResolveResult(
                record=CancellationPolicyRecord(
                    id="policy_7_12_1",
                    vendor_id="7",
                    tour_id="12",
                    cancellation_before_minutes=90,
                ),
                source=DataSource.REMOTE,
            ),
            link=LinkOutcome.CREATED,
        )

    monkeypatch.setattr(cli, "resolve_listing_record", fake_resolve_listing)

    cli.main(["listing", "2", "policy"])

    output = json.loads(capsys.readouterr().out)
    assert captured == {"listing_id": "2", "kind": RecordKind.POLICY}
    assert output["link"] == "created"
    assert output["listing"]["listing_kind"] == "multi_variant"
    assert output["record"]["cancellation_before_minutes"] == 90
    assert output["source"] == "remote"
    assert output["errors"] == []


def test_listing_command_rejects_catalog_kinds() -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(["listing", "2", "tours"])

    assert exc.value.code == 2
