from __future__ import annotations

from decimal import Decimal

import pytest

from ticketsync.domain.reconciliation import find_matching_record, ids_match, normalize_id


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (7, "7"),
        (7.0, "7"),
        (" 7 ", "7"),
        (Decimal("7.00"), "7"),
        ("abc", "abc"),
        (None, ""),
    ],
)
def test_normalize_id_produces_canonical_text(raw: object, expected: str) -> None:
    assert normalize_id(raw) == expected


def test_ids_match_across_types() -> None:
    assert ids_match(7, "7")
    assert ids_match("07", 7)
    assert ids_match(" Tour-A ", "tour-a")
    assert not ids_match("7", "8")
    assert not ids_match(None, None)
    assert not ids_match("", "")


def test_find_matching_record_tolerates_mixed_types() -> None:
    records = [
        {"id": "c-1", "vendorId": 9, "tourId": 9},
        {"id": "c-2", "vendorId": 7, "tourId": "12"},
    ]

    match = find_matching_record(records, "7", 12)

    assert match is not None
    assert match["id"] == "c-2"


def test_find_matching_record_prefers_strict_over_numeric_match() -> None:
    records = [
        {"id": "numeric", "vendorId": "07", "tourId": "12"},
        {"id": "strict", "vendorId": "7", "tourId": "12"},
    ]

    match = find_matching_record(records, "7", "12")

    assert match is not None
    assert match["id"] == "strict"


def test_find_matching_record_falls_back_to_loose_comparison() -> None:
    records = [{"id": "loose", "vendor_id": " ACME ", "tour_id": "Harbour"}]

    match = find_matching_record(records, "acme", "harbour")

    assert match is not None
    assert match["id"] == "loose"


def test_find_matching_record_requires_both_ids() -> None:
    records = [
        {"id": "vendor-only", "vendorId": 7, "tourId": 99},
        {"id": "tour-only", "vendorId": 8, "tourId": 12},
    ]

    assert find_matching_record(records, 7, 12) is None
    assert find_matching_record([], 7, 12) is None
