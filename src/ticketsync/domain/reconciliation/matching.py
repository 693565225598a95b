"""Type-tolerant identifier comparison.

The demo source is inconsistent about identifier typing: the same vendor may
arrive as ``7`` in one record and ``"7"`` or ``"07"`` in another. Matching
tries three comparisons in order over the whole collection and the first hit
wins, so an exact textual match always beats a numeric or loose one.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from logging import getLogger
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from ticketsync.domain.ports.fetching import RawRecord

log = getLogger(__name__)

VENDOR_ID_KEYS: Final[tuple[str, ...]] = ("vendorId", "vendor_id")
TOUR_ID_KEYS: Final[tuple[str, ...]] = ("tourId", "tour_id")


def normalize_id(value: object) -> str:
    """Return the canonical text form of an identifier (``7``, ``7.0``, ``" 7 "`` -> ``"7"``)."""

    if value is None:
        return ""
    return _as_text(value).strip()


def _as_text(value: object) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, Decimal) and value == value.to_integral_value():
        return str(int(value))
    return str(value)


def _as_number(value: object) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = Decimal(_as_text(value).strip())
    except InvalidOperation:
        return None
    if not number.is_finite():
        return None
    return number


def _strict_equal(left: object, right: object) -> bool:
    if left is None or right is None:
        return False
    return _as_text(left) == _as_text(right)


def _numeric_equal(left: object, right: object) -> bool:
    left_number = _as_number(left)
    right_number = _as_number(right)
    if left_number is None or right_number is None:
        return False
    return left_number == right_number


def _loose_equal(left: object, right: object) -> bool:
    left_text = normalize_id(left).casefold()
    return bool(left_text) and left_text == normalize_id(right).casefold()


MATCH_STRATEGIES: Final[tuple[tuple[str, Callable[[object, object], bool]], ...]] = (
    ("strict", _strict_equal),
    ("numeric", _numeric_equal),
    ("loose", _loose_equal),
)


def ids_match(left: object, right: object) -> bool:
    """Return whether two identifiers denote the same record under any strategy."""

    return any(equals(left, right) for _name, equals in MATCH_STRATEGIES)


def raw_field(payload: RawRecord, keys: tuple[str, ...]) -> object:
    """Return the first present value among ``keys`` (camelCase before snake_case)."""

    for key in keys:
        if key in payload:
            return payload[key]
    return None


def find_matching_record(
    records: Iterable[RawRecord],
    vendor_id: object,
    tour_id: object,
) -> RawRecord | None:
    """Return the first raw record owned by ``(vendor_id, tour_id)``, or ``None``."""

    candidates = list(records)
    for name, equals in MATCH_STRATEGIES:
        for record in candidates:
            if equals(raw_field(record, VENDOR_ID_KEYS), vendor_id) and equals(
                raw_field(record, TOUR_ID_KEYS), tour_id
            ):
                log.debug("Matched pair (%s, %s) using %s comparison", vendor_id, tour_id, name)
                return record
    return None
