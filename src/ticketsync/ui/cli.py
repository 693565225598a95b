# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from ticketsync.app import (
    link_vendor_tour,
    load_catalog,
    reload_collection,
    resolve_listing_record,
    resolve_record,
    save_contact,
    save_policy,
)
from ticketsync.config import configure_logging
from ticketsync.domain.model import CATALOG_KINDS, RecordKind

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from ticketsync.domain.model import Record
    from ticketsync.domain.reconciliation import RecoverableError

log = logging.getLogger(__name__)


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Expected a whole number, got {value!r}") from exc
    if number < 0:
        raise argparse.ArgumentTypeError("Minutes must be non-negative")
    return number


def _add_pair_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("vendor_id", help="Vendor identifier")
    parser.add_argument("tour_id", help="Tour identifier")


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile ticket catalog records")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("catalog", help="Load listings, vendors and tours")

    contact = subparsers.add_parser("contact", help="Resolve the contact record for a pair")
    _add_pair_arguments(contact)

    policy = subparsers.add_parser("policy", help="Resolve the cancellation policy for a pair")
    _add_pair_arguments(policy)

    listing = subparsers.add_parser(
        "listing", help="Open a listing's contact or policy, linking multi-variant listings"
    )
    listing.add_argument("listing_id", help="Listing identifier")
    listing.add_argument(
        "kind",
        choices=[str(RecordKind.CONTACT), str(RecordKind.POLICY)],
        help="Record to open",
    )

    save_contact_parser = subparsers.add_parser("save-contact", help="Save contact details")
    _add_pair_arguments(save_contact_parser)
    save_contact_parser.add_argument("--email", default="", help="Contact email address")
    save_contact_parser.add_argument("--phone", default="", help="Contact phone number")

    save_policy_parser = subparsers.add_parser("save-policy", help="Save a cancellation policy")
    _add_pair_arguments(save_policy_parser)
    save_policy_parser.add_argument(
        "--minutes",
        type=_non_negative_int,
        required=True,
        help="Cancellation window in minutes before the tour starts",
    )

    link = subparsers.add_parser("link", help="Add a multi-variant listing to vendor tours")
    _add_pair_arguments(link)

    retry = subparsers.add_parser("retry", help="Reload a single catalog collection")
    retry.add_argument(
        "kind",
        choices=sorted(str(kind) for kind in CATALOG_KINDS),
        help="Collection to reload",
    )

    return parser.parse_args(list(argv))


def _record_payload(record: Record) -> dict[str, object]:
    return asdict(record)


def _error_payload(error: RecoverableError) -> dict[str, object]:
    token = error.retry_token
    return {
        "kind": error.kind,
        "message": error.message,
        "occurred_at": error.occurred_at,
        "retry_token": {"kind": token.kind, "timestamp_ms": token.timestamp_ms},
    }


def _emit(payload: object) -> None:
    print(json.dumps(payload, default=str, indent=2))


def _run_command(args: argparse.Namespace) -> None:
    if args.command == "catalog":
        snapshot = load_catalog()
        _emit(
            {
                "listings": [_record_payload(r) for r in snapshot.listings],
                "vendors": [_record_payload(r) for r in snapshot.vendors],
                "tours": [_record_payload(r) for r in snapshot.tours],
                "sources": {str(kind): source for kind, source in snapshot.sources.items()},
                "errors": [_error_payload(e) for e in snapshot.errors],
            }
        )
    elif args.command in {"contact", "policy"}:
        kind = RecordKind.CONTACT if args.command == "contact" else RecordKind.POLICY
        result = resolve_record(kind, args.vendor_id, args.tour_id)
        _emit(
            {
                "record": _record_payload(result.record),
                "source": result.source,
                "errors": [_error_payload(e) for e in result.errors],
            }
        )
    elif args.command == "listing":
        opened = resolve_listing_record(args.listing_id, RecordKind(args.kind))
        _emit(
            {
                "listing": _record_payload(opened.listing),
                "link": opened.link,
                "record": _record_payload(opened.resolved.record),
                "source": opened.resolved.source,
                "errors": [_error_payload(e) for e in opened.resolved.errors],
            }
        )
    elif args.command == "save-contact":
        record = save_contact(args.vendor_id, args.tour_id, email=args.email, phone=args.phone)
        _emit(_record_payload(record))
    elif args.command == "save-policy":
        record = save_policy(
            args.vendor_id,
            args.tour_id,
            cancellation_before_minutes=args.minutes,
        )
        _emit(_record_payload(record))
    elif args.command == "link":
        outcome = link_vendor_tour(args.vendor_id, args.tour_id)
        _emit({"vendor_id": args.vendor_id, "tour_id": args.tour_id, "outcome": outcome})
    elif args.command == "retry":
        load = reload_collection(RecordKind(args.kind))
        _emit(
            {
                "kind": load.kind,
                "source": load.source,
                "records": [_record_payload(r) for r in load.records],
                "error": _error_payload(load.error) if load.error else None,
            }
        )
    else:
        raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(verbose=parsed_args.verbose)

    try:
        _run_command(parsed_args)
    except ValueError:
        log.exception("Invalid input")
        sys.exit(2)
    except Exception:
        log.exception("Command failed")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
