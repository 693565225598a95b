"""SQLAlchemy mapping metadata for the ticketsync domain model."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING, Final

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Dialect,
    Enum,
    Integer,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    orm,
)
from sqlalchemy.orm import configure_mappers

from ticketsync.domain.model import (
    CancellationPolicyRecord,
    ContactRecord,
    Listing,
    ListingKind,
    RecordKind,
    RecordOrigin,
    Tour,
    Vendor,
    VendorTourLink,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Catalog tables ----------------------------------------------------------------

listing_table = Table(
    "listing",
    mapper_registry.metadata,
    Column("id", String, primary_key=True),
    Column("product_name", String, nullable=False, default=""),
    Column("vendor_id", String, nullable=False),
    Column("tour_id", String, nullable=False),
    Column("listing_kind", Enum(ListingKind, native_enum=False), nullable=False),
    Column("status", String, nullable=True),
    Column("updated_at", UTCDateTime, nullable=True),
)

vendor_table = Table(
    "vendor",
    mapper_registry.metadata,
    Column("id", String, primary_key=True),
    Column("name", String, nullable=False, default=""),
    Column("updated_at", UTCDateTime, nullable=True),
)

tour_table = Table(
    "tour",
    mapper_registry.metadata,
    Column("id", String, primary_key=True),
    Column("name", String, nullable=False, default=""),
    Column("location", String, nullable=True),
    Column("vendor_id", String, nullable=True),
    Column("updated_at", UTCDateTime, nullable=True),
)

# Pair-keyed tables -------------------------------------------------------------

contact_record_table = Table(
    "contact_record",
    mapper_registry.metadata,
    Column("id", String, primary_key=True),
    Column("vendor_id", String, nullable=False),
    Column("tour_id", String, nullable=False),
    Column("email", String, nullable=False, default=""),
    Column("phone", String, nullable=False, default=""),
    Column("origin", Enum(RecordOrigin, native_enum=False), nullable=False),
    Column("updated_at", UTCDateTime, nullable=True),
    UniqueConstraint("vendor_id", "tour_id"),
)

cancellation_policy_table = Table(
    "cancellation_policy",
    mapper_registry.metadata,
    Column("id", String, primary_key=True),
    Column("vendor_id", String, nullable=False),
    Column("tour_id", String, nullable=False),
    Column("cancellation_before_minutes", Integer, nullable=False, default=0),
    Column("origin", Enum(RecordOrigin, native_enum=False), nullable=False),
    Column("updated_at", UTCDateTime, nullable=True),
    UniqueConstraint("vendor_id", "tour_id"),
    CheckConstraint("cancellation_before_minutes >= 0", name="non_negative_minutes"),
)

vendor_tour_link_table = Table(
    "vendor_tour_link",
    mapper_registry.metadata,
    Column("id", String, primary_key=True),
    Column("vendor_id", String, nullable=False),
    Column("tour_id", String, nullable=False),
    Column("created_at", UTCDateTime, nullable=False),
    UniqueConstraint("vendor_id", "tour_id"),
)

TABLE_BY_KIND: Final[dict[RecordKind, Table]] = {
    RecordKind.LISTINGS: listing_table,
    RecordKind.VENDORS: vendor_table,
    RecordKind.TOURS: tour_table,
    RecordKind.CONTACT: contact_record_table,
    RecordKind.POLICY: cancellation_policy_table,
}


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Listing, listing_table)
    mapper_registry.map_imperatively(Vendor, vendor_table)
    mapper_registry.map_imperatively(Tour, tour_table)
    mapper_registry.map_imperatively(ContactRecord, contact_record_table)
    mapper_registry.map_imperatively(CancellationPolicyRecord, cancellation_policy_table)
    mapper_registry.map_imperatively(VendorTourLink, vendor_tour_link_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
