"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sqlalchemy import Table, select

from ticketsync.adapters.sqlalchemy.mappings import (
    cancellation_policy_table,
    contact_record_table,
    listing_table,
    tour_table,
    vendor_table,
    vendor_tour_link_table,
)
from ticketsync.domain.model import (
    CancellationPolicyRecord,
    ContactRecord,
    Listing,
    Tour,
    Vendor,
    VendorTourLink,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


class SqlAlchemyRecordRepository[TEntity]:
    """Shared helpers for repositories keyed by a string ``id``."""

    def __init__(self, session: Session, entity_cls: type[TEntity], table: Table) -> None:
        self.session = session
        self._entity_cls = entity_cls
        self._table = table

    def add(self, entity: TEntity) -> None:
        self.session.add(entity)

    def get(self, record_id: str) -> TEntity | None:
        return self.session.get(self._entity_cls, record_id)

    def list_all(self) -> list[TEntity]:
        stmt = select(self._entity_cls).order_by(self._table.c.id)
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyPairKeyedRepository[TEntity](SqlAlchemyRecordRepository[TEntity]):
    """Repository for rows addressed by ``(vendor_id, tour_id)``."""

    def find_by_pair(self, vendor_id: str, tour_id: str) -> TEntity | None:
        stmt = (
            select(self._entity_cls)
            .where(self._table.c.vendor_id == vendor_id)
            .where(self._table.c.tour_id == tour_id)
            .limit(1)
        )
        return self.session.execute(stmt).scalars().first()


class SqlAlchemyListingRepository(SqlAlchemyRecordRepository[Listing]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Listing, listing_table)


class SqlAlchemyVendorRepository(SqlAlchemyRecordRepository[Vendor]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Vendor, vendor_table)


class SqlAlchemyTourRepository(SqlAlchemyRecordRepository[Tour]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Tour, tour_table)


class SqlAlchemyContactRepository(SqlAlchemyPairKeyedRepository[ContactRecord]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, ContactRecord, contact_record_table)


class SqlAlchemyPolicyRepository(SqlAlchemyPairKeyedRepository[CancellationPolicyRecord]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, CancellationPolicyRecord, cancellation_policy_table)


class SqlAlchemyVendorTourLinkRepository(SqlAlchemyPairKeyedRepository[VendorTourLink]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, VendorTourLink, vendor_tour_link_table)


if TYPE_CHECKING:
    from ticketsync.domain.ports.persistence import PairKeyedRepository, Repository

    _session_stub = cast("Session", object())
    _listing_repo: Repository[Listing] = SqlAlchemyListingRepository(_session_stub)
    _contact_repo: PairKeyedRepository[ContactRecord] = SqlAlchemyContactRepository(_session_stub)
    _link_repo: PairKeyedRepository[VendorTourLink] = SqlAlchemyVendorTourLinkRepository(
        _session_stub
    )
