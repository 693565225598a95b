"""Record store port implemented with one SQLAlchemy unit of work per operation."""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from dataclasses import replace
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Final

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ticketsync.domain.model import LinkOutcome, RecordKind, VendorTourLink
from ticketsync.domain.ports.persistence import StoreError

from .unit_of_work import SqlAlchemyCatalogUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from ticketsync.domain.model import AssociatedRecord, Record
    from ticketsync.domain.ports.persistence import (
        PairKeyedRepository,
        RecordStore,
        Repository,
    )
    from ticketsync.domain.ports.unit_of_work import CatalogRepositories

log = getLogger(__name__)

_REPOSITORY_BY_KIND: Final[dict[RecordKind, str]] = {
    RecordKind.LISTINGS: "listings",
    RecordKind.VENDORS: "vendors",
    RecordKind.TOURS: "tours",
    RecordKind.CONTACT: "contacts",
    RecordKind.POLICY: "policies",
}


def _utcnow() -> datetime:
    return datetime.now(UTC)


@contextmanager
def _store_errors(kind: RecordKind | None, action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        log.error("Store %s failed for %s: %s", action, kind or "links", exc)
        raise StoreError(kind, f"{action} failed: {exc}") from exc


class SqlAlchemyRecordStore:
    """Persistent store adapter; every call is an independent point operation."""

    def __init__(
        self,
        *,
        unit_of_work_factory: Callable[[], SqlAlchemyCatalogUnitOfWork] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._unit_of_work_factory = unit_of_work_factory or SqlAlchemyCatalogUnitOfWork
        self._clock = clock or _utcnow

    def find_one(self, kind: RecordKind, vendor_id: str, tour_id: str) -> AssociatedRecord | None:
        with _store_errors(kind, "lookup"), self._unit_of_work_factory() as uow:
            return _pair_repository(uow.repositories, kind).find_by_pair(vendor_id, tour_id)

    def list_all(self, kind: RecordKind) -> list[Record]:
        with _store_errors(kind, "list"), self._unit_of_work_factory() as uow:
            return list(_repository(uow.repositories, kind).list_all())

    def upsert[TRecord: Record](self, kind: RecordKind, record: TRecord) -> TRecord:
        if record.KIND is not kind:
            raise ValueError(f"Cannot store a {type(record).__name__} as {kind}")
        if not record.id:
            raise ValueError(f"Cannot store a {kind} record without an id")

        with _store_errors(kind, "upsert"), self._unit_of_work_factory() as uow:
            repository: Repository[TRecord] = _repository(uow.repositories, kind)  # type: ignore[assignment]
            now = self._clock()
            existing = repository.get(record.id)
            if existing is None:
                stored = replace(record, updated_at=now)
                repository.add(stored)
            else:
                for name in record.MUTABLE_FIELDS:
                    setattr(existing, name, getattr(record, name))
                existing.updated_at = now
                stored = existing
            uow.commit()
        return stored

    def find_link(self, vendor_id: str, tour_id: str) -> VendorTourLink | None:
        with _store_errors(None, "link lookup"), self._unit_of_work_factory() as uow:
            return uow.repositories.links.find_by_pair(vendor_id, tour_id)

    def insert_link(self, vendor_id: str, tour_id: str) -> LinkOutcome:
        with _store_errors(None, "link insert"), self._unit_of_work_factory() as uow:
            links = uow.repositories.links
            if links.find_by_pair(vendor_id, tour_id) is not None:
                return LinkOutcome.ALREADY_EXISTS
            links.add(
                VendorTourLink(
                    id=uuid.uuid4().hex,
                    vendor_id=vendor_id,
                    tour_id=tour_id,
                    created_at=self._clock(),
                )
            )
            try:
                uow.commit()
            except IntegrityError:
                uow.rollback()
                log.info("Vendor %s / tour %s linked concurrently", vendor_id, tour_id)
                return LinkOutcome.ALREADY_EXISTS
        return LinkOutcome.CREATED


def _repository(repositories: CatalogRepositories, kind: RecordKind) -> Repository[Record]:
    return getattr(repositories, _REPOSITORY_BY_KIND[kind])


def _pair_repository(
    repositories: CatalogRepositories, kind: RecordKind
) -> PairKeyedRepository[AssociatedRecord]:
    if not kind.is_associated:
        raise ValueError(f"{kind} records are not keyed by vendor and tour")
    return getattr(repositories, _REPOSITORY_BY_KIND[kind])


if TYPE_CHECKING:
    _store_check: RecordStore = SqlAlchemyRecordStore()
