"""SQLAlchemy adapter package for ticketsync."""

from __future__ import annotations

from .mappings import (
    TABLE_BY_KIND,
    create_all_tables,
    mapper_registry,
    start_mappers,
)
from .repositories import (
    SqlAlchemyContactRepository,
    SqlAlchemyListingRepository,
    SqlAlchemyPolicyRepository,
    SqlAlchemyTourRepository,
    SqlAlchemyVendorRepository,
    SqlAlchemyVendorTourLinkRepository,
)
from .store import SqlAlchemyRecordStore
from .unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    StartupError,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "TABLE_BY_KIND",
    "SqlAlchemyCatalogUnitOfWork",
    "SqlAlchemyContactRepository",
    "SqlAlchemyListingRepository",
    "SqlAlchemyPolicyRepository",
    "SqlAlchemyRecordStore",
    "SqlAlchemyTourRepository",
    "SqlAlchemyVendorRepository",
    "SqlAlchemyVendorTourLinkRepository",
    "StartupError",
    "create_all_tables",
    "is_started",
    "mapper_registry",
    "shutdown",
    "start_mappers",
]
