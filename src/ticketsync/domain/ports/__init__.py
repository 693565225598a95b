"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import RawRecord, RemoteSource, TransportError
from .persistence import PairKeyedRepository, RecordStore, Repository, StoreError
from .unit_of_work import (
    CatalogRepositories,
    CatalogUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "CatalogRepositories",
    "CatalogUnitOfWork",
    "PairKeyedRepository",
    "RawRecord",
    "RecordStore",
    "RemoteSource",
    "Repository",
    "RepositoryCollection",
    "StoreError",
    "TransportError",
    "UnitOfWork",
]
