"""Reconciliation between the remote demo source and the local record store."""

from __future__ import annotations

from .matching import find_matching_record, ids_match, normalize_id
from .normalize import RecordNormalizationError
from .reconciler import Reconciler
from .results import (
    CatalogSnapshot,
    CollectionLoad,
    ListingRecordResult,
    RecoverableError,
    ResolveResult,
    RetryToken,
)

__all__ = [
    "CatalogSnapshot",
    "CollectionLoad",
    "ListingRecordResult",
    "Reconciler",
    "RecordNormalizationError",
    "RecoverableError",
    "ResolveResult",
    "RetryToken",
    "find_matching_record",
    "ids_match",
    "normalize_id",
]
