"""Public interface for the demo API adapter."""

from __future__ import annotations

from .client import RemoteCatalogClient
from .schema import CollectionEnvelope, DemoApiRecord, parse_collection

__all__ = [
    "CollectionEnvelope",
    "DemoApiRecord",
    "RemoteCatalogClient",
    "parse_collection",
]
