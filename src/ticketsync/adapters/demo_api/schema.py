"""Pydantic models for demo API collection payloads."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, TypeAdapter

log = logging.getLogger(__name__)

type DemoApiRecord = dict[str, Any]

_RECORD_LIST: TypeAdapter[list[DemoApiRecord]] = TypeAdapter(list[dict[str, Any]])


class DemoApiBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class CollectionEnvelope(DemoApiBaseModel):
    """Object-wrapped collection: ``{"data": [...]}`` or ``{"items": [...]}``."""

    data: list[DemoApiRecord] | None = None
    items: list[DemoApiRecord] | None = None

    def records(self) -> list[DemoApiRecord]:
        if self.data is not None:
            return self.data
        if self.items is not None:
            return self.items
        raise ValueError("Collection envelope has neither 'data' nor 'items'")


def parse_collection(payload: object) -> list[DemoApiRecord]:
    """Validate a decoded collection body into a list of flat record mappings."""

    if isinstance(payload, list):
        return _RECORD_LIST.validate_python(payload)
    if isinstance(payload, dict):
        return CollectionEnvelope.model_validate(payload).records()
    raise ValueError(f"Unexpected collection payload type: {type(payload).__name__}")
