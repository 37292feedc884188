"""Ports for fetching platform/well data from the upstream API."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from wellsync.domain.model import EntityKind

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime


@dataclass(frozen=True, slots=True, kw_only=True)
class WellRecord:
    """Normalized child record as delivered by the API."""

    id: int
    platform_id: int
    name: str | None
    latitude: float | None
    longitude: float | None
    created_at: datetime | None
    updated_at: datetime | None


@dataclass(frozen=True, slots=True, kw_only=True)
class PlatformRecord:
    """Normalized parent record with its nested wells."""

    id: int
    name: str | None
    latitude: float | None
    longitude: float | None
    created_at: datetime | None
    updated_at: datetime | None
    wells: tuple[WellRecord, ...] = field(default_factory=tuple)


def flatten_wells(records: Iterable[PlatformRecord]) -> list[WellRecord]:
    """Return every well across ``records`` in response order."""

    return [well for record in records for well in record.wells]


@dataclass(frozen=True, slots=True, kw_only=True)
class RejectedRecord:
    """An item the API sent that could not be turned into a record."""

    kind: EntityKind
    id: int | None
    reason: str


@dataclass(frozen=True, slots=True)
class FetchedBatch:
    records: list[PlatformRecord]
    rejected: tuple[RejectedRecord, ...] = ()



@runtime_checkable
class PlatformWellFetcher(Protocol):
    """Port for retrieving platform/well records from an external API.

    ``authenticate`` reports failure as ``False``. ``fetch`` returns the decoded
    records together with the items it had to reject, and raises a
    ``wellsync.domain.errors.FetchError`` subclass.
    """

    def authenticate(self) -> bool: ...

    def fetch(self, endpoint: str) -> FetchedBatch: ...


__all__ = [
    "FetchedBatch",
    "PlatformRecord",
    "PlatformWellFetcher",
    "RejectedRecord",
    "WellRecord",
    "flatten_wells",
]
