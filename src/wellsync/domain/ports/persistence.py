"""Ports for persisting reconciled entities."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from wellsync.domain.model import Platform, SyncedEntity, Well

if TYPE_CHECKING:
    from datetime import datetime


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class SyncedEntityRepository[TSynced: SyncedEntity](Repository[TSynced], Protocol):
    """Repository contract for API-mirrored entities keyed by upstream id."""

    def index_by_id(self) -> dict[int, TSynced]: ...

    def count(self) -> int: ...

    def latest_reconciled_at(self) -> datetime | None: ...


@runtime_checkable
class PlatformRepository(SyncedEntityRepository[Platform], Protocol):
    """Repository contract for platforms."""


@runtime_checkable
class WellRepository(SyncedEntityRepository[Well], Protocol):
    """Repository contract for wells."""
