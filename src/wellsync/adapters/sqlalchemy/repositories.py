"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import func, select

from wellsync.adapters.sqlalchemy.mappings import platform_table, well_table
from wellsync.domain.model import Platform, SyncedEntity, Well

if TYPE_CHECKING:
    from datetime import datetime

    from sqlalchemy import Table
    from sqlalchemy.orm import Session


class SqlAlchemySyncedEntityRepository[TEntity: SyncedEntity]:
    """Shared queries for entities keyed by their upstream id."""

    def __init__(self, session: Session, entity_cls: type[TEntity], table: Table) -> None:
        self.session = session
        self._entity_cls = entity_cls
        self._table = table

    def add(self, entity: TEntity) -> None:
        self.session.add(entity)

    def index_by_id(self) -> dict[int, TEntity]:
        stmt = select(self._entity_cls)
        return {entity.id: entity for entity in self.session.execute(stmt).scalars()}

    def count(self) -> int:
        stmt = select(func.count()).select_from(self._table)
        return self.session.execute(stmt).scalar_one()

    def latest_reconciled_at(self) -> datetime | None:
        stmt = select(func.max(self._table.c.last_reconciled_at))
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyPlatformRepository(SqlAlchemySyncedEntityRepository[Platform]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Platform, platform_table)


class SqlAlchemyWellRepository(SqlAlchemySyncedEntityRepository[Well]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Well, well_table)


@dataclass(frozen=True, slots=True)
class StoreStats:
    platforms: int
    wells: int
    last_reconciled_at: datetime | None


def read_store_stats(session: Session) -> StoreStats:
    platforms = SqlAlchemyPlatformRepository(session)
    wells = SqlAlchemyWellRepository(session)
    candidates = [
        stamp
        for stamp in (platforms.latest_reconciled_at(), wells.latest_reconciled_at())
        if stamp is not None
    ]
    return StoreStats(
        platforms=platforms.count(),
        wells=wells.count(),
        last_reconciled_at=max(candidates) if candidates else None,
    )
