"""SQLAlchemy adapter package for wellsync."""

from __future__ import annotations

from .mappings import (
    enable_sqlite_foreign_keys,
    mapper_registry,
    platform_table,
    start_mappers,
    well_table,
)
from .repositories import (
    SqlAlchemyPlatformRepository,
    SqlAlchemySyncedEntityRepository,
    SqlAlchemyWellRepository,
    StoreStats,
    read_store_stats,
)
from .unit_of_work import (
    SqlAlchemyPlatformWellUnitOfWork,
    StartupError,
    shutdown,
    startup,
    store_stats,
)

__all__ = [
    "SqlAlchemyPlatformRepository",
    "SqlAlchemyPlatformWellUnitOfWork",
    "SqlAlchemySyncedEntityRepository",
    "SqlAlchemyWellRepository",
    "StartupError",
    "StoreStats",
    "enable_sqlite_foreign_keys",
    "mapper_registry",
    "platform_table",
    "read_store_stats",
    "shutdown",
    "start_mappers",
    "startup",
    "store_stats",
    "well_table",
]
