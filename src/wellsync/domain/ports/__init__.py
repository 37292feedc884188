"""Domain ports: protocols the adapters implement."""

from __future__ import annotations

from .fetching import PlatformRecord, PlatformWellFetcher, WellRecord, flatten_wells
from .persistence import (
    PlatformRepository,
    Repository,
    SyncedEntityRepository,
    WellRepository,
)
from .unit_of_work import (
    PlatformWellRepositories,
    PlatformWellUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "PlatformRecord",
    "PlatformRepository",
    "PlatformWellFetcher",
    "PlatformWellRepositories",
    "PlatformWellUnitOfWork",
    "Repository",
    "RepositoryCollection",
    "SyncedEntityRepository",
    "UnitOfWork",
    "WellRecord",
    "WellRepository",
    "flatten_wells",
]
