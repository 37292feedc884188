"""Platform and well entities mirrored from the upstream API.

Identifiers are assigned upstream and never generated locally. Both entities are
plain dataclasses; persistence is attached by the SQLAlchemy adapter through
imperative mapping.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from wellsync.domain.model.enums import EntityKind

if TYPE_CHECKING:
    from datetime import datetime

MAX_NAME_LENGTH = 255


@dataclass(eq=False, kw_only=True)
class SyncedEntity:
    """Fields shared by every entity kind the engine reconciles."""

    KIND: ClassVar[EntityKind]

    id: int
    name: str
    latitude: float
    longitude: float
    created_at: datetime
    updated_at: datetime
    last_reconciled_at: datetime | None = None

    @property
    def kind(self) -> EntityKind:
        return self.KIND

    def mark_reconciled(self, at: datetime) -> None:
        self.last_reconciled_at = at


@dataclass(eq=False, kw_only=True)
class Platform(SyncedEntity):
    KIND: ClassVar[EntityKind] = EntityKind.PLATFORM


@dataclass(eq=False, kw_only=True)
class Well(SyncedEntity):
    KIND: ClassVar[EntityKind] = EntityKind.WELL

    platform_id: int
