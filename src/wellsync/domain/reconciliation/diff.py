"""Data-driven change detection for reconciled entities.

Each entity kind declares the fields it tracks; coordinates carry an absolute
tolerance so serialization round-trip noise never reads as a change.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from wellsync.domain.model import SyncedEntity

COORDINATE_TOLERANCE = 1e-6


@dataclass(frozen=True, slots=True)
class TrackedField:
    name: str
    tolerance: float | None = None

    def differs(self, current: object, incoming: object) -> bool:
        if (
            self.tolerance is not None
            and isinstance(current, int | float)
            and isinstance(incoming, int | float)
        ):
            return abs(current - incoming) > self.tolerance
        return current != incoming


def platform_fields(tolerance: float = COORDINATE_TOLERANCE) -> tuple[TrackedField, ...]:
    return (
        TrackedField("name"),
        TrackedField("latitude", tolerance),
        TrackedField("longitude", tolerance),
        TrackedField("created_at"),
        TrackedField("updated_at"),
    )


def well_fields(tolerance: float = COORDINATE_TOLERANCE) -> tuple[TrackedField, ...]:
    return (TrackedField("platform_id"), *platform_fields(tolerance))


PLATFORM_FIELDS = platform_fields()
WELL_FIELDS = well_fields()


def changed_fields(
    entity: SyncedEntity,
    values: Mapping[str, object],
    fields: Iterable[TrackedField],
) -> tuple[str, ...]:
    """Return the names of tracked fields whose incoming value differs from ``entity``."""

    return tuple(
        tracked.name
        for tracked in fields
        if tracked.differs(getattr(entity, tracked.name), values[tracked.name])
    )


def apply_changes(
    entity: SyncedEntity,
    values: Mapping[str, object],
    names: Iterable[str],
) -> None:
    for name in names:
        setattr(entity, name, values[name])
