"""Result types shared by the reconciliation engine and its callers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from wellsync.domain.model import EntityKind


class ReconcileAction(StrEnum):
    """Decision taken for one incoming record."""

    INSERT = "insert"
    UPDATE = "update"
    UNCHANGED = "unchanged"


_ACTION_RANK: dict[ReconcileAction, int] = {
    ReconcileAction.UNCHANGED: 0,
    ReconcileAction.UPDATE: 1,
    ReconcileAction.INSERT: 2,
}


def strongest_action(
    previous: ReconcileAction | None,
    current: ReconcileAction,
) -> ReconcileAction:
    """Merge decisions for an identifier seen more than once in one batch."""

    if previous is None:
        return current
    return max(previous, current, key=_ACTION_RANK.__getitem__)


@dataclass(slots=True)
class EntityReconcileResult:
    """Outcome of reconciling one entity kind."""

    kind: EntityKind
    inserted: int = 0
    updated: int = 0
    unchanged: int = 0
    errors: int = 0
    failed_ids: list[int] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.inserted + self.updated

    def record_error(self, record_id: int | None) -> None:
        """Count one failed record; ``None`` marks an item whose id could not be read."""

        self.errors += 1
        if record_id is not None:
            self.failed_ids.append(record_id)

    def count_decisions(self, decisions: Mapping[int, ReconcileAction]) -> None:
        for action in decisions.values():
            if action is ReconcileAction.INSERT:
                self.inserted += 1
            elif action is ReconcileAction.UPDATE:
                self.updated += 1
            else:
                self.unchanged += 1


@dataclass(slots=True)
class BatchResult:
    """Outcome of one atomic platform + well reconciliation."""

    platforms: EntityReconcileResult
    wells: EntityReconcileResult

    @property
    def total(self) -> int:
        return self.platforms.total + self.wells.total

    @property
    def errors(self) -> int:
        return self.platforms.errors + self.wells.errors
