"""Reconciliation engine: upsert fetched records into the store.

For every incoming record the engine decides insert, update or unchanged by
comparing the declared tracked fields, then applies the decisions for both
platforms and wells inside one unit of work. Platforms are flushed before wells
so a well can reference a platform inserted earlier in the same batch; a well
whose platform is neither stored nor accepted in the batch is counted as an
error instead of reaching the store.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from wellsync.domain.errors import SyncCancelled, TransactionFailure
from wellsync.domain.model import MAX_NAME_LENGTH, EntityKind, Platform, SyncedEntity, Well
from wellsync.domain.ports.fetching import PlatformRecord, WellRecord, flatten_wells

from .contracts import BatchResult, EntityReconcileResult, ReconcileAction, strongest_action
from .diff import (
    COORDINATE_TOLERANCE,
    TrackedField,
    apply_changes,
    changed_fields,
    platform_fields,
    well_fields,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Collection, Sequence

    from wellsync.domain.ports.persistence import (
        PlatformRepository,
        SyncedEntityRepository,
        WellRepository,
    )
    from wellsync.domain.ports.unit_of_work import PlatformWellUnitOfWork

log = getLogger(__name__)

type IncomingRecord = PlatformRecord | WellRecord


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class EntitySpec[TEntity: SyncedEntity]:
    kind: EntityKind
    entity_cls: type[TEntity]
    fields: tuple[TrackedField, ...]


@dataclass(slots=True)
class ReconciliationEngine:
    """Compute and apply per-record decisions for platforms and wells."""

    clock: Callable[[], datetime] = utcnow
    coordinate_tolerance: float = COORDINATE_TOLERANCE

    def reconcile(
        self,
        records: Sequence[PlatformRecord],
        unit_of_work_factory: Callable[[], PlatformWellUnitOfWork],
        *,
        should_abort: Callable[[], bool] | None = None,
    ) -> BatchResult:
        """Reconcile ``records`` and their wells in one transaction.

        Raises ``TransactionFailure`` when the store rejects the batch and
        ``SyncCancelled`` when ``should_abort`` fires before commit; in both cases
        nothing from the batch is persisted.
        """

        try:
            with unit_of_work_factory() as uow:
                platform_repository = uow.repositories.platforms
                # grows with every platform inserted below
                known_platforms = platform_repository.index_by_id()
                platforms = self.reconcile_platforms(
                    records,
                    platform_repository,
                    existing=known_platforms,
                )
                uow.flush()
                wells = self.reconcile_wells(
                    flatten_wells(records),
                    uow.repositories.wells,
                    platform_ids=known_platforms.keys(),
                )
                uow.flush()
                if should_abort is not None and should_abort():
                    raise SyncCancelled("sync aborted before commit; batch rolled back")
                uow.commit()
        except SyncCancelled:
            log.warning("Reconciliation aborted before commit; batch rolled back")
            raise
        except Exception as exc:
            log.exception("Reconciliation failed; batch rolled back")
            raise TransactionFailure(f"transaction failed: {exc}") from exc

        return BatchResult(platforms=platforms, wells=wells)

    def reconcile_platforms(
        self,
        records: Sequence[PlatformRecord],
        repository: PlatformRepository,
        *,
        existing: dict[int, Platform] | None = None,
    ) -> EntityReconcileResult:
        spec = EntitySpec(
            kind=EntityKind.PLATFORM,
            entity_cls=Platform,
            fields=platform_fields(self.coordinate_tolerance),
        )
        return self._reconcile(records, repository, spec, existing=existing)

    def reconcile_wells(
        self,
        records: Sequence[WellRecord],
        repository: WellRepository,
        *,
        platform_ids: Collection[int] | None = None,
    ) -> EntityReconcileResult:
        """Reconcile wells; with ``platform_ids`` set, wells of other platforms are errors."""

        spec = EntitySpec(
            kind=EntityKind.WELL,
            entity_cls=Well,
            fields=well_fields(self.coordinate_tolerance),
        )
        return self._reconcile(records, repository, spec, parent_ids=platform_ids)

    def _reconcile[TEntity: SyncedEntity](
        self,
        records: Sequence[IncomingRecord],
        repository: SyncedEntityRepository[TEntity],
        spec: EntitySpec[TEntity],
        *,
        existing: dict[int, TEntity] | None = None,
        parent_ids: Collection[int] | None = None,
    ) -> EntityReconcileResult:
        result = EntityReconcileResult(kind=spec.kind)
        log.info("Synchronizing %s %s records...", len(records), spec.kind)
        if not records:
            return result

        if existing is None:
            existing = repository.index_by_id()
        decisions: dict[int, ReconcileAction] = {}
        now = self.clock()

        for record in records:
            try:
                if parent_ids is not None:
                    check_parent(record, spec.kind, parent_ids)
                action = self._decide(record, existing, repository, spec, now)
            except Exception:  # noqa: BLE001
                log.exception("Error processing %s id %s", spec.kind, record.id)
                result.record_error(record.id)
                continue
            decisions[record.id] = strongest_action(decisions.get(record.id), action)

        result.count_decisions(decisions)
        log.info(
            "%s sync completed: %s inserted, %s updated, %s unchanged, %s errors",
            spec.kind,
            result.inserted,
            result.updated,
            result.unchanged,
            result.errors,
        )
        return result

    def _decide[TEntity: SyncedEntity](
        self,
        record: IncomingRecord,
        existing: dict[int, TEntity],
        repository: SyncedEntityRepository[TEntity],
        spec: EntitySpec[TEntity],
        now: datetime,
    ) -> ReconcileAction:
        values = resolve_values(record, spec.kind, spec.fields)
        entity = existing.get(record.id)
        if entity is None:
            entity = spec.entity_cls(id=record.id, last_reconciled_at=now, **values)
            repository.add(entity)
            # later duplicates in the same batch update this instance
            existing[record.id] = entity
            log.debug("Inserted new %s id %s: %s", spec.kind, record.id, entity.name)
            return ReconcileAction.INSERT

        changed = changed_fields(entity, values, spec.fields)
        if not changed:
            return ReconcileAction.UNCHANGED
        apply_changes(entity, values, changed)
        entity.mark_reconciled(now)
        log.debug("Updated %s id %s: %s", spec.kind, record.id, ", ".join(changed))
        return ReconcileAction.UPDATE


def resolve_values(
    record: IncomingRecord,
    kind: EntityKind,
    fields: Sequence[TrackedField],
) -> dict[str, object]:
    """Return validated tracked-field values for ``record``.

    Raises ``ValueError`` for records that cannot be stored.
    """

    values: dict[str, object] = {tracked.name: getattr(record, tracked.name) for tracked in fields}

    name = values.get("name")
    if not isinstance(name, str) or not name.strip():
        values["name"] = f"{kind}_{record.id}"
    elif len(name) > MAX_NAME_LENGTH:
        raise ValueError(f"{kind} {record.id} name exceeds {MAX_NAME_LENGTH} characters")

    for coordinate in ("latitude", "longitude"):
        value = values[coordinate]
        if not isinstance(value, int | float) or not math.isfinite(value):
            raise ValueError(f"{kind} {record.id} has invalid {coordinate}: {value!r}")
        values[coordinate] = float(value)

    for stamp in ("created_at", "updated_at"):
        if values[stamp] is None:
            raise ValueError(f"{kind} {record.id} is missing {stamp}")

    return values


def check_parent(record: IncomingRecord, kind: EntityKind, parent_ids: Collection[int]) -> None:
    """Raise ``ValueError`` when ``record`` points at a platform outside ``parent_ids``."""

    platform_id = getattr(record, "platform_id", None)
    if platform_id not in parent_ids:
        raise ValueError(f"{kind} {record.id} references unknown platform {platform_id}")
