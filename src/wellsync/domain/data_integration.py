"""Application service driving one end-to-end platform/well sync.

The happy path runs ``IDLE -> AUTHENTICATING -> FETCHING -> RECONCILING ->
COMMITTED``. When authentication or fetching against the primary source fails
the run moves to ``FAILED_PRIMARY`` and makes exactly one attempt against the
fallback source. Reconciliation failures are fatal for the run.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import timedelta
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from wellsync.domain.errors import (
    AuthFailure,
    FetchError,
    SyncCancelled,
    SyncError,
    UnparseableResponse,
)
from wellsync.domain.model import EntityKind
from wellsync.domain.ports.fetching import FetchedBatch, flatten_wells
from wellsync.domain.reconciliation import EntityReconcileResult, ReconciliationEngine

if TYPE_CHECKING:
    import threading
    from collections.abc import Callable, Iterable

    from wellsync.domain.ports.fetching import PlatformWellFetcher, RejectedRecord
    from wellsync.domain.ports.unit_of_work import PlatformWellUnitOfWork

log = getLogger(__name__)


class SyncStage(StrEnum):
    IDLE = "idle"
    AUTHENTICATING = "authenticating"
    FETCHING = "fetching"
    FAILED_PRIMARY = "failed_primary"
    RECONCILING = "reconciling"
    COMMITTED = "committed"
    NO_DATA = "no_data"
    FAILED = "failed"


class SyncStatus(StrEnum):
    SUCCEEDED = "succeeded"
    NO_DATA = "no_data"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class DataSource:
    """A named endpoint serving platform/well data."""

    label: str
    endpoint: str


@dataclass(slots=True)
class SyncReport:
    """Outcome of a sync run."""

    status: SyncStatus = SyncStatus.FAILED
    source: str | None = None
    stages: list[SyncStage] = field(default_factory=lambda: [SyncStage.IDLE])
    platforms: EntityReconcileResult = field(
        default_factory=lambda: EntityReconcileResult(kind=EntityKind.PLATFORM)
    )
    wells: EntityReconcileResult = field(
        default_factory=lambda: EntityReconcileResult(kind=EntityKind.WELL)
    )
    duration: timedelta = timedelta(0)
    failure_stage: SyncStage | None = None
    error: str | None = None

    @property
    def stage(self) -> SyncStage:
        return self.stages[-1]

    @property
    def succeeded(self) -> bool:
        return self.status is SyncStatus.SUCCEEDED

    @property
    def total_records(self) -> int:
        return self.platforms.total + self.wells.total

    def enter(self, stage: SyncStage) -> None:
        log.debug("Sync stage %s -> %s", self.stage, stage)
        self.stages.append(stage)

    def fail(self, stage: SyncStage, error: SyncError) -> None:
        self.status = SyncStatus.FAILED
        self.failure_stage = stage
        self.error = str(error)
        self.enter(SyncStage.FAILED)


@dataclass(slots=True)
class _Attempt:
    fetched: FetchedBatch | None = None
    stage: SyncStage = SyncStage.FETCHING
    error: FetchError | None = None


def sync_platform_wells(
    *,
    fetcher: PlatformWellFetcher,
    unit_of_work_factory: Callable[[], PlatformWellUnitOfWork],
    primary: DataSource,
    fallback: DataSource | None = None,
    engine: ReconciliationEngine | None = None,
    cancel: threading.Event | None = None,
) -> SyncReport:
    """Authenticate, fetch, reconcile and report, falling back once on fetch failure."""

    started = time.monotonic()
    report = SyncReport()
    effective_engine = engine or ReconciliationEngine()

    try:
        attempt = _attempt_primary(fetcher, primary, report, cancel)
        source = primary
        if attempt.error is not None and fallback is not None:
            log.warning(
                "Primary source %s failed during %s: %s. Trying fallback source %s...",
                primary.label,
                attempt.stage,
                attempt.error,
                fallback.label,
            )
            report.enter(SyncStage.FAILED_PRIMARY)
            _check_cancelled(cancel)
            attempt = _attempt_fetch(fetcher, fallback, report)
            source = fallback

        report.source = source.label
        if attempt.error is not None:
            _finish_without_data(report, attempt)
            return report

        fetched = attempt.fetched or FetchedBatch(records=[])
        records = fetched.records
        log.info(
            "Received %s platforms with %s wells from %s source",
            len(records),
            len(flatten_wells(records)),
            source.label,
        )

        _check_cancelled(cancel)
        report.enter(SyncStage.RECONCILING)
        try:
            batch = effective_engine.reconcile(
                records,
                unit_of_work_factory,
                should_abort=cancel.is_set if cancel is not None else None,
            )
        except SyncError as exc:
            report.fail(SyncStage.RECONCILING, exc)
            log.error("Sync failed during %s: %s", SyncStage.RECONCILING, exc)
            return report

        report.platforms = batch.platforms
        report.wells = batch.wells
        _count_rejected(report, fetched.rejected)
        report.status = SyncStatus.SUCCEEDED
        report.enter(SyncStage.COMMITTED)
    except SyncCancelled as exc:
        report.fail(report.stage, exc)
        log.warning("Sync cancelled: %s", exc)
    finally:
        report.duration = timedelta(seconds=time.monotonic() - started)

    if report.succeeded:
        log.info(
            "Sync completed successfully in %s. Platforms: %s inserted, %s updated. "
            "Wells: %s inserted, %s updated.",
            report.duration,
            report.platforms.inserted,
            report.platforms.updated,
            report.wells.inserted,
            report.wells.updated,
        )
    return report


def _attempt_primary(
    fetcher: PlatformWellFetcher,
    source: DataSource,
    report: SyncReport,
    cancel: threading.Event | None,
) -> _Attempt:
    _check_cancelled(cancel)
    report.enter(SyncStage.AUTHENTICATING)
    log.info("Authenticating with API...")
    if not fetcher.authenticate():
        return _Attempt(
            stage=SyncStage.AUTHENTICATING,
            error=AuthFailure("failed to authenticate with API"),
        )
    _check_cancelled(cancel)
    return _attempt_fetch(fetcher, source, report)


def _attempt_fetch(
    fetcher: PlatformWellFetcher,
    source: DataSource,
    report: SyncReport,
) -> _Attempt:
    report.enter(SyncStage.FETCHING)
    log.info("Fetching %s platform/well data from %s...", source.label, source.endpoint)
    try:
        fetched = fetcher.fetch(source.endpoint)
    except FetchError as exc:
        return _Attempt(stage=SyncStage.FETCHING, error=exc)
    if not fetched.records:
        return _Attempt(
            stage=SyncStage.FETCHING,
            error=UnparseableResponse("no data received from API", empty=True),
        )
    return _Attempt(fetched=fetched)


def _finish_without_data(report: SyncReport, attempt: _Attempt) -> None:
    error = attempt.error
    if isinstance(error, UnparseableResponse) and error.empty:
        report.status = SyncStatus.NO_DATA
        report.error = str(error)
        report.enter(SyncStage.NO_DATA)
        log.warning("Nothing to sync: %s source returned no records", report.source)
        return
    if error is not None:
        report.fail(attempt.stage, error)
        log.error("Sync failed during %s: %s", attempt.stage, error)


def _check_cancelled(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise SyncCancelled


def _count_rejected(report: SyncReport, rejected: Iterable[RejectedRecord]) -> None:
    for item in rejected:
        result = report.platforms if item.kind is EntityKind.PLATFORM else report.wells
        result.record_error(item.id)
    if report.platforms.errors or report.wells.errors:
        log.warning(
            "Sync finished with %s platform and %s well errors",
            report.platforms.errors,
            report.wells.errors,
        )
