"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from wellsync.adapters.platform_api import PlatformWellClient
from wellsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyPlatformWellUnitOfWork,
    is_started,
    startup,
    store_stats,
)
from wellsync.config import PlatformApiEndpoints, get_platform_api_config, get_sync_config
from wellsync.domain.data_integration import DataSource, SyncReport, sync_platform_wells
from wellsync.domain.ports.unit_of_work import PlatformWellUnitOfWork
from wellsync.domain.reconciliation import ReconciliationEngine

if TYPE_CHECKING:
    import threading

    from wellsync.adapters.sqlalchemy.repositories import StoreStats
    from wellsync.domain.ports.fetching import PlatformWellFetcher

UnitOfWorkFactory = Callable[[], PlatformWellUnitOfWork]
SourceName = Literal["actual", "dummy"]

log = getLogger(__name__)


def _ensure_started() -> None:
    if not is_started():
        startup()


def resolve_sources(
    endpoints: PlatformApiEndpoints,
    *,
    source: SourceName = "actual",
    use_fallback: bool = True,
) -> tuple[DataSource, DataSource | None]:
    """Return the primary source and, when enabled, the other endpoint as fallback."""

    actual = DataSource(label="actual", endpoint=endpoints.actual)
    dummy = DataSource(label="dummy", endpoint=endpoints.dummy)
    primary, other = (actual, dummy) if source == "actual" else (dummy, actual)
    return primary, other if use_fallback else None


def sync_platform_wells_from_api(
    *,
    fetcher: PlatformWellFetcher | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    endpoints: PlatformApiEndpoints | None = None,
    source: SourceName = "actual",
    use_fallback: bool | None = None,
    cancel: threading.Event | None = None,
) -> SyncReport:
    """Synchronise platforms and wells using the configured adapters."""

    sync_config = get_sync_config()
    if fetcher is None:
        api_config = get_platform_api_config()
        fetcher = PlatformWellClient(config=api_config)
        endpoints = endpoints or api_config.endpoints
    effective_endpoints = endpoints or PlatformApiEndpoints()
    effective_fallback = sync_config.use_fallback if use_fallback is None else use_fallback

    if unit_of_work_factory is None:
        _ensure_started()
        unit_of_work_factory = SqlAlchemyPlatformWellUnitOfWork

    primary, fallback = resolve_sources(
        effective_endpoints,
        source=source,
        use_fallback=effective_fallback,
    )
    log.info(
        "Starting platform/well sync: primary=%s, fallback=%s",
        primary.endpoint,
        fallback.endpoint if fallback else None,
    )

    report = sync_platform_wells(
        fetcher=fetcher,
        unit_of_work_factory=unit_of_work_factory,
        primary=primary,
        fallback=fallback,
        engine=ReconciliationEngine(coordinate_tolerance=sync_config.coordinate_tolerance),
        cancel=cancel,
    )

    log.info(
        "Finished platform/well sync: status=%s, source=%s, records=%s, duration=%s",
        report.status,
        report.source,
        report.total_records,
        report.duration,
    )
    return report


def check_api_health(*, client: PlatformWellClient | None = None) -> bool:
    """Return whether the API health endpoint answers with a success status."""

    effective_client = client or PlatformWellClient()
    return effective_client.check_connectivity()


def get_store_stats() -> StoreStats:
    """Return row counts and the latest reconciliation time of the configured store."""

    _ensure_started()
    stats = store_stats()
    log.info(
        "Store holds %s platforms and %s wells (last reconciled %s)",
        stats.platforms,
        stats.wells,
        stats.last_reconciled_at,
    )
    return stats
