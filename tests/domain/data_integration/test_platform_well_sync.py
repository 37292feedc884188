from __future__ import annotations

import threading

import pytest

from tests.helpers.platform_wells import (
    FakeFetcher,
    FakePlatformWellUnitOfWork,
    fake_unit_of_work_factory,
    make_platform_record,
    make_well_record,
    two_platforms_with_two_wells,
)
from wellsync.domain.data_integration import (
    DataSource,
    SyncStage,
    SyncStatus,
    sync_platform_wells,
)
from wellsync.domain.errors import HttpFailure, TransportFailure, UnparseableResponse
from wellsync.domain.model import EntityKind
from wellsync.domain.ports.fetching import FetchedBatch, RejectedRecord

PRIMARY = DataSource(label="actual", endpoint="/api/PlatformWell/GetPlatformWellActual")
FALLBACK = DataSource(label="dummy", endpoint="/api/PlatformWell/GetPlatformWellDummy")


def test_happy_path_commits_primary_data() -> None:
    fetcher = FakeFetcher(responses={PRIMARY.endpoint: two_platforms_with_two_wells()})
    uow = FakePlatformWellUnitOfWork()

    report = sync_platform_wells(
        fetcher=fetcher,
        unit_of_work_factory=fake_unit_of_work_factory(uow),
        primary=PRIMARY,
        fallback=FALLBACK,
    )

    assert report.succeeded
    assert report.source == "actual"
    assert report.stages == [
        SyncStage.IDLE,
        SyncStage.AUTHENTICATING,
        SyncStage.FETCHING,
        SyncStage.RECONCILING,
        SyncStage.COMMITTED,
    ]
    assert (report.platforms.inserted, report.wells.inserted) == (2, 4)
    assert report.total_records == 6
    assert fetcher.fetched == [PRIMARY.endpoint]
    assert uow.committed


@pytest.mark.parametrize(
    "primary_error",
    [TransportFailure("timed out"), HttpFailure(503), UnparseableResponse("garbage")],
)
def test_primary_fetch_failure_falls_back_once(primary_error: Exception) -> None:
    fetcher = FakeFetcher(
        responses={
            PRIMARY.endpoint: primary_error,  # type: ignore[dict-item]
            FALLBACK.endpoint: [make_platform_record(1, wells=[make_well_record(11, 1)])],
        }
    )
    uow = FakePlatformWellUnitOfWork()

    report = sync_platform_wells(
        fetcher=fetcher,
        unit_of_work_factory=fake_unit_of_work_factory(uow),
        primary=PRIMARY,
        fallback=FALLBACK,
    )

    assert report.status is SyncStatus.SUCCEEDED
    assert report.source == "dummy"
    assert SyncStage.FAILED_PRIMARY in report.stages
    assert report.stage is SyncStage.COMMITTED
    assert fetcher.fetched == [PRIMARY.endpoint, FALLBACK.endpoint]


def test_authentication_failure_skips_to_fallback() -> None:
    fetcher = FakeFetcher(
        responses={FALLBACK.endpoint: two_platforms_with_two_wells()},
        authenticated=False,
    )

    report = sync_platform_wells(
        fetcher=fetcher,
        unit_of_work_factory=fake_unit_of_work_factory(FakePlatformWellUnitOfWork()),
        primary=PRIMARY,
        fallback=FALLBACK,
    )

    assert report.succeeded
    assert report.stages[:4] == [
        SyncStage.IDLE,
        SyncStage.AUTHENTICATING,
        SyncStage.FAILED_PRIMARY,
        SyncStage.FETCHING,
    ]
    assert fetcher.fetched == [FALLBACK.endpoint]


def test_both_sources_failing_ends_in_failed_state() -> None:
    fetcher = FakeFetcher(
        responses={
            PRIMARY.endpoint: TransportFailure("connection refused"),
            FALLBACK.endpoint: HttpFailure(500),
        }
    )
    uow = FakePlatformWellUnitOfWork()

    report = sync_platform_wells(
        fetcher=fetcher,
        unit_of_work_factory=fake_unit_of_work_factory(uow),
        primary=PRIMARY,
        fallback=FALLBACK,
    )

    assert report.status is SyncStatus.FAILED
    assert report.stage is SyncStage.FAILED
    assert report.failure_stage is SyncStage.FETCHING
    assert report.error is not None
    assert "500" in report.error
    assert len(fetcher.fetched) == 2
    assert not uow.committed


def test_no_fallback_configured_fails_after_primary() -> None:
    fetcher = FakeFetcher(responses={PRIMARY.endpoint: HttpFailure(404)})

    report = sync_platform_wells(
        fetcher=fetcher,
        unit_of_work_factory=fake_unit_of_work_factory(FakePlatformWellUnitOfWork()),
        primary=PRIMARY,
    )

    assert report.status is SyncStatus.FAILED
    assert SyncStage.FAILED_PRIMARY not in report.stages
    assert report.source == "actual"


def test_rejected_items_are_reported_as_errors() -> None:
    batch = FetchedBatch(
        records=[make_platform_record(1, wells=[make_well_record(11, 1)])],
        rejected=(
            RejectedRecord(kind=EntityKind.WELL, id=12, reason="invalid latitude"),
            RejectedRecord(kind=EntityKind.PLATFORM, id=None, reason="missing id"),
        ),
    )
    fetcher = FakeFetcher(responses={PRIMARY.endpoint: batch})
    uow = FakePlatformWellUnitOfWork()

    report = sync_platform_wells(
        fetcher=fetcher,
        unit_of_work_factory=fake_unit_of_work_factory(uow),
        primary=PRIMARY,
        fallback=FALLBACK,
    )

    assert report.succeeded
    assert (report.platforms.inserted, report.wells.inserted) == (1, 1)
    assert (report.wells.errors, report.wells.failed_ids) == (1, [12])
    assert (report.platforms.errors, report.platforms.failed_ids) == (1, [])
    assert uow.committed


def test_empty_responses_end_in_no_data() -> None:
    fetcher = FakeFetcher(responses={PRIMARY.endpoint: [], FALLBACK.endpoint: []})
    uow = FakePlatformWellUnitOfWork()

    report = sync_platform_wells(
        fetcher=fetcher,
        unit_of_work_factory=fake_unit_of_work_factory(uow),
        primary=PRIMARY,
        fallback=FALLBACK,
    )

    assert report.status is SyncStatus.NO_DATA
    assert report.stage is SyncStage.NO_DATA
    assert report.failure_stage is None
    assert not report.succeeded
    assert not uow.committed


def test_reconciliation_failure_is_fatal_without_fallback() -> None:
    fetcher = FakeFetcher(
        responses={
            PRIMARY.endpoint: two_platforms_with_two_wells(),
            FALLBACK.endpoint: two_platforms_with_two_wells(),
        }
    )
    uow = FakePlatformWellUnitOfWork(fail_on_flush=RuntimeError("constraint failed"))

    report = sync_platform_wells(
        fetcher=fetcher,
        unit_of_work_factory=fake_unit_of_work_factory(uow),
        primary=PRIMARY,
        fallback=FALLBACK,
    )

    assert report.status is SyncStatus.FAILED
    assert report.failure_stage is SyncStage.RECONCILING
    assert fetcher.fetched == [PRIMARY.endpoint]
    assert uow.rolled_back


def test_cancel_before_start_runs_nothing() -> None:
    fetcher = FakeFetcher(responses={PRIMARY.endpoint: two_platforms_with_two_wells()})
    cancel = threading.Event()
    cancel.set()

    report = sync_platform_wells(
        fetcher=fetcher,
        unit_of_work_factory=fake_unit_of_work_factory(FakePlatformWellUnitOfWork()),
        primary=PRIMARY,
        fallback=FALLBACK,
        cancel=cancel,
    )

    assert report.status is SyncStatus.FAILED
    assert report.failure_stage is SyncStage.IDLE
    assert fetcher.auth_calls == 0


def test_cancel_during_fetch_stops_before_reconciling() -> None:
    cancel = threading.Event()
    fetcher = FakeFetcher(
        responses={PRIMARY.endpoint: two_platforms_with_two_wells()},
        on_fetch=lambda _endpoint: cancel.set(),
    )
    uow = FakePlatformWellUnitOfWork()

    report = sync_platform_wells(
        fetcher=fetcher,
        unit_of_work_factory=fake_unit_of_work_factory(uow),
        primary=PRIMARY,
        fallback=FALLBACK,
        cancel=cancel,
    )

    assert report.status is SyncStatus.FAILED
    assert report.failure_stage is SyncStage.FETCHING
    assert SyncStage.RECONCILING not in report.stages
    assert uow.platforms.count() == 0
